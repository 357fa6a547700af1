# File: /gridbase/schemas/auth.py | Version: 1.0 | Title: Auth token & user schemas
from typing import Optional

from pydantic import EmailStr

from gridbase.schemas._base import BaseSchema


class Token(BaseSchema):
    access_token: str
    token_type: str = "bearer"


class UserOut(BaseSchema):
    id: str
    email: EmailStr
    full_name: Optional[str] = None
