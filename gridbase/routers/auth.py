# File: /gridbase/routers/auth.py | Version: 1.0 | Title: Auth Router (JSON+form tolerant) + Access Tokens
from __future__ import annotations

import logging
from typing import Any, Dict, Optional

from fastapi import APIRouter, Depends, Form, HTTPException, Request, status
from sqlalchemy.orm import Session

from gridbase.crud import core_entities as crud_core
from gridbase.db.session import get_db
from gridbase.models import User
from gridbase.schemas.auth import Token, UserOut
from gridbase.security import (
    create_access_token,
    get_current_user,
    get_password_hash,
    verify_password,
)

log = logging.getLogger(__name__)

router = APIRouter(prefix="/auth", tags=["Auth"])


# ---------------------------
# Utilities
# ---------------------------


async def _read_json_or_form(request: Request) -> Dict[str, Any]:
    """Accept JSON or form-encoded bodies and normalize keys."""
    ctype = (request.headers.get("content-type") or "").lower()
    data: Dict[str, Any] = {}
    if "application/json" in ctype:
        try:
            body = await request.json()
        except ValueError:
            body = None
        if isinstance(body, dict):
            data = body
    else:
        form = await request.form()
        data = dict(form)

    # alias: username -> email (OAuth-style)
    if "username" in data and "email" not in data:
        data["email"] = data["username"]
    return data


def _credentials(payload: Dict[str, Any]) -> tuple[str, Optional[str]]:
    email = (payload.get("email") or "").strip().lower()
    password = payload.get("password")
    if not email or not password:
        raise HTTPException(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            detail="Email and password required",
        )
    return email, password


def _authenticate(db: Session, email: str, password: str) -> User:
    user = db.query(User).filter(User.email == email).first()
    if not user or not verify_password(password, user.hashed_password):
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Incorrect email or password",
        )
    return user


def _issue_token_for_user(user: User) -> Dict[str, str]:
    return {"access_token": create_access_token({"sub": str(user.id)}), "token_type": "bearer"}


# ---------------------------
# Endpoints
# ---------------------------


@router.post("/register", response_model=UserOut)
async def register(request: Request, db: Session = Depends(get_db)):
    """
    Register a user. Idempotent for an existing email.
    New users get a first base so the workspace is never empty.
    Accepts JSON or form {email, password, [full_name]}.
    """
    payload = await _read_json_or_form(request)
    email, password = _credentials(payload)
    full_name: Optional[str] = payload.get("full_name")

    user = db.query(User).filter(User.email == email).first()
    if not user:
        user = User(
            email=email,
            full_name=full_name,
            hashed_password=get_password_hash(password),
            is_active=True,
        )
        db.add(user)
        db.commit()
        db.refresh(user)
        crud_core.create_base(db, user_id=user.id)
        log.info("Registered user %s", user.id)
    return user


@router.post("/login", response_model=Token)
async def login(request: Request, db: Session = Depends(get_db)):
    """Login with JSON or form {email/username, password}."""
    payload = await _read_json_or_form(request)
    email, password = _credentials(payload)
    return _issue_token_for_user(_authenticate(db, email, password))


@router.post("/token", response_model=Token)
def login_oauth_form(
    db: Session = Depends(get_db),
    username: str = Form(...),
    password: str = Form(...),
):
    """OAuth2 form variant (Swagger "Authorize" button)."""
    return _issue_token_for_user(_authenticate(db, (username or "").strip().lower(), password))


@router.get("/me", response_model=UserOut)
def me(current_user: User = Depends(get_current_user)):
    return current_user


@router.get("/protected")
def protected(current_user: User = Depends(get_current_user)):
    return {"ok": True, "user_id": str(current_user.id)}
