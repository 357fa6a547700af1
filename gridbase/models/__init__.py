# File: /gridbase/models/__init__.py | Version: 1.0 | Title: Models Package Exports
from .core_entities import BaseEntity, Column, Row, Table, User
from .view import View

__all__ = [
    "User",
    "BaseEntity",
    "Table",
    "Column",
    "Row",
    "View",
]
