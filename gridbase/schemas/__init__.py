# File: /gridbase/schemas/__init__.py | Version: 1.0 | Path: /gridbase/schemas/__init__.py
from . import auth, core_entities, filters, view

__all__ = ["auth", "core_entities", "filters", "view"]
