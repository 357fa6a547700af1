# File: /gridbase/crud/__init__.py | Version: 1.0 | Path: /gridbase/crud/__init__.py
from . import core_entities, filtering, rows, view

__all__ = ["core_entities", "filtering", "rows", "view"]
