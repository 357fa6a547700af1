# File: /gridbase/main.py | Version: 1.0 | Title: FastAPI App (router includes + optional standardized errors)
from __future__ import annotations

import importlib
import importlib.util
import logging

from fastapi import FastAPI

from gridbase.core.config import settings
from gridbase.core.logging import configure_logging

configure_logging()
# Silence very verbose multipart parser logs to avoid pytest "closed file" noise
logging.getLogger("python_multipart.multipart").setLevel(logging.WARNING)

app = FastAPI(title="Gridbase API")


def include_if_exists(module_path: str, attr_name: str = "router") -> bool:
    spec = importlib.util.find_spec(module_path)
    if not spec:
        return False
    mod = importlib.import_module(module_path)
    router = getattr(mod, attr_name, None)
    if router is not None:
        app.include_router(router)
        return True
    return False


include_if_exists("gridbase.routers.auth")
include_if_exists("gridbase.routers.core_entities")
include_if_exists("gridbase.routers.rows")
include_if_exists("gridbase.routers.views")
include_if_exists("gridbase.routers.search")
include_if_exists("gridbase.routers.health")

# Optional standardized error responses
if getattr(settings, "ENABLE_STD_ERRORS", False):
    from gridbase.core.error_handlers import register_exception_handlers

    register_exception_handlers(app)
