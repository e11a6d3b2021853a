"""HTTP facade: routers, dependencies and the response envelope."""

from .analytics_router import router as analytics_router
from .auth_router import router as auth_router
from .responses import register_exception_handlers

__all__ = ["analytics_router", "auth_router", "register_exception_handlers"]
