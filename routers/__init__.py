from routers.admin import router as admin_router
from routers.auth import router as auth_router
from routers.public import router as public_router

__all__ = ["admin_router", "auth_router", "public_router"]
