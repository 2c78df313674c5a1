"""API routes package."""

from upload_server.routes.auth_routes import router as auth_router
from upload_server.routes.upload_routes import router as upload_router

__all__ = ["auth_router", "upload_router"]
