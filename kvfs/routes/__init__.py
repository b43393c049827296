"""API routes package."""

from kvfs.routes.fs_routes import router as fs_router

__all__ = ["fs_router"]
