"""API routers for the potluck gallery server."""

from potluck.routers.recipes import router as recipes_router

__all__ = [
    "recipes_router",
]
