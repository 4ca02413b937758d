"""API Routers package."""

from learnloop.routers import admin as admin_router
from learnloop.routers import auth as auth_router
from learnloop.routers import health as health_router
from learnloop.routers import learning as learning_router
from learnloop.routers import sessions as sessions_router
from learnloop.routers import user as user_router

__all__ = [
    "admin_router",
    "auth_router",
    "health_router",
    "learning_router",
    "sessions_router",
    "user_router",
]
