"""API route modules."""
from .sessions import router as sessions_router
from .email import router as email_router

__all__ = [
    "sessions_router",
    "email_router",
]
