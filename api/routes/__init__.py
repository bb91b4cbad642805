"""
API route handlers.
"""

from api.routes.email import router as email_router
from api.routes.chat import router as chat_router

__all__ = ["email_router", "chat_router"]
