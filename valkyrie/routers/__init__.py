"""
Router module

HTTP endpoints. Each router receives the request, resolves its dependencies
and hands the work to a service.
"""

from .guild import router as guild_router
from .user import router as user_router

__all__ = [
    "user_router",
    "guild_router",
]
