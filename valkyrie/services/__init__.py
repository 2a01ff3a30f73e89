"""
Service layer

Business logic between the routers and the repositories.
"""

from .auth_service import AuthService
from .guild_service import GuildService
from .mail_service import MailService
from .user_service import UserService

__all__ = [
    "AuthService",
    "GuildService",
    "MailService",
    "UserService",
]
