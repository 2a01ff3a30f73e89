"""
Data models

SQLModel table definitions. Importing this package registers every table on
SQLModel.metadata.
"""
from valkyrie.models.user import Friend, FriendRequest, User
from valkyrie.models.guild import Ban, Guild, Member
from valkyrie.models.session import PasswordResetToken, UserSession

__all__ = [
    "User",
    "Friend",
    "FriendRequest",
    "Guild",
    "Member",
    "Ban",
    "UserSession",
    "PasswordResetToken",
]
