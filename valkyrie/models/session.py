from datetime import datetime

from sqlalchemy.types import TIMESTAMP
from sqlmodel import Field

from valkyrie.models.base import BaseModel


class UserSession(BaseModel, table=True):
    """
    Server-side login session. The token travels in the session cookie.
    """

    __tablename__ = "sessions"

    token: str = Field(primary_key=True, max_length=64)

    user_id: str = Field(
        foreign_key="users.id",
        nullable=False,
        index=True,
        ondelete="CASCADE",
    )

    expires_at: datetime = Field(sa_type=TIMESTAMP(timezone=True), nullable=False)


class PasswordResetToken(BaseModel, table=True):
    """
    Single-use token mailed by forgot-password.
    """

    __tablename__ = "password_reset_tokens"

    token: str = Field(primary_key=True, max_length=64)

    user_id: str = Field(
        foreign_key="users.id",
        nullable=False,
        ondelete="CASCADE",
    )

    expires_at: datetime = Field(sa_type=TIMESTAMP(timezone=True), nullable=False)
