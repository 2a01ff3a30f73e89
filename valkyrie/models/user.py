from sqlmodel import Field

from valkyrie.models.base import AbstractEntity, BaseModel
from valkyrie.utils.security import get_password_hash, verify_password as _verify


class User(AbstractEntity, table=True):
    """
    Account table
    - session cookie auth
    - password stored as a bcrypt hash
    """

    __tablename__ = "users"

    username: str = Field(
        max_length=30,
        nullable=False,
        description="Display name",
    )

    email: str = Field(
        max_length=255,
        nullable=False,
        description="Login email (trimmed, lowercase)",
        sa_column_kwargs={"unique": True},
    )

    password: str = Field(
        max_length=255,
        nullable=False,
        description="bcrypt hash",
    )

    image: str = Field(
        max_length=500,
        nullable=False,
        description="Avatar URL",
    )

    is_online: bool = Field(
        default=False,
        nullable=False,
    )

    # -------------------- #
    # Password helpers
    # -------------------- #

    @classmethod
    def hash_password(cls, password: str) -> str:
        return get_password_hash(password)

    def verify_password(self, password: str) -> bool:
        return _verify(password, self.password)

    def __repr__(self) -> str:
        return f"<User(id={self.id}, username='{self.username}', email='{self.email}')>"


class Friend(BaseModel, table=True):
    """
    Friendship, one row per direction: A and B are friends when both
    (A, B) and (B, A) exist.
    """

    __tablename__ = "friends"

    user_id: str = Field(foreign_key="users.id", primary_key=True, ondelete="CASCADE")
    friend_id: str = Field(foreign_key="users.id", primary_key=True, ondelete="CASCADE")


class FriendRequest(BaseModel, table=True):
    """
    Pending friend request from sender to receiver.
    """

    __tablename__ = "friend_requests"

    sender_id: str = Field(foreign_key="users.id", primary_key=True, ondelete="CASCADE")
    receiver_id: str = Field(foreign_key="users.id", primary_key=True, ondelete="CASCADE")
