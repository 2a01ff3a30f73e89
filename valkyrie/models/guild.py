from typing import Optional

from sqlmodel import Field

from valkyrie.models.base import AbstractEntity, BaseModel


class Guild(AbstractEntity, table=True):

    __tablename__ = "guilds"

    name: str = Field(max_length=30, nullable=False)

    owner_id: str = Field(
        foreign_key="users.id",
        nullable=False,
        description="Guild owner",
    )

    icon: Optional[str] = Field(default=None, max_length=500)


class Member(BaseModel, table=True):

    __tablename__ = "members"

    user_id: str = Field(foreign_key="users.id", primary_key=True, ondelete="CASCADE")
    guild_id: str = Field(foreign_key="guilds.id", primary_key=True, ondelete="CASCADE")

    nickname: Optional[str] = Field(default=None, max_length=30)


class Ban(BaseModel, table=True):
    """
    User banned from a guild. Removed together with the guild.
    """

    __tablename__ = "bans"

    user_id: str = Field(foreign_key="users.id", primary_key=True, ondelete="CASCADE")
    guild_id: str = Field(foreign_key="guilds.id", primary_key=True, ondelete="CASCADE")
