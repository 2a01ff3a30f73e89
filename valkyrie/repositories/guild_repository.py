"""
Guild Repository
guilds, memberships and bans
"""
from __future__ import annotations

from typing import List, Optional

from sqlalchemy import delete, select
from sqlalchemy.ext.asyncio import AsyncSession

from valkyrie.models import Ban, Guild, Member, User


class GuildRepository:
    """Guild Repository"""

    async def create(self, db: AsyncSession, name: str, owner_id: str) -> Guild:
        """Create a guild; the owner joins it"""
        guild = Guild(name=name, owner_id=owner_id)
        db.add(guild)
        await db.flush()
        db.add(Member(user_id=owner_id, guild_id=guild.id))
        await db.flush()
        await db.refresh(guild)
        return guild

    async def get_by_id(self, db: AsyncSession, guild_id: str) -> Optional[Guild]:
        stmt = select(Guild).where(Guild.id == guild_id)
        result = await db.execute(stmt)
        return result.scalar_one_or_none()

    async def get_user_guilds(self, db: AsyncSession, user_id: str) -> List[Guild]:
        """Guilds the user is a member of (join order)"""
        stmt = (
            select(Guild)
            .join(Member, Member.guild_id == Guild.id)
            .where(Member.user_id == user_id)
            .order_by(Member.created_at)
        )
        result = await db.execute(stmt)
        return list(result.scalars().all())

    async def delete(self, db: AsyncSession, guild_id: str) -> None:
        """Delete a guild with its members and bans"""
        await db.execute(delete(Ban).where(Ban.guild_id == guild_id))
        await db.execute(delete(Member).where(Member.guild_id == guild_id))
        await db.execute(delete(Guild).where(Guild.id == guild_id))
        await db.flush()


class MemberRepository:
    """Guild member Repository"""

    async def is_member(self, db: AsyncSession, user_id: str, guild_id: str) -> bool:
        stmt = select(Member).where(Member.user_id == user_id, Member.guild_id == guild_id)
        result = await db.execute(stmt)
        return result.scalar_one_or_none() is not None

    async def add(self, db: AsyncSession, user_id: str, guild_id: str) -> Member:
        member = Member(user_id=user_id, guild_id=guild_id)
        db.add(member)
        await db.flush()
        return member

    async def remove(self, db: AsyncSession, user_id: str, guild_id: str) -> None:
        await db.execute(
            delete(Member).where(Member.user_id == user_id, Member.guild_id == guild_id)
        )
        await db.flush()


class BanRepository:
    """Guild ban Repository"""

    async def is_banned(self, db: AsyncSession, user_id: str, guild_id: str) -> bool:
        stmt = select(Ban).where(Ban.user_id == user_id, Ban.guild_id == guild_id)
        result = await db.execute(stmt)
        return result.scalar_one_or_none() is not None

    async def add(self, db: AsyncSession, user_id: str, guild_id: str) -> Ban:
        ban = Ban(user_id=user_id, guild_id=guild_id)
        db.add(ban)
        await db.flush()
        return ban

    async def remove(self, db: AsyncSession, user_id: str, guild_id: str) -> None:
        await db.execute(delete(Ban).where(Ban.user_id == user_id, Ban.guild_id == guild_id))
        await db.flush()

    async def get_banned_users(self, db: AsyncSession, guild_id: str) -> List[User]:
        stmt = (
            select(User)
            .join(Ban, Ban.user_id == User.id)
            .where(Ban.guild_id == guild_id)
            .order_by(User.username)
        )
        result = await db.execute(stmt)
        return list(result.scalars().all())
