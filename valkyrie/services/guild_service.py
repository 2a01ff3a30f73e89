"""
Guild Service
guild membership and bans
"""
import logging
from typing import List

from fastapi import HTTPException, status
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from valkyrie.models import Guild
from valkyrie.repositories.guild_repository import (BanRepository,
                                                    GuildRepository,
                                                    MemberRepository)
from valkyrie.repositories.user_repository import UserRepository
from valkyrie.schemas import GuildInput, GuildResponse, MemberResponse

logger = logging.getLogger(__name__)


class GuildService:
    """Guild service"""

    def __init__(self):
        self.guild_repo = GuildRepository()
        self.member_repo = MemberRepository()
        self.ban_repo = BanRepository()
        self.user_repo = UserRepository()

    # ========== helpers ==========

    async def _get_guild_or_404(self, db: AsyncSession, guild_id: str) -> Guild:
        guild = await self.guild_repo.get_by_id(db, guild_id)
        if not guild:
            raise HTTPException(status_code=404, detail="Guild not found")
        return guild

    async def _get_owned_guild(self, db: AsyncSession, guild_id: str, user_id: str) -> Guild:
        guild = await self._get_guild_or_404(db, guild_id)
        if guild.owner_id != user_id:
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail="Only the owner can do that",
            )
        return guild

    # ========== guilds ==========

    async def create_guild(self, db: AsyncSession, user_id: str, data: GuildInput) -> GuildResponse:
        guild = await self.guild_repo.create(db, data.name, user_id)
        await db.commit()
        logger.info(f"Guild created: {guild.id} by {user_id}")
        return GuildResponse.model_validate(guild)

    async def get_user_guilds(self, db: AsyncSession, user_id: str) -> List[GuildResponse]:
        guilds = await self.guild_repo.get_user_guilds(db, user_id)
        return [GuildResponse.model_validate(guild) for guild in guilds]

    async def delete_guild(self, db: AsyncSession, user_id: str, guild_id: str) -> bool:
        await self._get_owned_guild(db, guild_id, user_id)
        await self.guild_repo.delete(db, guild_id)
        await db.commit()
        logger.info(f"Guild deleted: {guild_id}")
        return True

    # ========== members ==========

    async def join_guild(self, db: AsyncSession, user_id: str, guild_id: str) -> GuildResponse:
        guild = await self._get_guild_or_404(db, guild_id)

        if await self.ban_repo.is_banned(db, user_id, guild_id):
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail="You are banned from this server",
            )

        response = GuildResponse.model_validate(guild)
        if not await self.member_repo.is_member(db, user_id, guild_id):
            try:
                await self.member_repo.add(db, user_id, guild_id)
                await db.commit()
            except IntegrityError:
                # joined by a parallel request
                await db.rollback()
                return response
            logger.info(f"User {user_id} joined guild {guild_id}")

        return response

    async def leave_guild(self, db: AsyncSession, user_id: str, guild_id: str) -> bool:
        guild = await self._get_guild_or_404(db, guild_id)
        if guild.owner_id == user_id:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail="The owner cannot leave their server",
            )

        await self.member_repo.remove(db, user_id, guild_id)
        await db.commit()
        return True

    # ========== bans ==========

    async def get_ban_list(self, db: AsyncSession, user_id: str, guild_id: str) -> List[MemberResponse]:
        await self._get_owned_guild(db, guild_id, user_id)
        users = await self.ban_repo.get_banned_users(db, guild_id)
        return [MemberResponse.model_validate(u) for u in users]

    async def ban_member(
        self, db: AsyncSession, user_id: str, guild_id: str, member_id: str
    ) -> bool:
        """
        Ban a user; the membership goes away with it.
        """
        await self._get_owned_guild(db, guild_id, user_id)

        if member_id == user_id:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail="You cannot ban yourself",
            )

        if not await self.user_repo.get_by_id(db, member_id):
            raise HTTPException(status_code=404, detail="User not found")

        try:
            await self.member_repo.remove(db, member_id, guild_id)
            if not await self.ban_repo.is_banned(db, member_id, guild_id):
                await self.ban_repo.add(db, member_id, guild_id)
            await db.commit()
        except IntegrityError:
            # banned by a parallel request
            await db.rollback()
            return True

        logger.info(f"User {member_id} banned from guild {guild_id}")
        return True

    async def unban_member(
        self, db: AsyncSession, user_id: str, guild_id: str, member_id: str
    ) -> bool:
        await self._get_owned_guild(db, guild_id, user_id)
        await self.ban_repo.remove(db, member_id, guild_id)
        await db.commit()

        logger.info(f"User {member_id} unbanned from guild {guild_id}")
        return True
