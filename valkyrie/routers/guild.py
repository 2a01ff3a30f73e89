# routers/guild.py
from typing import Annotated, List

from fastapi import Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from valkyrie.database import get_session
from valkyrie.schemas import GuildInput, GuildResponse, MemberResponse
from valkyrie.services import GuildService
from valkyrie.utils.dependencies import get_current_user_id, get_guild_service
from valkyrie.utils.router_utils import get_router

router = get_router("guilds", "Guild Operation")

CurrentUserId = Annotated[str, Depends(get_current_user_id)]
Session = Annotated[AsyncSession, Depends(get_session)]
Service = Annotated[GuildService, Depends(get_guild_service)]


@router.post(
    "",
    response_model=GuildResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Create Guild",
)
async def create_guild(data: GuildInput, user_id: CurrentUserId, db: Session, service: Service):
    return await service.create_guild(db, user_id, data)


@router.get("", response_model=List[GuildResponse], summary="Get Current User's Guilds")
async def get_user_guilds(user_id: CurrentUserId, db: Session, service: Service):
    return await service.get_user_guilds(db, user_id)


@router.delete(
    "/{guild_id}",
    response_model=bool,
    summary="Delete Guild",
    responses={403: {"description": "Not the owner"}, 404: {"description": "Guild not found"}},
)
async def delete_guild(guild_id: str, user_id: CurrentUserId, db: Session, service: Service):
    return await service.delete_guild(db, user_id, guild_id)


@router.post(
    "/{guild_id}/members",
    response_model=GuildResponse,
    summary="Join Guild",
    responses={400: {"description": "Banned from the guild"}, 404: {"description": "Guild not found"}},
)
async def join_guild(guild_id: str, user_id: CurrentUserId, db: Session, service: Service):
    return await service.join_guild(db, user_id, guild_id)


@router.delete("/{guild_id}/members", response_model=bool, summary="Leave Guild")
async def leave_guild(guild_id: str, user_id: CurrentUserId, db: Session, service: Service):
    return await service.leave_guild(db, user_id, guild_id)


@router.get(
    "/{guild_id}/bans",
    response_model=List[MemberResponse],
    summary="Get Guild Ban List",
    responses={403: {"description": "Not the owner"}},
)
async def get_ban_list(guild_id: str, user_id: CurrentUserId, db: Session, service: Service):
    return await service.get_ban_list(db, user_id, guild_id)


@router.post(
    "/{guild_id}/bans/{member_id}",
    response_model=bool,
    summary="Ban Member",
    responses={403: {"description": "Not the owner"}},
)
async def ban_member(
    guild_id: str, member_id: str, user_id: CurrentUserId, db: Session, service: Service
):
    return await service.ban_member(db, user_id, guild_id, member_id)


@router.delete(
    "/{guild_id}/bans/{member_id}",
    response_model=bool,
    summary="Unban Member",
    responses={403: {"description": "Not the owner"}},
)
async def unban_member(
    guild_id: str, member_id: str, user_id: CurrentUserId, db: Session, service: Service
):
    return await service.unban_member(db, user_id, guild_id, member_id)
