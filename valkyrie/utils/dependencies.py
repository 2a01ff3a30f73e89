# utils/dependencies.py
from typing import Optional

from fastapi import Depends, HTTPException, Response, status
from fastapi.security import APIKeyCookie
from sqlalchemy.ext.asyncio import AsyncSession

from valkyrie.core.config import settings
from valkyrie.database import get_session
from valkyrie.services import AuthService, GuildService, UserService

# Swagger "Authorize" shows the session cookie
cookie_scheme = APIKeyCookie(name=settings.COOKIE_NAME, auto_error=False)


def get_auth_service() -> AuthService:
    return AuthService()


def get_user_service() -> UserService:
    return UserService()


def get_guild_service() -> GuildService:
    return GuildService()


async def get_session_token(token: Optional[str] = Depends(cookie_scheme)) -> Optional[str]:
    return token


async def get_current_user_id(
    token: Optional[str] = Depends(cookie_scheme),
    db: AsyncSession = Depends(get_session),
    auth_service: AuthService = Depends(get_auth_service),
) -> str:
    """
    Session guard: the id of the logged in user, 401 otherwise.
    """
    if not token:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Not authenticated",
        )

    user_id = await auth_service.resolve_session(db, token)
    if not user_id:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Not authenticated",
        )

    return user_id


def set_session_cookie(response: Response, token: str) -> None:
    response.set_cookie(
        key=settings.COOKIE_NAME,
        value=token,
        max_age=settings.SESSION_EXPIRE_DAYS * 24 * 3600,
        httponly=True,
        samesite="lax",
        secure=settings.is_production,
        path="/",
    )


def clear_session_cookie(response: Response) -> None:
    response.delete_cookie(
        key=settings.COOKIE_NAME,
        httponly=True,
        samesite="lax",
        secure=settings.is_production,
        path="/",
    )
