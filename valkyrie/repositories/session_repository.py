"""
Session Repository
login sessions and password reset tokens
"""
from __future__ import annotations

from datetime import datetime
from typing import Optional

from sqlalchemy import delete, select
from sqlalchemy.ext.asyncio import AsyncSession

from valkyrie.models import PasswordResetToken, UserSession
from valkyrie.utils.security import generate_token


class SessionRepository:
    """Login session Repository"""

    async def create(
        self, db: AsyncSession, user_id: str, expires_at: datetime
    ) -> UserSession:
        session = UserSession(token=generate_token(), user_id=user_id, expires_at=expires_at)
        db.add(session)
        await db.flush()
        return session

    async def get(self, db: AsyncSession, token: str) -> Optional[UserSession]:
        stmt = select(UserSession).where(UserSession.token == token)
        result = await db.execute(stmt)
        return result.scalar_one_or_none()

    async def delete(self, db: AsyncSession, token: str) -> None:
        await db.execute(delete(UserSession).where(UserSession.token == token))
        await db.flush()

    async def delete_for_user(
        self, db: AsyncSession, user_id: str, keep_token: Optional[str] = None
    ) -> None:
        """Drop every session of a user, optionally keeping the current one"""
        stmt = delete(UserSession).where(UserSession.user_id == user_id)
        if keep_token is not None:
            stmt = stmt.where(UserSession.token != keep_token)
        await db.execute(stmt)
        await db.flush()


class ResetTokenRepository:
    """Password reset token Repository"""

    async def create(
        self, db: AsyncSession, user_id: str, expires_at: datetime
    ) -> PasswordResetToken:
        reset_token = PasswordResetToken(
            token=generate_token(), user_id=user_id, expires_at=expires_at
        )
        db.add(reset_token)
        await db.flush()
        return reset_token

    async def get(self, db: AsyncSession, token: str) -> Optional[PasswordResetToken]:
        stmt = select(PasswordResetToken).where(PasswordResetToken.token == token)
        result = await db.execute(stmt)
        return result.scalar_one_or_none()

    async def delete(self, db: AsyncSession, token: str) -> None:
        await db.execute(delete(PasswordResetToken).where(PasswordResetToken.token == token))
        await db.flush()
