# services/auth_service.py
import logging
from datetime import timedelta
from typing import Optional

from fastapi import HTTPException, status
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from valkyrie.core.config import settings
from valkyrie.core.exceptions import FieldValidationError
from valkyrie.models import User, UserSession
from valkyrie.repositories.session_repository import (ResetTokenRepository,
                                                      SessionRepository)
from valkyrie.repositories.user_repository import UserRepository
from valkyrie.schemas import (ChangePasswordInput, LoginInput, RegisterInput,
                              ResetPasswordInput)
from valkyrie.services.mail_service import MailService
from valkyrie.utils.datetime import ensure_utc, utc_now
from valkyrie.utils.security import gravatar_url

logger = logging.getLogger(__name__)


class AuthService:
    """
    Registration, login sessions and password management
    """

    def __init__(
        self,
        user_repository: Optional[UserRepository] = None,
        mail_service: Optional[MailService] = None,
    ):
        self.user_repo = user_repository or UserRepository()
        self.session_repo = SessionRepository()
        self.reset_repo = ResetTokenRepository()
        self.mail_service = mail_service or MailService()

    # ========== sessions ==========

    async def start_session(self, db: AsyncSession, user_id: str) -> UserSession:
        expires_at = utc_now() + timedelta(days=settings.SESSION_EXPIRE_DAYS)
        session = await self.session_repo.create(db, user_id, expires_at)
        await db.commit()
        return session

    async def resolve_session(self, db: AsyncSession, token: str) -> Optional[str]:
        """
        User id behind a session token, None when the session is unknown or
        expired. Expired sessions are removed.
        """
        session = await self.session_repo.get(db, token)
        if not session:
            return None

        if ensure_utc(session.expires_at) <= utc_now():
            await self.session_repo.delete(db, token)
            await db.commit()
            logger.info(f"Session expired for user {session.user_id}")
            return None

        return session.user_id

    async def end_session(self, db: AsyncSession, token: Optional[str]) -> bool:
        if token:
            await self.session_repo.delete(db, token)
            await db.commit()
        return True

    # ========== account ==========

    async def register(self, db: AsyncSession, data: RegisterInput) -> User:
        if await self.user_repo.exists_by_email(db, data.email):
            logger.warning(f"Register with an email in use: {data.email}")
            raise FieldValidationError("email", "Email already in use")

        try:
            user = await self.user_repo.create(
                db,
                {
                    "username": data.username,
                    "email": data.email,
                    "password": data.password,
                    "image": gravatar_url(data.email),
                },
            )
            await db.commit()
        except IntegrityError:
            # registered by a parallel request after the check above
            await db.rollback()
            logger.warning(f"Register lost the race for email: {data.email}")
            raise FieldValidationError("email", "Email already in use")
        return user

    async def login(self, db: AsyncSession, data: LoginInput) -> User:
        user = await self.user_repo.get_by_email(db, data.email)
        if not user or not user.verify_password(data.password):
            logger.warning(f"Login failed: {data.email}")
            raise HTTPException(
                status_code=status.HTTP_401_UNAUTHORIZED,
                detail="Invalid Credentials",
            )

        logger.info(f"User login success: {user.id}")
        return user

    # ========== passwords ==========

    async def change_password(
        self,
        db: AsyncSession,
        user_id: str,
        data: ChangePasswordInput,
        current_token: Optional[str] = None,
    ) -> bool:
        """
        Change the password of a logged in user. Other sessions of the user
        are signed out.
        """
        user = await self.user_repo.get_by_id(db, user_id)
        if not user:
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="User not found")

        if not user.verify_password(data.current_password):
            raise FieldValidationError("currentPassword", "Invalid password")

        await self.user_repo.update(db, user, {"password": data.new_password})
        await self.session_repo.delete_for_user(db, user_id, keep_token=current_token)
        await db.commit()

        logger.info(f"Password changed: {user_id}")
        return True

    async def forgot_password(self, db: AsyncSession, email: str) -> bool:
        """
        Mail a reset link. Unknown emails get the same answer so that the
        endpoint does not reveal which addresses have accounts.
        """
        user = await self.user_repo.get_by_email(db, email)
        if not user:
            logger.info(f"Forgot password for unknown email: {email}")
            return True

        expires_at = utc_now() + timedelta(days=settings.RESET_TOKEN_EXPIRE_DAYS)
        reset_token = await self.reset_repo.create(db, user.id, expires_at)
        await db.commit()

        await self.mail_service.send_reset_password(user.email, reset_token.token)
        return True

    async def reset_password(self, db: AsyncSession, data: ResetPasswordInput) -> User:
        reset_token = await self.reset_repo.get(db, data.token)
        if not reset_token or ensure_utc(reset_token.expires_at) <= utc_now():
            raise FieldValidationError("token", "Token expired")

        user = await self.user_repo.get_by_id(db, reset_token.user_id)
        if not user:
            await self.reset_repo.delete(db, data.token)
            await db.commit()
            raise FieldValidationError("token", "User no longer exists")

        user = await self.user_repo.update(db, user, {"password": data.new_password})
        await self.reset_repo.delete(db, data.token)
        await self.session_repo.delete_for_user(db, user.id)
        await db.commit()

        logger.info(f"Password reset: {user.id}")
        return user
