import logging
from typing import Optional

from sqlalchemy import func
from sqlalchemy.ext.asyncio import AsyncSession
from sqlmodel import select

from valkyrie.models import User

logger = logging.getLogger(__name__)


class UserRepository:
    """
    Database access for accounts
    """

    async def create(self, db: AsyncSession, user_data: dict) -> User:
        """
        Create a user.

        Args:
            db: database session
            user_data: username, email, password (plain), image

        Returns:
            the new user (flushed, not committed)
        """
        user = User(
            username=user_data["username"],
            email=user_data["email"],
            password=User.hash_password(user_data["password"]),
            image=user_data["image"],
        )

        db.add(user)
        await db.flush()
        await db.refresh(user)

        logger.info(f"User created: {user.id} ({user.email})")
        return user

    async def get_by_id(self, db: AsyncSession, user_id: str) -> Optional[User]:
        result = await db.execute(select(User).where(User.id == user_id))
        user = result.scalars().first()

        if not user:
            logger.warning(f"User id not found: {user_id}")

        return user

    async def get_by_email(self, db: AsyncSession, email: str) -> Optional[User]:
        result = await db.execute(select(User).where(User.email == email))
        return result.scalars().first()

    async def update(self, db: AsyncSession, user: User, update_data: dict) -> User:
        """
        Update a user. A "password" key is hashed before it is stored.
        """
        if update_data.get("password"):
            update_data["password"] = User.hash_password(update_data["password"])

        allowed_fields = {"username", "email", "password", "image", "is_online"}
        for key, value in update_data.items():
            if key in allowed_fields:
                setattr(user, key, value)

        db.add(user)
        await db.flush()
        await db.refresh(user)

        logger.info(f"User updated: {user.id} ({', '.join(sorted(update_data))})")
        return user

    async def exists_by_email(
        self, db: AsyncSession, email: str, exclude_id: Optional[str] = None
    ) -> bool:
        """
        Whether another account already uses this email.
        """
        stmt = select(func.count()).select_from(User).where(User.email == email)
        if exclude_id is not None:
            stmt = stmt.where(User.id != exclude_id)
        result = await db.execute(stmt)
        return result.scalar() > 0
