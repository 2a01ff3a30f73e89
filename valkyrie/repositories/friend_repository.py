"""
Friend Repository
friendship and friend-request rows
"""
from __future__ import annotations

from typing import List, Optional

from sqlalchemy import and_, delete, or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from valkyrie.models import Friend, FriendRequest, User


class FriendRepository:
    """Friendship Repository"""

    async def get_friends(self, db: AsyncSession, user_id: str) -> List[User]:
        """Friends of a user, ordered by username"""
        stmt = (
            select(User)
            .join(Friend, Friend.friend_id == User.id)
            .where(Friend.user_id == user_id)
            .order_by(User.username)
        )
        result = await db.execute(stmt)
        return list(result.scalars().all())

    async def are_friends(self, db: AsyncSession, user_id: str, member_id: str) -> bool:
        stmt = select(Friend).where(
            Friend.user_id == user_id, Friend.friend_id == member_id
        )
        result = await db.execute(stmt)
        return result.scalar_one_or_none() is not None

    async def add_friendship(self, db: AsyncSession, user_id: str, member_id: str) -> None:
        """Both directions"""
        db.add(Friend(user_id=user_id, friend_id=member_id))
        db.add(Friend(user_id=member_id, friend_id=user_id))
        await db.flush()

    async def remove_friendship(self, db: AsyncSession, user_id: str, member_id: str) -> int:
        """Both directions; returns the number of deleted rows"""
        result = await db.execute(
            delete(Friend).where(
                or_(
                    and_(Friend.user_id == user_id, Friend.friend_id == member_id),
                    and_(Friend.user_id == member_id, Friend.friend_id == user_id),
                )
            )
        )
        await db.flush()
        return result.rowcount


class FriendRequestRepository:
    """Friend request Repository"""

    async def get_request(
        self, db: AsyncSession, sender_id: str, receiver_id: str
    ) -> Optional[FriendRequest]:
        stmt = select(FriendRequest).where(
            FriendRequest.sender_id == sender_id,
            FriendRequest.receiver_id == receiver_id,
        )
        result = await db.execute(stmt)
        return result.scalar_one_or_none()

    async def create_request(
        self, db: AsyncSession, sender_id: str, receiver_id: str
    ) -> FriendRequest:
        request = FriendRequest(sender_id=sender_id, receiver_id=receiver_id)
        db.add(request)
        await db.flush()
        return request

    async def delete_between(self, db: AsyncSession, user_id: str, member_id: str) -> int:
        """Drop pending requests in either direction"""
        result = await db.execute(
            delete(FriendRequest).where(
                or_(
                    and_(FriendRequest.sender_id == user_id, FriendRequest.receiver_id == member_id),
                    and_(FriendRequest.sender_id == member_id, FriendRequest.receiver_id == user_id),
                )
            )
        )
        await db.flush()
        return result.rowcount

    async def get_incoming(self, db: AsyncSession, user_id: str) -> List[User]:
        """Users that sent a request to user_id (oldest first)"""
        stmt = (
            select(User)
            .join(FriendRequest, FriendRequest.sender_id == User.id)
            .where(FriendRequest.receiver_id == user_id)
            .order_by(FriendRequest.created_at)
        )
        result = await db.execute(stmt)
        return list(result.scalars().all())

    async def get_outgoing(self, db: AsyncSession, user_id: str) -> List[User]:
        """Users user_id sent a request to (oldest first)"""
        stmt = (
            select(User)
            .join(FriendRequest, FriendRequest.receiver_id == User.id)
            .where(FriendRequest.sender_id == user_id)
            .order_by(FriendRequest.created_at)
        )
        result = await db.execute(stmt)
        return list(result.scalars().all())
