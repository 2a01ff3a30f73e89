import logging
import mimetypes
from pathlib import PurePath
from typing import List, Optional, Union

from fastapi import HTTPException, UploadFile, status
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession
from starlette.concurrency import run_in_threadpool

from valkyrie.core.config import settings
from valkyrie.core.exceptions import FieldValidationError
from valkyrie.models import User
from valkyrie.repositories.friend_repository import (FriendRepository,
                                                     FriendRequestRepository)
from valkyrie.repositories.user_repository import UserRepository
from valkyrie.schemas import (MemberResponse, RequestResponse, RequestType,
                              UserResponse)
from valkyrie.utils.id_generator import generate_id
from valkyrie.utils.storage import Storage, storage_from_settings

logger = logging.getLogger(__name__)


class UserService:
    """
    Current user, profile updates and friends
    """

    def __init__(
        self,
        user_repository: Optional[UserRepository] = None,
        storage: Optional[Storage] = None,
    ):
        self.user_repository = user_repository or UserRepository()
        self.friend_repository = FriendRepository()
        self.request_repository = FriendRequestRepository()
        self.storage = storage or storage_from_settings()

    # ========== helpers ==========

    async def _get_user_or_404(self, db: AsyncSession, user_id: str) -> User:
        user = await self.user_repository.get_by_id(db, user_id)
        if not user:
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="User not found")
        return user

    async def _store_avatar(self, user_id: str, image: UploadFile) -> str:
        """
        Validate an uploaded avatar and store it. Returns the public URL.
        """
        content_type = image.content_type or ""
        if not content_type.startswith("image/"):
            raise FieldValidationError("image", "File must be an image")

        data = await image.read()
        if not data:
            raise FieldValidationError("image", "File is empty")
        if len(data) > settings.MAX_IMAGE_SIZE:
            raise FieldValidationError(
                "image", f"File must be smaller than {settings.MAX_IMAGE_SIZE // (1024 * 1024)} MB"
            )

        suffix = PurePath(image.filename or "").suffix.lower()
        if not suffix:
            suffix = mimetypes.guess_extension(content_type) or ""

        key = f"avatars/{user_id}/{generate_id()}{suffix}"
        return await run_in_threadpool(
            self.storage.put_bytes, key, data, content_type=content_type
        )

    # ========== account ==========

    async def get_current_user(self, db: AsyncSession, user_id: str) -> UserResponse:
        user = await self._get_user_or_404(db, user_id)
        return UserResponse.model_validate(user)

    async def update_user(
        self,
        db: AsyncSession,
        user_id: str,
        email: str,
        username: str,
        image: Union[UploadFile, str, None] = None,
    ) -> UserResponse:
        """
        Update email/username and, when a file is sent, the avatar.
        A string image (the current avatar URL echoed back by the client)
        leaves the avatar as it is. The previous avatar is removed when it
        was one of our uploads.
        """
        user = await self._get_user_or_404(db, user_id)
        email = email.strip().lower()

        if email != user.email and await self.user_repository.exists_by_email(
            db, email, exclude_id=user_id
        ):
            raise FieldValidationError("email", "Email already in use")

        update_data = {"email": email, "username": username}

        old_key = new_key = None
        if not isinstance(image, str) and image is not None and image.filename:
            update_data["image"] = await self._store_avatar(user_id, image)
            new_key = self.storage.key_for(update_data["image"])
            old_key = self.storage.key_for(user.image)

        try:
            user = await self.user_repository.update(db, user, update_data)
            await db.commit()
        except IntegrityError:
            # another account took the email after the check above
            await db.rollback()
            if new_key:
                await run_in_threadpool(self.storage.delete, new_key)
            logger.warning(f"Email taken concurrently: {email}")
            raise FieldValidationError("email", "Email already in use")

        if old_key:
            await run_in_threadpool(self.storage.delete, old_key)

        logger.info(f"Account updated: {user_id}")
        return UserResponse.model_validate(user)

    # ========== friends ==========

    async def get_friends(self, db: AsyncSession, user_id: str) -> List[MemberResponse]:
        friends = await self.friend_repository.get_friends(db, user_id)
        return [MemberResponse.model_validate(friend) for friend in friends]

    async def get_pending_friend_requests(
        self, db: AsyncSession, user_id: str
    ) -> List[RequestResponse]:
        """
        Incoming requests (type 1) followed by outgoing ones (type 0).
        """
        incoming = await self.request_repository.get_incoming(db, user_id)
        outgoing = await self.request_repository.get_outgoing(db, user_id)

        requests = [
            RequestResponse(id=u.id, username=u.username, image=u.image, type=RequestType.INCOMING)
            for u in incoming
        ]
        requests += [
            RequestResponse(id=u.id, username=u.username, image=u.image, type=RequestType.OUTGOING)
            for u in outgoing
        ]
        return requests

    async def send_friend_request(self, db: AsyncSession, user_id: str, member_id: str) -> bool:
        """
        pending request user -> member.
        - an incoming request from member is accepted instead
        - sending twice is a no-op
        """
        if member_id == user_id:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail="You cannot add yourself",
            )

        await self._get_user_or_404(db, member_id)

        if await self.friend_repository.are_friends(db, user_id, member_id):
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail="You are already friends",
            )

        if await self.request_repository.get_request(db, member_id, user_id):
            return await self.accept_friend_request(db, user_id, member_id)

        if not await self.request_repository.get_request(db, user_id, member_id):
            try:
                await self.request_repository.create_request(db, user_id, member_id)
                await db.commit()
            except IntegrityError:
                # the same request was stored by a parallel call
                await db.rollback()
                return True
            logger.info(f"Friend request sent: {user_id} -> {member_id}")

        return True

    async def accept_friend_request(self, db: AsyncSession, user_id: str, member_id: str) -> bool:
        """
        member -> user request becomes a friendship.
        """
        request = await self.request_repository.get_request(db, member_id, user_id)
        if not request:
            raise HTTPException(
                status_code=status.HTTP_404_NOT_FOUND,
                detail="Friend request not found",
            )

        try:
            await self.request_repository.delete_between(db, user_id, member_id)
            if not await self.friend_repository.are_friends(db, user_id, member_id):
                await self.friend_repository.add_friendship(db, user_id, member_id)
            await db.commit()
        except IntegrityError:
            # accepted by a parallel call; only the requests are left to drop
            await db.rollback()
            await self.request_repository.delete_between(db, user_id, member_id)
            await db.commit()

        logger.info(f"Friend request accepted: {member_id} -> {user_id}")
        return True

    async def cancel_friend_request(self, db: AsyncSession, user_id: str, member_id: str) -> bool:
        """
        Withdraw an outgoing request or decline an incoming one.
        """
        deleted = await self.request_repository.delete_between(db, user_id, member_id)
        await db.commit()

        if deleted:
            logger.info(f"Friend request cancelled between {user_id} and {member_id}")
        return True

    async def remove_friend(self, db: AsyncSession, user_id: str, member_id: str) -> bool:
        deleted = await self.friend_repository.remove_friendship(db, user_id, member_id)
        await db.commit()

        if deleted:
            logger.info(f"Friend removed: {user_id} x {member_id}")
        return True
