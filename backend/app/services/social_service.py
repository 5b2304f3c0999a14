"""
Social Service - friend requests and friendships.

Friendship is stored symmetrically in user_friends; accepting a request
inserts both directions and the sender's notification in one commit.
"""
from typing import List, Optional, Set, Tuple

from sqlalchemy import select, delete, insert, or_, and_, func
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.exceptions import (
    DuplicateFriendRequestError,
    FriendRequestNotFoundError,
    NotOwnerError,
    UserNotFoundError,
    ValidationError,
)
from app.core.logging_config import logger
from app.core.types import is_valid_uuid
from app.models.friend_request import FriendRequest, FriendRequestStatus
from app.models.notification import NotificationType
from app.models.user import User, user_friends
from app.services.notification_service import NotificationService


async def get_friend_ids(db: AsyncSession, user_id: str) -> Set[str]:
    result = await db.execute(
        select(user_friends.c.friend_id).where(user_friends.c.user_id == user_id)
    )
    return set(result.scalars().all())


async def are_friends(db: AsyncSession, user_id: str, other_id: str) -> bool:
    count = await db.scalar(
        select(func.count()).select_from(user_friends).where(
            user_friends.c.user_id == user_id,
            user_friends.c.friend_id == other_id,
        )
    )
    return bool(count)


class SocialService:

    def __init__(self, db: AsyncSession):
        self.db = db
        self.notifications = NotificationService(db)

    async def _get_user(self, user_id: Optional[str]) -> User:
        user = await self.db.get(User, user_id) if user_id and is_valid_uuid(user_id) else None
        if not user:
            raise UserNotFoundError(user_id)
        return user

    async def _pending_between(self, sender_id: str, receiver_id: str) -> Optional[FriendRequest]:
        result = await self.db.execute(
            select(FriendRequest).where(
                FriendRequest.sender_id == sender_id,
                FriendRequest.receiver_id == receiver_id,
                FriendRequest.status == FriendRequestStatus.PENDING,
            )
        )
        return result.scalars().first()

    # ========== Friend requests ==========

    async def send_request(self, sender: User, receiver_id: Optional[str]) -> FriendRequest:
        if receiver_id == sender.id:
            raise ValidationError("You cannot send a friend request to yourself", field="receiverId")
        receiver = await self._get_user(receiver_id)

        if await are_friends(self.db, sender.id, receiver.id):
            raise DuplicateFriendRequestError("You are already friends")
        if await self._pending_between(sender.id, receiver.id):
            raise DuplicateFriendRequestError()
        if await self._pending_between(receiver.id, sender.id):
            raise DuplicateFriendRequestError("This user has already sent you a friend request")

        request = FriendRequest(sender_id=sender.id, receiver_id=receiver.id)
        self.db.add(request)
        await self.db.flush()

        self.notifications.notify(
            receiver.id,
            NotificationType.FRIEND_REQUEST,
            f"{sender.name} sent you a friend request",
            sender_id=sender.id,
            metadata={"requestId": request.id, "senderId": sender.id},
        )
        await self.db.commit()

        logger.info(f"[SocialService] Friend request {sender.id} -> {receiver.id}")
        return request

    async def received_requests(self, user: User) -> List[FriendRequest]:
        result = await self.db.execute(
            select(FriendRequest)
            .where(
                FriendRequest.receiver_id == user.id,
                FriendRequest.status == FriendRequestStatus.PENDING,
            )
            .order_by(FriendRequest.created_at.desc())
        )
        return list(result.scalars().all())

    async def sent_requests(self, user: User) -> List[FriendRequest]:
        result = await self.db.execute(
            select(FriendRequest)
            .where(
                FriendRequest.sender_id == user.id,
                FriendRequest.status == FriendRequestStatus.PENDING,
            )
            .order_by(FriendRequest.created_at.desc())
        )
        return list(result.scalars().all())

    async def request_status(self, user: User, other_id: str) -> Tuple[str, Optional[str]]:
        """(friends|requested|pending|none, request id)"""
        if await are_friends(self.db, user.id, other_id):
            return "friends", None
        sent = await self._pending_between(user.id, other_id)
        if sent:
            return "requested", sent.id
        received = await self._pending_between(other_id, user.id)
        if received:
            return "pending", received.id
        return "none", None

    async def _get_request(self, request_id: str) -> FriendRequest:
        request = await self.db.get(FriendRequest, request_id) if is_valid_uuid(request_id) else None
        if not request:
            raise FriendRequestNotFoundError(request_id)
        return request

    async def cancel_request(self, user: User, request_id: str) -> None:
        request = await self._get_request(request_id)
        if request.sender_id != user.id:
            raise NotOwnerError()
        if request.status != FriendRequestStatus.PENDING:
            raise ValidationError("Cannot cancel this request")

        await self.notifications.delete_friend_request_notice(request.sender_id, request.receiver_id)
        await self.db.delete(request)
        await self.db.commit()

    async def respond(self, user: User, request_id: str, accept: bool) -> FriendRequest:
        request = await self._get_request(request_id)
        if request.receiver_id != user.id:
            raise NotOwnerError()
        if request.status != FriendRequestStatus.PENDING:
            raise ValidationError("This friend request has already been answered")

        request.status = FriendRequestStatus.ACCEPTED if accept else FriendRequestStatus.REJECTED
        if accept and not await are_friends(self.db, request.sender_id, request.receiver_id):
            await self.db.execute(
                insert(user_friends),
                [
                    {"user_id": request.sender_id, "friend_id": request.receiver_id},
                    {"user_id": request.receiver_id, "friend_id": request.sender_id},
                ],
            )
            self.notifications.notify(
                request.sender_id,
                NotificationType.FRIEND_ACCEPTED,
                f"{user.name} accepted your friend request",
                sender_id=user.id,
                metadata={"requestId": request.id, "userId": user.id},
            )
        await self.db.commit()

        logger.info(
            f"[SocialService] Friend request {request.id} {'accepted' if accept else 'rejected'}"
        )
        return request

    # ========== Friends ==========

    async def list_friends(self, user: User) -> List[User]:
        result = await self.db.execute(
            select(User)
            .join(user_friends, user_friends.c.friend_id == User.id)
            .where(user_friends.c.user_id == user.id)
            .order_by(User.name)
        )
        return list(result.scalars().all())

    async def unfriend(self, user: User, friend_id: str) -> None:
        await self.db.execute(
            delete(user_friends).where(
                or_(
                    and_(user_friends.c.user_id == user.id, user_friends.c.friend_id == friend_id),
                    and_(user_friends.c.user_id == friend_id, user_friends.c.friend_id == user.id),
                )
            )
        )
        await self.db.commit()
