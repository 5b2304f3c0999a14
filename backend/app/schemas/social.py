from typing import Optional

from app.models.friend_request import FriendRequest
from app.models.notification import Notification
from app.models.user import User
from app.schemas.common import CamelModel, iso


class FriendRequestCreate(CamelModel):
    receiver_id: Optional[str] = None


class FriendRequestRespond(CamelModel):
    accept: bool


def serialize_received_request(request: FriendRequest) -> dict:
    return {
        "id": request.id,
        "senderId": request.sender_id,
        "senderName": request.sender.name,
        "senderAvatar": request.sender.avatar_url,
        "receiverId": request.receiver_id,
        "status": request.status.value,
        "createdAt": iso(request.created_at),
    }


def serialize_sent_request(request: FriendRequest) -> dict:
    return {
        "id": request.id,
        "receiverId": request.receiver_id,
        "receiverName": request.receiver.name,
        "receiverAvatar": request.receiver.avatar_url,
        "status": request.status.value,
        "createdAt": iso(request.created_at),
    }


def serialize_friend(friend: User) -> dict:
    return {
        "id": friend.id,
        "name": friend.name,
        "email": friend.email,
        "avatarUrl": friend.avatar_url,
        "section": friend.section,
        "bio": friend.bio or "",
    }


def serialize_notification(notification: Notification) -> dict:
    return {
        "id": notification.id,
        "userId": notification.user_id,
        "type": notification.type.value,
        "message": notification.message,
        "isRead": notification.is_read,
        "relatedProjectId": notification.related_project_id,
        "metadata": notification.extra_data,
        "createdAt": iso(notification.created_at),
    }
