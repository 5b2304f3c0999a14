"""
Social API - friend requests, friends and notifications.
"""
from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.config import settings
from app.core.database import get_db
from app.models.user import User
from app.modules.auth.dependencies import get_current_user
from app.schemas.social import (
    FriendRequestCreate,
    FriendRequestRespond,
    serialize_friend,
    serialize_notification,
    serialize_received_request,
    serialize_sent_request,
)
from app.services.notification_service import NotificationService
from app.services.social_service import SocialService

router = APIRouter()


# ==================== Friend Requests ====================

@router.post("/friends/request", status_code=status.HTTP_201_CREATED)
async def send_friend_request(
    body: FriendRequestCreate,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    request = await SocialService(db).send_request(current_user, body.receiver_id)
    return {"message": "Friend request sent", "requestId": request.id}


@router.get("/friends/requests/received")
async def received_requests(
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    requests = await SocialService(db).received_requests(current_user)
    return [serialize_received_request(r) for r in requests]


@router.get("/friends/requests/sent")
async def sent_requests(
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    requests = await SocialService(db).sent_requests(current_user)
    return [serialize_sent_request(r) for r in requests]


@router.get("/friends/status/{user_id}")
async def friendship_status(
    user_id: str,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    """friends, requested (caller sent), pending (caller received) or none"""
    state, request_id = await SocialService(db).request_status(current_user, user_id)
    return {"status": state, "requestId": request_id}


@router.delete("/friends/request/{request_id}")
async def cancel_friend_request(
    request_id: str,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    await SocialService(db).cancel_request(current_user, request_id)
    return {"message": "Friend request cancelled"}


@router.put("/friends/request/{request_id}")
async def respond_to_friend_request(
    request_id: str,
    body: FriendRequestRespond,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    request = await SocialService(db).respond(current_user, request_id, body.accept)
    return {
        "message": "Friend request accepted" if body.accept else "Friend request rejected",
        "status": request.status.value,
    }


# ==================== Friends ====================

@router.get("/friends")
async def list_friends(
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    return [serialize_friend(f) for f in await SocialService(db).list_friends(current_user)]


@router.delete("/friends/{friend_id}")
async def unfriend(
    friend_id: str,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    await SocialService(db).unfriend(current_user, friend_id)
    return {"message": "Friend removed"}


# ==================== Notifications ====================

@router.get("/notifications")
async def list_notifications(
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    """Latest notifications, newest first"""
    notifications = await NotificationService(db).list_for_user(
        current_user.id, settings.NOTIFICATION_PAGE_SIZE
    )
    return [serialize_notification(n) for n in notifications]


@router.get("/notifications/unread-count")
async def unread_count(
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    return {"count": await NotificationService(db).unread_count(current_user.id)}


@router.put("/notifications/read-all")
async def mark_all_read(
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    updated = await NotificationService(db).mark_all_read(current_user.id)
    return {"message": "All notifications marked as read", "updated": updated}


@router.put("/notifications/{notification_id}/read")
async def mark_read(
    notification_id: str,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    notification = await NotificationService(db).mark_read(notification_id, current_user.id)
    return serialize_notification(notification)
