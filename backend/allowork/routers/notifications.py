from typing import Optional

from fastapi import APIRouter, Header, HTTPException, Query

from allowork.auth import assert_actor_authorized
from allowork.models import Notification
from allowork.services.notification_store import notification_store

router = APIRouter(prefix="/notifications", tags=["notifications"])


@router.get("", response_model=list[Notification])
def list_notifications(
    user_id: str = Query(...),
    unread_only: bool = Query(default=False),
):
    return notification_store.list_for_user(user_id=user_id, unread_only=unread_only)


@router.get("/unread-count", response_model=dict)
def unread_count(user_id: str = Query(...)):
    return {"user_id": user_id, "unread": notification_store.unread_count(user_id)}


@router.post("/read-all", response_model=dict)
def mark_all_read(
    user_id: str = Query(...),
    authorization: Optional[str] = Header(default=None),
):
    assert_actor_authorized(actor_user_id=user_id, authorization=authorization)
    return {"status": "ok", "updated": notification_store.mark_all_read(user_id)}


@router.post("/{notification_id}/read", response_model=Notification)
def mark_notification_read(
    notification_id: str,
    user_id: str = Query(...),
    authorization: Optional[str] = Header(default=None),
):
    assert_actor_authorized(actor_user_id=user_id, authorization=authorization)
    updated = notification_store.mark_read(user_id=user_id, notification_id=notification_id)
    if not updated:
        raise HTTPException(status_code=404, detail="Notification not found")
    return updated
