from typing import Optional

from fastapi import APIRouter, Header, Query

from allowork.auth import assert_actor_authorized
from allowork.http_errors import raise_http_error
from allowork.models import (
    Conversation,
    ConversationStartRequest,
    ConversationView,
    Message,
    MessageSendRequest,
    UnreadCount,
)
from allowork.services.marketplace_store import marketplace_store
from allowork.services.message_store import MessageStoreError, message_store
from allowork.services.notification_store import notification_store

router = APIRouter(prefix="/messages", tags=["messages"])


@router.get("/conversations", response_model=list[Conversation])
def list_conversations(user_id: str = Query(...)):
    return message_store.list_conversations(user_id)


@router.post("/conversations", response_model=Conversation)
def start_conversation(request: ConversationStartRequest, authorization: Optional[str] = Header(default=None)):
    assert_actor_authorized(actor_user_id=request.user_id, authorization=authorization)
    try:
        return message_store.start_conversation(request.user_id, request.other_user_id)
    except MessageStoreError as exc:
        raise_http_error(exc)


@router.get("/conversations/{conversation_id}", response_model=ConversationView)
def get_conversation(conversation_id: str, user_id: str = Query(...)):
    try:
        messages = message_store.get_messages(conversation_id, viewer_id=user_id)
        conversation = message_store.get_conversation(conversation_id)
    except MessageStoreError as exc:
        raise_http_error(exc)
    return ConversationView(
        conversation=conversation,
        messages=messages,
        typing=message_store.is_typing(conversation_id),
    )


@router.post("/conversations/{conversation_id}/messages", response_model=Message)
def send_message(
    conversation_id: str,
    request: MessageSendRequest,
    authorization: Optional[str] = Header(default=None),
):
    assert_actor_authorized(actor_user_id=request.user_id, authorization=authorization)
    try:
        message = message_store.send_message(conversation_id, sender_id=request.user_id, content=request.content)
    except MessageStoreError as exc:
        raise_http_error(exc)
    sender = marketplace_store.get_user(message.sender_id)
    notification_store.create(
        user_id=message.receiver_id,
        message=f"✉️ Nouveau message de {sender.name if sender else 'un utilisateur'}.",
        type="new_message",
        link_to="messages",
    )
    return message


@router.post("/conversations/{conversation_id}/read", response_model=Conversation)
def mark_conversation_read(
    conversation_id: str,
    user_id: str = Query(...),
    authorization: Optional[str] = Header(default=None),
):
    assert_actor_authorized(actor_user_id=user_id, authorization=authorization)
    try:
        return message_store.mark_conversation_read(conversation_id, viewer_id=user_id)
    except MessageStoreError as exc:
        raise_http_error(exc)


@router.get("/unread-count", response_model=UnreadCount)
def unread_count(user_id: str = Query(...)):
    return UnreadCount(user_id=user_id, unread=message_store.unread_message_count(user_id))
