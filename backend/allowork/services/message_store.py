import logging
import os
from datetime import datetime, timezone
from threading import Lock, Timer
from typing import Callable, Dict, List, Optional, Set
from uuid import uuid4

from allowork.data import seed_conversations, seed_messages
from allowork.models import Conversation, Message
from allowork.services.marketplace_store import marketplace_store

logger = logging.getLogger(__name__)

CANNED_REPLY = "Merci pour votre message. Je vous réponds dès que possible."
CONVERSATION_STARTED = "Nouvelle conversation démarrée"


def _read_delay_env(name: str, default: float) -> float:
    raw = os.getenv(name)
    if raw is None:
        return default
    try:
        value = float(raw)
    except ValueError:
        return default
    return value if value >= 0 else default


READ_RECEIPT_DELAY_SECONDS = _read_delay_env("MESSAGE_READ_RECEIPT_DELAY_SECONDS", 1.5)
TYPING_DELAY_SECONDS = _read_delay_env("MESSAGE_TYPING_DELAY_SECONDS", 2.5)
REPLY_DELAY_SECONDS = _read_delay_env("MESSAGE_REPLY_DELAY_SECONDS", 5.0)


class MessageStoreError(ValueError):
    pass


class MessageStoreNotFoundError(MessageStoreError):
    pass


class MessageStorePermissionError(MessageStoreError):
    pass


class TimerScheduler:
    """Runs each callback once on its own daemon timer thread."""

    def call_later(self, delay: float, callback: Callable[[], None]) -> None:
        timer = Timer(delay, callback)
        timer.daemon = True
        timer.start()


def _utc_now_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


class MessageStore:
    """Conversations, messages and the scripted counterpart simulation.

    Every send schedules three independent callbacks: the read receipt on
    the sent message, the counterpart "typing" indicator, and the canned
    reply that clears it. Callbacks are never cancelled or de-duplicated, so
    two quick sends produce two replies.
    """

    def __init__(
        self,
        scheduler=None,
        read_receipt_delay: float = READ_RECEIPT_DELAY_SECONDS,
        typing_delay: float = TYPING_DELAY_SECONDS,
        reply_delay: float = REPLY_DELAY_SECONDS,
        seed: bool = True,
        user_exists: Optional[Callable[[str], bool]] = None,
    ):
        self._lock = Lock()
        self.user_exists = user_exists
        self.scheduler = scheduler or TimerScheduler()
        self.read_receipt_delay = read_receipt_delay
        self.typing_delay = typing_delay
        self.reply_delay = reply_delay
        self._messages: List[Message] = seed_messages() if seed else []
        self._conversations: List[Conversation] = seed_conversations(self._messages) if seed else []
        self._typing: Set[str] = set()

    def _find_conversation(self, conversation_id: str) -> Optional[Conversation]:
        return next((c for c in self._conversations if c.id == conversation_id), None)

    def _replace_conversation(self, conversation_id: str, **update) -> Optional[Conversation]:
        for idx, row in enumerate(self._conversations):
            if row.id == conversation_id:
                updated = row.model_copy(update=update)
                self._conversations[idx] = updated
                return updated
        return None

    def _counterpart(self, conversation: Conversation, user_id: str) -> str:
        if user_id not in conversation.participants:
            raise MessageStorePermissionError("User is not a participant of this conversation")
        other = next((p for p in conversation.participants if p != user_id), None)
        if not other:
            raise MessageStoreNotFoundError("Conversation has no counterpart")
        return other

    def get_conversation(self, conversation_id: str) -> Conversation:
        with self._lock:
            conversation = self._find_conversation(conversation_id)
        if not conversation:
            raise MessageStoreNotFoundError("Conversation not found")
        return conversation

    def list_conversations(self, user_id: str) -> List[Conversation]:
        with self._lock:
            rows = [c for c in self._conversations if user_id in c.participants]
        rows.sort(key=lambda c: c.last_message.timestamp, reverse=True)
        return rows

    def start_conversation(self, user_id: str, other_user_id: str) -> Conversation:
        if user_id == other_user_id:
            raise MessageStoreError("Cannot start a conversation with yourself")
        if self.user_exists:
            for participant in (user_id, other_user_id):
                if not self.user_exists(participant):
                    raise MessageStoreNotFoundError(f"User not found: {participant}")
        with self._lock:
            existing = next(
                (
                    c
                    for c in self._conversations
                    if user_id in c.participants and other_user_id in c.participants
                ),
                None,
            )
            if existing:
                return existing
            conversation = Conversation(
                id=f"c_{uuid4().hex[:8]}",
                participants=[user_id, other_user_id],
                unread_count=0,
                last_message=Message(
                    id=f"m_{uuid4().hex[:10]}",
                    sender_id=user_id,
                    receiver_id=other_user_id,
                    content=CONVERSATION_STARTED,
                    timestamp=_utc_now_iso(),
                    read=True,
                ),
            )
            self._conversations.insert(0, conversation)
        return conversation

    def get_messages(self, conversation_id: str, viewer_id: str) -> List[Message]:
        conversation = self.get_conversation(conversation_id)
        other = self._counterpart(conversation, viewer_id)
        pair = {viewer_id, other}
        with self._lock:
            return [m for m in self._messages if {m.sender_id, m.receiver_id} == pair]

    def mark_conversation_read(self, conversation_id: str, viewer_id: str) -> Conversation:
        other = self._counterpart(self.get_conversation(conversation_id), viewer_id)
        with self._lock:
            conversation = self._find_conversation(conversation_id)
            if not conversation:
                raise MessageStoreNotFoundError("Conversation not found")
            for idx, message in enumerate(self._messages):
                if message.sender_id == other and message.receiver_id == viewer_id and not message.read:
                    self._messages[idx] = message.model_copy(update={"read": True})
            last = conversation.last_message
            if last.sender_id == other and not last.read:
                last = last.model_copy(update={"read": True})
            updated = self._replace_conversation(conversation_id, unread_count=0, last_message=last)
        return updated or conversation

    def is_typing(self, conversation_id: str) -> bool:
        with self._lock:
            return conversation_id in self._typing

    def unread_message_count(self, user_id: str) -> int:
        with self._lock:
            return sum(
                c.unread_count
                for c in self._conversations
                if user_id in c.participants and c.last_message.sender_id != user_id and not c.last_message.read
            )

    def send_message(self, conversation_id: str, sender_id: str, content: str) -> Message:
        text = content.strip()
        if not text:
            raise MessageStoreError("Message content is required")
        conversation = self.get_conversation(conversation_id)
        receiver_id = self._counterpart(conversation, sender_id)

        message = Message(
            id=f"m_{uuid4().hex[:10]}",
            sender_id=sender_id,
            receiver_id=receiver_id,
            content=text,
            timestamp=_utc_now_iso(),
            read=False,
        )
        with self._lock:
            self._messages.append(message)
            self._replace_conversation(conversation_id, last_message=message, unread_count=0)

        self.scheduler.call_later(self.read_receipt_delay, lambda: self._deliver_read_receipt(message.id))
        self.scheduler.call_later(self.typing_delay, lambda: self._start_typing(conversation_id))
        self.scheduler.call_later(
            self.reply_delay,
            lambda: self._deliver_canned_reply(conversation_id, sender_id=receiver_id, receiver_id=sender_id),
        )
        return message

    def _deliver_read_receipt(self, message_id: str) -> None:
        with self._lock:
            for idx, row in enumerate(self._messages):
                if row.id == message_id:
                    self._messages[idx] = row.model_copy(update={"read": True})
                    break
            for idx, conversation in enumerate(self._conversations):
                if conversation.last_message.id == message_id:
                    last = conversation.last_message.model_copy(update={"read": True})
                    self._conversations[idx] = conversation.model_copy(update={"last_message": last})
        logger.debug("Read receipt delivered for %s", message_id)

    def _start_typing(self, conversation_id: str) -> None:
        with self._lock:
            self._typing.add(conversation_id)

    def _deliver_canned_reply(self, conversation_id: str, sender_id: str, receiver_id: str) -> None:
        reply = Message(
            id=f"m_{uuid4().hex[:10]}",
            sender_id=sender_id,
            receiver_id=receiver_id,
            content=CANNED_REPLY,
            timestamp=_utc_now_iso(),
            read=False,
        )
        with self._lock:
            self._typing.discard(conversation_id)
            self._messages.append(reply)
            conversation = self._find_conversation(conversation_id)
            if conversation:
                self._replace_conversation(
                    conversation_id,
                    last_message=reply,
                    unread_count=conversation.unread_count + 1,
                )
        logger.info("Canned reply delivered in conversation %s", conversation_id)

    def snapshot(self) -> Dict[str, List]:
        with self._lock:
            return {"conversations": list(self._conversations), "messages": list(self._messages)}


message_store = MessageStore(user_exists=lambda user_id: marketplace_store.get_user(user_id) is not None)
