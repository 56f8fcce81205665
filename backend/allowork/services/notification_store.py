import logging
from datetime import datetime, timezone
from threading import Lock
from typing import Iterable, List, Optional
from uuid import uuid4

from allowork.models import Notification, ServiceRequest, User

logger = logging.getLogger(__name__)


class NotificationStore:
    def __init__(self):
        self._lock = Lock()
        self._notifications: List[Notification] = []

    def create(
        self,
        user_id: str,
        message: str,
        type: str,
        link_to: Optional[str] = "dashboard",
    ) -> Notification:
        record = Notification(
            id=f"ntf_{uuid4().hex[:10]}",
            user_id=user_id,
            message=message,
            type=type,  # type: ignore[arg-type]
            read=False,
            created_at=datetime.now(timezone.utc).isoformat(),
            link_to=link_to,
        )
        with self._lock:
            self._notifications.insert(0, record)
        return record

    def notify_request_match(self, request: ServiceRequest, providers: Iterable[User]) -> List[Notification]:
        """Create one ``request_match`` notification per matching provider."""
        created = [
            self.create(
                user_id=provider.id,
                message=f'🔔 Nouvelle demande en {request.category} : "{request.title}" à {request.location}.',
                type="request_match",
                link_to="dashboard",
            )
            for provider in providers
        ]
        if created:
            logger.info("Notifications sent to %d providers for request %s", len(created), request.id)
        return created

    def list_for_user(self, user_id: str, unread_only: bool = False) -> List[Notification]:
        with self._lock:
            rows = [n for n in self._notifications if n.user_id == user_id]
            if unread_only:
                rows = [n for n in rows if not n.read]
            return rows[:100]

    def unread_count(self, user_id: str) -> int:
        with self._lock:
            return sum(1 for n in self._notifications if n.user_id == user_id and not n.read)

    def mark_read(self, user_id: str, notification_id: str) -> Optional[Notification]:
        with self._lock:
            for idx, row in enumerate(self._notifications):
                if row.id == notification_id and row.user_id == user_id:
                    updated = row.model_copy(update={"read": True})
                    self._notifications[idx] = updated
                    return updated
        return None

    def mark_all_read(self, user_id: str) -> int:
        changed = 0
        with self._lock:
            for idx, row in enumerate(self._notifications):
                if row.user_id == user_id and not row.read:
                    self._notifications[idx] = row.model_copy(update={"read": True})
                    changed += 1
        return changed


notification_store = NotificationStore()
