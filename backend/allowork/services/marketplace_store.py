import logging
import os
from collections import Counter
from dataclasses import dataclass, field
from datetime import datetime, timezone
from threading import Lock
from typing import Dict, List, Optional
from uuid import uuid4

from allowork.data import (
    ALL_CATEGORIES,
    CATEGORIES,
    KNOWN_QUARTIERS,
    Quartier,
    seed_bookings,
    seed_requests,
    seed_services,
    seed_users,
)
from allowork.models import AdminStats, Booking, Service, ServiceRequest, User

logger = logging.getLogger(__name__)

DEFAULT_ADMIN_EMAIL = "admin@allowork.ga"
DEFAULT_ADMIN_PASSWORD = "allowork-admin"
DEMO_PHONE_NUMBER = "077 00 00 00"


class MarketplaceError(ValueError):
    """Base class for user-visible marketplace errors."""


class MarketplaceValidationError(MarketplaceError):
    pass


class MarketplaceNotFoundError(MarketplaceError):
    pass


class MarketplaceConflictError(MarketplaceError):
    pass


class MarketplacePermissionError(MarketplaceError):
    pass


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


@dataclass
class MarketplaceStore:
    admin_email: str = DEFAULT_ADMIN_EMAIL
    admin_password: str = DEFAULT_ADMIN_PASSWORD
    users: List[User] = field(default_factory=list)
    services: List[Service] = field(default_factory=list)
    requests: List[ServiceRequest] = field(default_factory=list)
    bookings: List[Booking] = field(default_factory=list)

    def __post_init__(self) -> None:
        self._lock = Lock()
        self.admin_email = self.admin_email.strip().lower()
        if not self.users:
            self.users = seed_users(self.admin_email)
        if not self.services:
            self.services = seed_services()
        if not self.requests:
            self.requests = seed_requests()
        if not self.bookings:
            self.bookings = seed_bookings()

    # Users

    def get_user(self, user_id: str) -> Optional[User]:
        with self._lock:
            return next((user for user in self.users if user.id == user_id), None)

    def require_user(self, user_id: str) -> User:
        user = self.get_user(user_id)
        if not user:
            raise MarketplaceNotFoundError("User not found")
        return user

    def find_user_by_email(self, email: str) -> Optional[User]:
        normalized = email.strip().lower()
        with self._lock:
            return next((user for user in self.users if user.email.lower() == normalized), None)

    def list_user_ids(self) -> List[str]:
        with self._lock:
            return [user.id for user in self.users]

    def register_user(
        self,
        *,
        name: str,
        email: str,
        password: str,
        phone: str,
        role: str = "client",
        location: Optional[str] = None,
        specialty: Optional[str] = None,
    ) -> User:
        name = name.strip()
        email = email.strip()
        phone = phone.strip()
        if not name or not email or not password or not phone:
            raise MarketplaceValidationError("Veuillez remplir tous les champs obligatoires.")
        if role not in {"client", "provider"}:
            raise MarketplaceValidationError("Invalid role value. Allowed: client, provider")
        if location and location not in KNOWN_QUARTIERS:
            raise MarketplaceValidationError(f"Unknown quartier: {location}")
        if role == "provider":
            specialty = specialty or CATEGORIES[0]
            if specialty not in CATEGORIES:
                raise MarketplaceValidationError(f"Unknown category: {specialty}")
        else:
            specialty = None
        if email.lower() == self.admin_email or self.find_user_by_email(email):
            raise MarketplaceConflictError("An account already exists for this email")

        user = User(
            id=f"u_{uuid4().hex[:8]}",
            name=name,
            email=email,
            phone_number=phone,
            role=role,  # type: ignore[arg-type]
            location=location or Quartier.CENTRE_VILLE.value,
            specialty=specialty,
        )
        with self._lock:
            self.users.append(user)
        logger.info("Registered %s user %s", user.role, user.id)
        return user

    def authenticate(self, email: str, password: str) -> User:
        """Resolve a login attempt to a user.

        The admin account requires the configured password. Any other known
        email logs straight in, and an unknown email gets a demo client
        account created on the fly.
        """
        normalized = email.strip().lower()
        if not normalized:
            raise MarketplaceValidationError("email is required")
        if normalized == self.admin_email:
            if password != self.admin_password:
                raise MarketplacePermissionError("Identifiants incorrects.")
            admin = next((user for user in self.users if user.role == "admin"), None)
            if not admin:
                raise MarketplaceNotFoundError("Admin account is not configured")
            return admin

        existing = self.find_user_by_email(normalized)
        if existing:
            return existing

        user = User(
            id=f"u_{uuid4().hex[:8]}",
            name=normalized.split("@", 1)[0],
            email=normalized,
            role="client",
            phone_number=DEMO_PHONE_NUMBER,
            location=Quartier.CENTRE_VILLE.value,
        )
        with self._lock:
            self.users.append(user)
        logger.info("Created demo client %s on login", user.id)
        return user

    def matching_providers(self, category: str) -> List[User]:
        with self._lock:
            return [user for user in self.users if user.role == "provider" and user.specialty == category]

    def provider_phone(self, provider_id: str) -> str:
        provider = self.get_user(provider_id)
        if not provider or not provider.phone_number:
            return "N/A"
        return provider.phone_number

    # Services

    def list_services(self, category: Optional[str] = None) -> List[Service]:
        with self._lock:
            rows = list(self.services)
        if category and category != ALL_CATEGORIES:
            rows = [service for service in rows if service.category == category]
        return rows

    def get_service(self, service_id: str) -> Service:
        with self._lock:
            service = next((row for row in self.services if row.id == service_id), None)
        if not service:
            raise MarketplaceNotFoundError("Service not found")
        return service

    # Requests

    def post_request(
        self,
        *,
        user_id: str,
        title: str,
        description: str,
        category: str,
        location: str,
        budget: int = 0,
    ) -> ServiceRequest:
        author = self.require_user(user_id)
        title = title.strip()
        if not title:
            raise MarketplaceValidationError("title is required")
        if category not in CATEGORIES:
            raise MarketplaceValidationError(f"Unknown category: {category}")
        if location not in KNOWN_QUARTIERS:
            raise MarketplaceValidationError(f"Unknown quartier: {location}")

        request = ServiceRequest(
            id=f"r_{uuid4().hex[:8]}",
            user_id=author.id,
            user_name=author.name,
            title=title,
            description=description.strip(),
            category=category,
            location=location,
            budget=max(0, int(budget or 0)),
            date=_utc_now().date().isoformat(),
            status="open",
        )
        with self._lock:
            self.requests.insert(0, request)
        return request

    def list_requests(self, user_id: Optional[str] = None, category: Optional[str] = None) -> List[ServiceRequest]:
        with self._lock:
            rows = list(self.requests)
        if user_id:
            rows = [row for row in rows if row.user_id == user_id]
        if category and category != ALL_CATEGORIES:
            rows = [row for row in rows if row.category == category]
        return rows

    def get_request(self, request_id: str) -> ServiceRequest:
        with self._lock:
            request = next((row for row in self.requests if row.id == request_id), None)
        if not request:
            raise MarketplaceNotFoundError("Request not found")
        return request

    def check_proposal(self, *, request_id: str, provider_id: str) -> tuple[ServiceRequest, User]:
        request = self.get_request(request_id)
        provider = self.require_user(provider_id)
        if provider.id == request.user_id:
            raise MarketplaceValidationError("You cannot send a proposal on your own request")
        if request.status != "open":
            raise MarketplaceConflictError("Request is no longer open")
        return request, provider

    # Bookings

    def create_booking(self, *, client_id: str, service_id: str) -> Booking:
        client = self.require_user(client_id)
        service = self.get_service(service_id)
        if client.id == service.provider_id:
            raise MarketplaceValidationError("You cannot book your own service")
        if not service.is_available:
            raise MarketplaceConflictError("Service is not available")

        booking = Booking(
            id=f"b_{uuid4().hex[:8]}",
            service_id=service.id,
            client_id=client.id,
            provider_id=service.provider_id,
            date=_utc_now().date().isoformat(),
            status="pending",
            total_price=service.price,
        )
        with self._lock:
            self.bookings.append(booking)
        return booking

    def list_bookings(self, user_id: Optional[str] = None) -> List[Booking]:
        with self._lock:
            rows = list(self.bookings)
        if user_id:
            rows = [row for row in rows if user_id in (row.client_id, row.provider_id)]
        return rows

    # Admin

    def admin_stats(self) -> AdminStats:
        with self._lock:
            users = list(self.users)
            services = list(self.services)
            requests = list(self.requests)
            bookings = list(self.bookings)

        service_categories: Dict[str, str] = {service.id: service.category for service in services}
        activity: Counter = Counter()
        for request in requests:
            activity[request.category] += 1
        for booking in bookings:
            category = service_categories.get(booking.service_id)
            if category:
                activity[category] += 1

        return AdminStats(
            total_users=len(users),
            total_providers=sum(1 for user in users if user.role == "provider"),
            total_revenue=sum(booking.total_price for booking in bookings),
            active_bookings=sum(1 for booking in bookings if booking.status == "pending"),
            total_requests=len(requests),
            activity_by_category=dict(activity.most_common()),
            recent_requests=requests[:5],
        )


marketplace_store = MarketplaceStore(
    admin_email=os.getenv("ADMIN_EMAIL", DEFAULT_ADMIN_EMAIL),
    admin_password=os.getenv("ADMIN_PASSWORD", DEFAULT_ADMIN_PASSWORD),
)
