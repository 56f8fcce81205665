from typing import Optional

from fastapi import APIRouter, Header, Query

from allowork.auth import assert_actor_authorized
from allowork.http_errors import raise_http_error
from allowork.models import Booking, BookingRequest
from allowork.services.marketplace_store import MarketplaceError, marketplace_store
from allowork.services.notification_store import notification_store

router = APIRouter(prefix="/bookings", tags=["bookings"])


@router.post("", response_model=Booking)
def create_booking(request: BookingRequest, authorization: Optional[str] = Header(default=None)):
    assert_actor_authorized(actor_user_id=request.user_id, authorization=authorization)
    try:
        booking = marketplace_store.create_booking(client_id=request.user_id, service_id=request.service_id)
        client = marketplace_store.require_user(booking.client_id)
        service = marketplace_store.get_service(booking.service_id)
    except MarketplaceError as exc:
        raise_http_error(exc)
    notification_store.create(
        user_id=booking.provider_id,
        message=f"📅 Nouvelle réservation de {client.name} pour {service.title}.",
        type="booking_update",
        link_to="dashboard",
    )
    return booking


@router.get("", response_model=list[Booking])
def list_bookings(user_id: Optional[str] = Query(default=None)):
    return marketplace_store.list_bookings(user_id=user_id)
