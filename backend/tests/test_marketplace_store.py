import os
import sys

import pytest

sys.path.insert(0, os.path.dirname(os.path.dirname(__file__)))

from allowork.data import CATEGORIES
from allowork.services.marketplace_store import (
    MarketplaceConflictError,
    MarketplaceNotFoundError,
    MarketplacePermissionError,
    MarketplaceStore,
    MarketplaceValidationError,
)
from allowork.services.message_store import MessageStore
from allowork.services.notification_store import NotificationStore


class IdleScheduler:
    def call_later(self, delay, callback):
        return None


@pytest.fixture
def store():
    return MarketplaceStore(admin_email="admin@allowork.ga", admin_password="secret")


def _register_provider(store, email, specialty):
    return store.register_user(
        name=email.split("@")[0],
        email=email,
        password="pw",
        phone="066 00 00 00",
        role="provider",
        location="Owendo",
        specialty=specialty,
    )


def test_seeded_conversations_reference_known_users(store):
    user_ids = set(store.list_user_ids())
    messages = MessageStore(scheduler=IdleScheduler())
    for conversation in messages.snapshot()["conversations"]:
        assert len(conversation.participants) == 2
        assert set(conversation.participants) <= user_ids


def test_every_booking_has_distinct_client_and_provider(store):
    store.create_booking(client_id="u2", service_id="s2")
    store.create_booking(client_id="p1", service_id="s5")
    for booking in store.list_bookings():
        assert booking.client_id != booking.provider_id


def test_booking_own_service_is_rejected(store):
    with pytest.raises(MarketplaceValidationError):
        store.create_booking(client_id="p1", service_id="s1")


def test_create_booking_is_pending_with_service_price(store):
    booking = store.create_booking(client_id="u2", service_id="s4")
    assert booking.status == "pending"
    assert booking.provider_id == "p4"
    assert booking.total_price == 10000
    assert booking in store.list_bookings(user_id="p4")
    assert booking in store.list_bookings(user_id="u2")
    assert booking not in store.list_bookings(user_id="p1")


def test_booking_unknown_service_or_client(store):
    with pytest.raises(MarketplaceNotFoundError):
        store.create_booking(client_id="u2", service_id="nope")
    with pytest.raises(MarketplaceNotFoundError):
        store.create_booking(client_id="ghost", service_id="s1")


def test_request_notifies_exactly_matching_specialty(store):
    extra_plumber = _register_provider(store, "plombier2@allowork.ga", "Plomberie")
    _register_provider(store, "jardinier@allowork.ga", "Jardinage")
    store.register_user(
        name="Client Plomberie",
        email="client.plomberie@gmail.com",
        password="pw",
        phone="074 00 00 01",
        role="client",
        specialty="Plomberie",
    )
    notifications = NotificationStore()

    request = store.post_request(
        user_id="u2",
        title="Fuite sous l'évier",
        description="",
        category="Plomberie",
        location="Akanda",
        budget=5000,
    )
    created = notifications.notify_request_match(request, store.matching_providers(request.category))

    assert {n.user_id for n in created} == {"p1", extra_plumber.id}
    assert len(created) == 2
    assert all(n.type == "request_match" and not n.read for n in created)
    assert created[0].message == '🔔 Nouvelle demande en Plomberie : "Fuite sous l\'évier" à Akanda.'


def test_specialty_match_is_case_sensitive(store):
    assert store.matching_providers("plomberie") == []
    assert [user.id for user in store.matching_providers("Plomberie")] == ["p1"]


def test_request_without_matching_provider_notifies_nobody(store):
    request = store.post_request(
        user_id="u2",
        title="Coupe à domicile",
        description="",
        category="Coiffure",
        location="Glass",
    )
    assert NotificationStore().notify_request_match(request, store.matching_providers(request.category)) == []


def test_post_request_is_open_and_listed_first(store):
    request = store.post_request(
        user_id="u2",
        title="  Dépannage ordinateur  ",
        description="Mon PC ne démarre plus.",
        category="Informatique",
        location="PK8",
        budget=-10,
    )
    assert request.status == "open"
    assert request.title == "Dépannage ordinateur"
    assert request.user_name == "Client Test"
    assert request.budget == 0
    assert store.list_requests()[0].id == request.id
    assert store.list_requests(user_id="u2")[0].id == request.id
    assert all(row.category == "Informatique" for row in store.list_requests(category="Informatique"))


@pytest.mark.parametrize(
    "overrides",
    [
        {"title": "   "},
        {"category": "Astrologie"},
        {"location": "Paris"},
    ],
)
def test_post_request_validation(store, overrides):
    kwargs = {
        "user_id": "u2",
        "title": "Besoin d'un électricien",
        "description": "",
        "category": "Électricité",
        "location": "Louis",
    }
    kwargs.update(overrides)
    with pytest.raises(MarketplaceValidationError):
        store.post_request(**kwargs)


def test_register_requires_all_fields_and_unique_email(store):
    with pytest.raises(MarketplaceValidationError):
        store.register_user(name="", email="x@y.ga", password="pw", phone="1")
    with pytest.raises(MarketplaceConflictError):
        store.register_user(name="Dup", email="Client@Gmail.com", password="pw", phone="1")
    with pytest.raises(MarketplaceConflictError):
        store.register_user(name="Admin", email="admin@allowork.ga", password="pw", phone="1")


def test_register_keeps_specialty_for_providers_only(store):
    client = store.register_user(
        name="Awa", email="awa@gmail.com", password="pw", phone="1", role="client", specialty="Ménage"
    )
    provider = _register_provider(store, "nettoyage@allowork.ga", "Ménage")
    default_provider = store.register_user(
        name="Pro", email="pro@allowork.ga", password="pw", phone="1", role="provider"
    )
    assert client.specialty is None
    assert client.location == "Centre Ville"
    assert provider.specialty == "Ménage"
    assert default_provider.specialty == CATEGORIES[0]


def test_authenticate_admin_known_and_demo_users(store):
    assert store.authenticate("admin@allowork.ga", "secret").role == "admin"
    with pytest.raises(MarketplacePermissionError):
        store.authenticate("admin@allowork.ga", "wrong")

    assert store.authenticate("jean@bricole.ga", "anything").id == "p1"

    demo = store.authenticate("Nouveau.Client@gmail.com", "")
    assert demo.role == "client"
    assert demo.name == "nouveau.client"
    assert demo.location == "Centre Ville"
    assert store.authenticate("nouveau.client@gmail.com", "").id == demo.id

    with pytest.raises(MarketplaceValidationError):
        store.authenticate("  ", "")


def test_provider_phone_lookup(store):
    assert store.provider_phone("p1") == "066 99 88 77"
    assert store.provider_phone("p4") == "N/A"
    assert store.provider_phone("unknown") == "N/A"


def test_list_services_by_category(store):
    assert len(store.list_services()) == 5
    assert len(store.list_services("Tous")) == 5
    assert [service.id for service in store.list_services("Ménage")] == ["s2"]


def test_proposal_checks(store):
    request, provider = store.check_proposal(request_id="r1", provider_id="p1")
    assert request.user_id == "u2"
    assert provider.name == "Jean Bricole"
    with pytest.raises(MarketplaceValidationError):
        store.check_proposal(request_id="r1", provider_id="u2")
    with pytest.raises(MarketplaceNotFoundError):
        store.check_proposal(request_id="missing", provider_id="p1")


def test_admin_stats_reflect_collections(store):
    store.create_booking(client_id="u2", service_id="s2")
    stats = store.admin_stats()

    assert stats.total_users == len(store.list_user_ids())
    assert stats.total_providers == 5
    assert stats.total_revenue == 15000 + 35000 + 25000
    assert stats.active_bookings == 2
    assert stats.total_requests == 2
    assert stats.activity_by_category["Plomberie"] == 2
    assert stats.activity_by_category["Ménage"] == 1
    assert [r.id for r in stats.recent_requests] == ["r1", "r2"]


def test_seeded_requests_carry_their_owner_name(store):
    for request in store.list_requests():
        assert request.user_name == store.require_user(request.user_id).name
