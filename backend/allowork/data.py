from datetime import datetime, timedelta, timezone
from enum import Enum
from typing import List

from allowork.models import Booking, Conversation, Message, Service, ServiceRequest, User


class Quartier(str, Enum):
    LOUIS = "Louis"
    CHARBONNAGES = "Charbonnages"
    NZENG_AYONG = "Nzeng-Ayong"
    AKANDA = "Akanda"
    OWENDO = "Owendo"
    CENTRE_VILLE = "Centre Ville"
    BATTERIE_4 = "Batterie 4"
    PK8 = "PK8"
    GLASS = "Glass"
    MONT_BOUET = "Mont-Bouët"
    OLOUMI = "Oloumi"


KNOWN_QUARTIERS = [quartier.value for quartier in Quartier]

CATEGORIES = [
    "Plomberie",
    "Électricité",
    "Ménage",
    "Jardinage",
    "Coiffure",
    "Informatique",
    "Déménagement",
    "Cours Particuliers",
    "Climatisation",
]

ALL_CATEGORIES = "Tous"


def seed_services() -> List[Service]:
    return [
        Service(
            id="s1",
            provider_id="p1",
            provider_name="Jean Bricole",
            title="Plomberie d'urgence",
            description="Réparation de fuites et débouchage rapide.",
            category="Plomberie",
            price=15000,
            location=Quartier.LOUIS.value,
            rating=4.8,
            image="https://picsum.photos/400/300?random=1",
        ),
        Service(
            id="s2",
            provider_id="p2",
            provider_name="Marie Claire",
            title="Ménage complet",
            description="Nettoyage de maison et bureaux, produits inclus.",
            category="Ménage",
            price=25000,
            location=Quartier.AKANDA.value,
            rating=4.9,
            image="https://picsum.photos/400/300?random=2",
        ),
        Service(
            id="s3",
            provider_id="p3",
            provider_name="ElecGabon Pro",
            title="Installation Électrique",
            description="Mise aux normes et installation de compteurs.",
            category="Électricité",
            price=35000,
            location=Quartier.NZENG_AYONG.value,
            rating=4.5,
            image="https://picsum.photos/400/300?random=3",
        ),
        Service(
            id="s4",
            provider_id="p4",
            provider_name="Coach Paul",
            title="Cours de Mathématiques",
            description="Soutien scolaire pour lycée et collège.",
            category="Cours Particuliers",
            price=10000,
            location=Quartier.CHARBONNAGES.value,
            rating=5.0,
            image="https://picsum.photos/400/300?random=4",
        ),
        Service(
            id="s5",
            provider_id="p5",
            provider_name="Clim Express",
            title="Entretien Climatiseur",
            description="Nettoyage et recharge de gaz.",
            category="Climatisation",
            price=20000,
            location=Quartier.CENTRE_VILLE.value,
            rating=4.6,
            image="https://picsum.photos/400/300?random=5",
        ),
    ]


def seed_users(admin_email: str) -> List[User]:
    return [
        User(id="u1", name="Admin Allowork", email=admin_email, role="admin"),
        User(
            id="u2",
            name="Client Test",
            email="client@gmail.com",
            phone_number="074 00 11 22",
            role="client",
            location=Quartier.BATTERIE_4.value,
        ),
        User(
            id="p1",
            name="Jean Bricole",
            email="jean@bricole.ga",
            phone_number="066 99 88 77",
            role="provider",
            specialty="Plomberie",
            location=Quartier.LOUIS.value,
        ),
        User(
            id="p2",
            name="Marie Claire",
            email="marie.claire@allowork.ga",
            phone_number="062 11 22 33",
            role="provider",
            specialty="Ménage",
            location=Quartier.AKANDA.value,
        ),
        User(
            id="p3",
            name="ElecGabon Pro",
            email="contact@elecgabon.ga",
            phone_number="077 45 67 89",
            role="provider",
            specialty="Électricité",
            location=Quartier.NZENG_AYONG.value,
        ),
        User(
            id="p4",
            name="Coach Paul",
            email="coach.paul@allowork.ga",
            role="provider",
            specialty="Cours Particuliers",
            location=Quartier.CHARBONNAGES.value,
        ),
        User(
            id="p5",
            name="Clim Express",
            email="clim.express@allowork.ga",
            phone_number="065 30 30 30",
            role="provider",
            specialty="Climatisation",
            location=Quartier.CENTRE_VILLE.value,
        ),
        User(id="u3", name="Marc O.", email="marc.o@gmail.com", role="client", location=Quartier.CENTRE_VILLE.value),
    ]


def seed_bookings() -> List[Booking]:
    return [
        Booking(id="b1", service_id="s1", client_id="u2", provider_id="p1", date="2023-10-25", status="completed", total_price=15000),
        Booking(id="b2", service_id="s3", client_id="u2", provider_id="p3", date="2023-11-02", status="pending", total_price=35000),
    ]


def seed_requests() -> List[ServiceRequest]:
    return [
        ServiceRequest(
            id="r1",
            user_id="u2",
            user_name="Client Test",
            title="Recherche Plombier pour fuite",
            description="Bonjour, j'ai une fuite importante sous mon évier à Akanda. Urgent merci.",
            category="Plomberie",
            location=Quartier.AKANDA.value,
            budget=10000,
            date="2023-11-10",
        ),
        ServiceRequest(
            id="r2",
            user_id="u3",
            user_name="Marc O.",
            title="Besoin d'aide déménagement",
            description="Cherche 2 bras pour monter un canapé au 3ème étage.",
            category="Déménagement",
            location=Quartier.CENTRE_VILLE.value,
            budget=15000,
            date="2023-11-11",
        ),
    ]


def seed_messages() -> List[Message]:
    now = datetime.now(timezone.utc)
    return [
        Message(
            id="m0",
            sender_id="u2",
            receiver_id="p1",
            content="Bonjour Jean, faites-vous les interventions le weekend ?",
            timestamp=(now - timedelta(hours=2)).isoformat(),
            read=True,
        ),
        Message(
            id="m1",
            sender_id="p1",
            receiver_id="u2",
            content="Bonjour, je suis disponible demain pour la plomberie.",
            timestamp=(now - timedelta(hours=1)).isoformat(),
            read=False,
        ),
    ]


def seed_conversations(messages: List[Message]) -> List[Conversation]:
    last = next(message for message in messages if message.id == "m1")
    return [Conversation(id="c1", participants=["u2", "p1"], last_message=last, unread_count=1)]
