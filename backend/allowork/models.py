from typing import Dict, List, Literal, Optional

from pydantic import BaseModel, Field


UserRole = Literal["client", "provider", "admin"]
RegistrableRole = Literal["client", "provider"]
BookingStatus = Literal["pending", "confirmed", "completed", "cancelled"]
NotificationType = Literal["request_match", "booking_update", "proposal", "new_message"]


class User(BaseModel):
    id: str
    name: str
    email: str
    phone_number: Optional[str] = None
    specialty: Optional[str] = None
    role: UserRole
    avatar: Optional[str] = None
    location: Optional[str] = None


class Review(BaseModel):
    id: str
    user_id: str
    user_name: str
    rating: int = Field(ge=1, le=5)
    comment: str
    date: str


class Service(BaseModel):
    id: str
    provider_id: str
    provider_name: str
    title: str
    description: str
    category: str
    price: int
    location: str
    rating: float
    reviews: List[Review] = Field(default_factory=list)
    image: str = ""
    is_available: bool = True


class ServiceRequest(BaseModel):
    id: str
    user_id: str
    user_name: str
    title: str
    description: str
    category: str
    location: str
    budget: int = 0
    date: str
    status: Literal["open", "fulfilled"] = "open"


class ServiceRequestCreate(BaseModel):
    user_id: str
    title: str
    description: str = ""
    category: str
    location: str
    budget: int = Field(default=0, ge=0)


class ServiceRequestPosted(BaseModel):
    request: ServiceRequest
    notified_providers: int


class DescriptionDraftRequest(BaseModel):
    title: str
    category: str


class DescriptionDraft(BaseModel):
    description: str


class ProposalRequest(BaseModel):
    user_id: str
    message: str = ""


class Booking(BaseModel):
    id: str
    service_id: str
    client_id: str
    provider_id: str
    date: str
    status: BookingStatus = "pending"
    total_price: int


class BookingRequest(BaseModel):
    user_id: str
    service_id: str


class Message(BaseModel):
    id: str
    sender_id: str
    receiver_id: str
    content: str
    timestamp: str
    read: bool = False


class Conversation(BaseModel):
    id: str
    participants: List[str]
    last_message: Message
    unread_count: int = 0


class ConversationStartRequest(BaseModel):
    user_id: str
    other_user_id: str


class ConversationView(BaseModel):
    conversation: Conversation
    messages: List[Message]
    typing: bool = False


class MessageSendRequest(BaseModel):
    user_id: str
    content: str


class UnreadCount(BaseModel):
    user_id: str
    unread: int


class Notification(BaseModel):
    id: str
    user_id: str
    message: str
    created_at: str
    read: bool = False
    type: NotificationType
    link_to: Optional[str] = None


class SearchAnalysis(BaseModel):
    category: Optional[str] = None
    location: Optional[str] = None
    intent: Literal["search", "recommendation", "general"] = "general"


class SearchResult(BaseModel):
    query: str
    summary: str
    services: List[Service]
    analysis: Optional[SearchAnalysis] = None
    fallback: bool = False


class ServiceRecommendation(BaseModel):
    service_id: str
    text: str


class ProviderPhone(BaseModel):
    provider_id: str
    phone_number: str


class ChatRequest(BaseModel):
    message: str


class ChatResponse(BaseModel):
    answer: str


class AdminStats(BaseModel):
    total_users: int
    total_providers: int
    total_revenue: int
    active_bookings: int
    total_requests: int
    activity_by_category: Dict[str, int] = Field(default_factory=dict)
    recent_requests: List[ServiceRequest] = Field(default_factory=list)


class AuthRegisterRequest(BaseModel):
    name: str = ""
    email: str = ""
    password: str = ""
    phone: str = ""
    role: RegistrableRole = "client"
    location: Optional[str] = None
    specialty: Optional[str] = None


class AuthLoginRequest(BaseModel):
    email: str
    password: str = ""


class AuthLoginResponse(BaseModel):
    access_token: str
    token_type: Literal["bearer"] = "bearer"
    user: User
    expires_at: str


class AuthMeResponse(BaseModel):
    user: User
