import logging
from typing import Optional

from fastapi import APIRouter, Header, Query

from allowork.auth import assert_actor_authorized
from allowork.http_errors import raise_http_error
from allowork.models import (
    DescriptionDraft,
    DescriptionDraftRequest,
    Notification,
    ProposalRequest,
    ServiceRequest,
    ServiceRequestCreate,
    ServiceRequestPosted,
)
from allowork.services.ai_assistant import ai_assistant
from allowork.services.marketplace_store import MarketplaceError, marketplace_store
from allowork.services.notification_store import notification_store

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/requests", tags=["requests"])


@router.get("", response_model=list[ServiceRequest])
def list_requests(
    user_id: Optional[str] = Query(default=None),
    category: Optional[str] = Query(default=None),
):
    return marketplace_store.list_requests(user_id=user_id, category=category)


@router.post("", response_model=ServiceRequestPosted)
def post_request(payload: ServiceRequestCreate, authorization: Optional[str] = Header(default=None)):
    assert_actor_authorized(actor_user_id=payload.user_id, authorization=authorization)
    try:
        request = marketplace_store.post_request(
            user_id=payload.user_id,
            title=payload.title,
            description=payload.description,
            category=payload.category,
            location=payload.location,
            budget=payload.budget,
        )
    except MarketplaceError as exc:
        raise_http_error(exc)
    providers = marketplace_store.matching_providers(request.category)
    notified = notification_store.notify_request_match(request, providers)
    return ServiceRequestPosted(request=request, notified_providers=len(notified))


@router.post("/describe", response_model=DescriptionDraft)
def describe_request(payload: DescriptionDraftRequest):
    if not payload.title.strip():
        return DescriptionDraft(description="")
    return DescriptionDraft(
        description=ai_assistant.generate_request_description(payload.title.strip(), payload.category)
    )


@router.post("/{request_id}/proposals", response_model=Notification)
def submit_proposal(
    request_id: str,
    payload: ProposalRequest,
    authorization: Optional[str] = Header(default=None),
):
    assert_actor_authorized(actor_user_id=payload.user_id, authorization=authorization)
    try:
        request, provider = marketplace_store.check_proposal(request_id=request_id, provider_id=payload.user_id)
    except MarketplaceError as exc:
        raise_http_error(exc)
    logger.info("Proposal from %s on request %s", provider.id, request.id)
    text = f'💬 {provider.name} vous a fait une proposition pour "{request.title}".'
    if payload.message.strip():
        text = f"{text} {payload.message.strip()}"
    return notification_store.create(
        user_id=request.user_id,
        message=text,
        type="proposal",
        link_to="dashboard",
    )
