from typing import Optional

from fastapi import APIRouter, Query

from allowork.data import CATEGORIES, KNOWN_QUARTIERS
from allowork.http_errors import raise_http_error
from allowork.models import ProviderPhone, SearchResult, Service, ServiceRecommendation
from allowork.services.ai_assistant import ai_assistant
from allowork.services.marketplace_store import MarketplaceError, marketplace_store
from allowork.services.search import smart_search

router = APIRouter(prefix="/services", tags=["services"])


@router.get("", response_model=list[Service])
def list_services(category: Optional[str] = Query(default=None)):
    return marketplace_store.list_services(category=category)


@router.get("/search", response_model=SearchResult)
def search_services(q: str = Query(default="")):
    return smart_search.search(q)


@router.get("/categories", response_model=list[str])
def list_categories():
    return CATEGORIES


@router.get("/quartiers", response_model=list[str])
def list_quartiers():
    return KNOWN_QUARTIERS


@router.get("/providers/{provider_id}/phone", response_model=ProviderPhone)
def provider_phone(provider_id: str):
    return ProviderPhone(provider_id=provider_id, phone_number=marketplace_store.provider_phone(provider_id))


@router.get("/{service_id}", response_model=Service)
def get_service(service_id: str):
    try:
        return marketplace_store.get_service(service_id)
    except MarketplaceError as exc:
        raise_http_error(exc)


@router.get("/{service_id}/recommendation", response_model=ServiceRecommendation)
def service_recommendation(service_id: str):
    try:
        service = marketplace_store.get_service(service_id)
    except MarketplaceError as exc:
        raise_http_error(exc)
    return ServiceRecommendation(service_id=service.id, text=ai_assistant.generate_service_recommendation(service))
