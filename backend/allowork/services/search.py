import logging
from typing import List, Optional

from allowork.models import SearchAnalysis, SearchResult, Service
from allowork.services.ai_assistant import AIAssistant, ai_assistant
from allowork.services.marketplace_store import MarketplaceStore, marketplace_store

logger = logging.getLogger(__name__)

# Queries this short skip the AI analysis.
MIN_ANALYZED_QUERY_LENGTH = 4
NO_RESULTS_SUMMARY = "Aucun service exact trouvé. Essayez de publier une demande !"


def text_filter(services: List[Service], query: str) -> List[Service]:
    needle = query.lower()
    return [
        service
        for service in services
        if needle in service.title.lower() or needle in service.description.lower()
    ]


def facet_filter(services: List[Service], analysis: SearchAnalysis) -> List[Service]:
    category = (analysis.category or "").lower()
    location = (analysis.location or "").lower()
    result: List[Service] = []
    for service in services:
        if category and category not in service.category.lower():
            continue
        if location and location not in service.location.lower():
            continue
        result.append(service)
    return result


class SmartSearch:
    def __init__(self, store: Optional[MarketplaceStore] = None, assistant: Optional[AIAssistant] = None):
        self.store = store or marketplace_store
        self.assistant = assistant or ai_assistant

    def search(self, query: str) -> SearchResult:
        query = query.strip()
        catalog = self.store.list_services()
        filtered = text_filter(catalog, query)
        analysis: Optional[SearchAnalysis] = None
        summary = ""

        if len(query) >= MIN_ANALYZED_QUERY_LENGTH:
            analysis = self.assistant.analyze_search_query(query)
            if analysis.intent != "general":
                filtered = facet_filter(catalog, analysis)
                summary = f'Résultats pour "{analysis.category or "Services"}" à {analysis.location or "Libreville"}'
            else:
                summary = f"Résultats trouvés : {len(filtered)}"

        if not filtered:
            logger.info("No services matched %r, returning the full catalog", query)
            return SearchResult(
                query=query,
                summary=NO_RESULTS_SUMMARY,
                services=catalog,
                analysis=analysis,
                fallback=True,
            )
        return SearchResult(query=query, summary=summary, services=filtered, analysis=analysis)


smart_search = SmartSearch()
