import os
import sys

sys.path.insert(0, os.path.dirname(os.path.dirname(__file__)))

from allowork.models import SearchAnalysis
from allowork.services.marketplace_store import MarketplaceStore
from allowork.services.search import NO_RESULTS_SUMMARY, SmartSearch, facet_filter, text_filter


class FakeAssistant:
    def __init__(self, analysis=None):
        self.analysis = analysis or SearchAnalysis(intent="general")
        self.queries = []

    def analyze_search_query(self, query):
        self.queries.append(query)
        return self.analysis


def _search(analysis=None):
    assistant = FakeAssistant(analysis)
    return SmartSearch(store=MarketplaceStore(), assistant=assistant), assistant


def test_text_filter_matches_title_or_description_case_insensitively():
    services = MarketplaceStore().list_services()
    assert [s.id for s in text_filter(services, "MÉNAGE")] == ["s2"]
    assert [s.id for s in text_filter(services, "fuites")] == ["s1"]
    assert len(text_filter(services, "")) == len(services)


def test_facet_filter_uses_substring_on_category_and_location():
    services = MarketplaceStore().list_services()
    analysis = SearchAnalysis(category="plomb", location="LOUIS", intent="search")
    assert [s.id for s in facet_filter(services, analysis)] == ["s1"]
    assert len(facet_filter(services, SearchAnalysis(intent="search"))) == len(services)


def test_short_query_skips_ai_analysis():
    search, assistant = _search(SearchAnalysis(category="Ménage", intent="search"))
    result = search.search("gaz")
    assert assistant.queries == []
    assert [s.id for s in result.services] == ["s5"]
    assert result.summary == ""
    assert result.fallback is False


def test_general_intent_keeps_text_results():
    search, assistant = _search(SearchAnalysis(intent="general"))
    result = search.search("Nettoyage")
    assert assistant.queries == ["Nettoyage"]
    assert {s.id for s in result.services} == {"s2", "s5"}
    assert result.summary == "Résultats trouvés : 2"


def test_ai_refinement_replaces_text_results():
    search, _ = _search(SearchAnalysis(category="Électricité", location="Nzeng-Ayong", intent="search"))
    result = search.search("quelqu'un pour mon compteur à Nzeng Ayong")
    assert [s.id for s in result.services] == ["s3"]
    assert result.summary == 'Résultats pour "Électricité" à Nzeng-Ayong'
    assert result.analysis.intent == "search"


def test_ai_refinement_defaults_in_summary():
    search, _ = _search(SearchAnalysis(category="Ménage", intent="recommendation"))
    result = search.search("qui fait le ménage ?")
    assert [s.id for s in result.services] == ["s2"]
    assert result.summary == 'Résultats pour "Ménage" à Libreville'


def test_empty_ai_refinement_falls_back_to_full_catalog():
    search, _ = _search(SearchAnalysis(category="Plomberie", location="Owendo", intent="search"))
    result = search.search("plombier à Owendo")
    assert result.fallback is True
    assert result.summary == NO_RESULTS_SUMMARY
    assert [s.id for s in result.services] == ["s1", "s2", "s3", "s4", "s5"]


def test_empty_text_match_falls_back_to_full_catalog():
    search, _ = _search()
    result = search.search("piscine")
    assert result.fallback is True
    assert len(result.services) == 5
