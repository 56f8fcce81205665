import json
import logging
import os
from pathlib import Path
from typing import Any, Dict, List

from allowork.data import CATEGORIES, KNOWN_QUARTIERS
from allowork.models import SearchAnalysis, Service

try:
    from openai import OpenAI
except Exception:  # pragma: no cover
    OpenAI = None

logger = logging.getLogger(__name__)

ALLOWED_INTENTS = {"search", "recommendation", "general"}

RECOMMENDATION_EMPTY = "Découvrez ce service exceptionnel !"
RECOMMENDATION_ERROR = "Service recommandé pour vous."
ASSISTANT_EMPTY = "Je ne suis pas sûr de comprendre, pouvez-vous reformuler ?"
ASSISTANT_ERROR = "Désolé, je rencontre des problèmes techniques pour le moment."
ASSISTANT_GREETING = (
    "Bonjour ! Je suis l'assistant Allowork. Comment puis-je vous aider à trouver un service à Libreville ?"
)


class AIAssistant:
    """Text-generation collaborator for the Allowork marketplace.

    Every public call degrades to a fixed default when the LLM is not
    configured or the call fails, so callers never see an error.
    """

    def __init__(self) -> None:
        self.model = os.getenv("OPENAI_MODEL", "gpt-4.1-mini")
        api_key = self._load_openai_api_key()
        self.client = OpenAI(api_key=api_key) if api_key and OpenAI else None
        self.llm_available = self.client is not None
        if not self.llm_available:
            logger.warning(
                "LLM disabled: set OPENAI_API_KEY (or OPENAI_API_KEY_FILE) and ensure openai package is installed."
            )

    @staticmethod
    def _normalize_env_value(value: str) -> str:
        normalized = value.strip()
        if len(normalized) >= 2 and normalized[0] == normalized[-1] and normalized[0] in {"'", '"'}:
            normalized = normalized[1:-1].strip()
        return normalized

    def _load_openai_api_key(self) -> str:
        api_key = self._normalize_env_value(os.getenv("OPENAI_API_KEY", ""))

        if not api_key:
            key_file = self._normalize_env_value(os.getenv("OPENAI_API_KEY_FILE", ""))
            if key_file:
                try:
                    api_key = self._normalize_env_value(Path(key_file).read_text(encoding="utf-8"))
                except OSError:
                    logger.warning("OPENAI_API_KEY_FILE is set but unreadable.")

        if api_key.lower() in {"replace-with-openai-key", "your-openai-api-key"}:
            return ""
        return api_key

    def _complete(self, input: List[Dict[str, str]], temperature: float = 0.3) -> str:
        response = self.client.responses.create(
            model=self.model,
            input=input,
            temperature=temperature,
        )
        return (getattr(response, "output_text", "") or "").strip()

    def analyze_search_query(self, query: str) -> SearchAnalysis:
        """Extract a category/location/intent triple from a free-text search."""
        if not self.client:
            return SearchAnalysis(intent="general")
        system_prompt = (
            'You analyze searches for "Allowork", a local service marketplace in Libreville, Gabon. '
            "Extract the service category (if any) and the location/neighborhood (if any). "
            "Return strict JSON only with fields: category, location, intent. "
            "intent must be one of: search, recommendation, general. "
            "Omit category or location when the query does not mention one."
        )
        payload = {
            "query": query,
            "known_categories": CATEGORIES,
            "known_neighborhoods": KNOWN_QUARTIERS,
        }
        try:
            content = self._complete(
                [
                    {"role": "system", "content": system_prompt},
                    {"role": "user", "content": json.dumps(payload, ensure_ascii=False)},
                ],
                temperature=0.1,
            )
            if not content:
                return SearchAnalysis(intent="general")
            return self._parse_analysis(content)
        except Exception:
            logger.exception("Search analysis failed")
            return SearchAnalysis(intent="general")

    def _parse_analysis(self, content: str) -> SearchAnalysis:
        text = content.strip()
        if text.startswith("```"):
            text = text.strip("`")
            if text.lower().startswith("json"):
                text = text[4:]
        data = json.loads(text)
        if not isinstance(data, dict):
            return SearchAnalysis(intent="general")
        intent = data.get("intent", "general")
        if intent not in ALLOWED_INTENTS:
            return SearchAnalysis(intent="general")
        return SearchAnalysis(
            category=self._safe_text(data.get("category")) or None,
            location=self._safe_text(data.get("location")) or None,
            intent=intent,
        )

    def generate_request_description(self, title: str, category: str) -> str:
        prompt = (
            f'The user wants to post a service request on Allowork (Libreville) with title "{title}" '
            f'in category "{category}". Write a clear, polite, and detailed description (in French) '
            "that they can use. Keep it under 50 words."
        )
        if not self.client:
            return ""
        try:
            return self._complete([{"role": "user", "content": prompt}])
        except Exception:
            logger.exception("Request description generation failed")
            return ""

    def generate_service_recommendation(self, service: Service) -> str:
        prompt = (
            "Write a very short, catchy 1-sentence promotion in French for this service in Libreville: "
            f"Service: {service.title} by {service.provider_name} located in {service.location}."
        )
        if not self.client:
            return RECOMMENDATION_ERROR
        try:
            return self._complete([{"role": "user", "content": prompt}], temperature=0.7) or RECOMMENDATION_EMPTY
        except Exception:
            logger.exception("Service recommendation failed for %s", service.id)
            return RECOMMENDATION_ERROR

    def chat_assistant_response(self, user_message: str) -> str:
        system_prompt = (
            "You are the AI assistant for Allowork, a service marketplace in Libreville (Gabon). "
            "Answer the user's question helpfully in French. Keep it brief."
        )
        if not self.client:
            return ASSISTANT_ERROR
        try:
            answer = self._complete(
                [
                    {"role": "system", "content": system_prompt},
                    {"role": "user", "content": user_message},
                ]
            )
            return answer or ASSISTANT_EMPTY
        except Exception:
            logger.exception("Chat assistant call failed")
            return ASSISTANT_ERROR

    def _safe_text(self, value: Any, default: str = "", max_len: int = 128) -> str:
        if value is None:
            return default
        text = str(value).strip()
        if not text:
            return default
        return text[:max_len]


ai_assistant = AIAssistant()
