"""
Turns a free-text query into a SearchIntent using a language model.

The model is asked (through Ollama's chat endpoint) for a single JSON object:

    {"searchQuery": "...", "type": "<category>", "description": "..."}

When structured output is enabled the request carries a JSON schema as the
``format`` field, so well-behaved models return exactly that object. Replies
are still parsed defensively: the first ``{...}`` block is extracted from any
surrounding prose.

Parsing lives in ``parse_intent_reply`` which returns a tagged outcome and
never raises; ``IntentExtractor.extract_intent`` turns a failed outcome into
IntentParseError / IntentIncompleteError.
"""
from __future__ import annotations

import json
import logging
import re
from dataclasses import dataclass
from typing import Any, Dict, Optional

import requests

from domain.models import PlaceCategory, SearchIntent
from services.errors import (
    STAGE_INTENT,
    IntentIncompleteError,
    IntentParseError,
    PlaceSearchError,
    ProviderError,
)
from settings import Settings

logger = logging.getLogger(__name__)

_CATEGORY_LINES = "\n".join(f"- {value}" for value in PlaceCategory.values())

SYSTEM_PROMPT = f"""You are a helpful assistant that provides information about places.
When asked about places, extract the location and type of place from the query.
The user's current location will be provided - use this to make the search more relevant.

For the type field, use one of these categories:
{_CATEGORY_LINES}

Respond in JSON format with the following structure:
{{
  "searchQuery": "the search term for Google Places API - include 'near {{location}}' if no specific location is mentioned",
  "type": "one of the categories listed above that best matches the query",
  "description": "a brief description of what the user is looking for"
}}"""

# Constrains the model to return ONLY the expected JSON shape.
INTENT_RESPONSE_SCHEMA: Dict[str, Any] = {
    "type": "object",
    "properties": {
        "searchQuery": {"type": "string"},
        "type": {"type": "string", "enum": PlaceCategory.values()},
        "description": {"type": "string"},
    },
    "required": ["searchQuery", "type", "description"],
}

_JSON_BLOCK_RE = re.compile(r"\{[\s\S]*\}")


def build_user_prompt(query: str, location_context: str) -> str:
    return f"User is currently in {location_context}. Query: {query}"


@dataclass(frozen=True)
class IntentParseOutcome:
    """Either ``intent`` is set, or ``error`` holds the failure to raise."""
    intent: Optional[SearchIntent] = None
    error: Optional[PlaceSearchError] = None

    @property
    def ok(self) -> bool:
        return self.intent is not None


def _load_json_object(text: str) -> Optional[Any]:
    """Parse the whole reply as a JSON object, else the first {...} block. None if neither parses."""
    stripped = (text or "").strip()
    try:
        payload = json.loads(stripped)
    except ValueError:
        payload = None
    if isinstance(payload, dict):
        return payload
    match = _JSON_BLOCK_RE.search(stripped)
    if not match:
        return None
    try:
        return json.loads(match.group(0))
    except ValueError:
        return None


def parse_intent_reply(text: str) -> IntentParseOutcome:
    payload = _load_json_object(text)
    if not isinstance(payload, dict):
        return IntentParseOutcome(
            error=IntentParseError("Model reply does not contain a JSON object", raw_reply=text)
        )

    phrase = payload.get("searchQuery")
    if not isinstance(phrase, str) or not phrase.strip():
        return IntentParseOutcome(
            error=IntentIncompleteError("Model reply has no searchQuery", payload=payload)
        )

    category = payload.get("type")
    description = payload.get("description")
    return IntentParseOutcome(
        intent=SearchIntent(
            search_phrase=phrase,
            category=category if isinstance(category, str) and category else PlaceCategory.OTHER.value,
            description=description if isinstance(description, str) else "",
        )
    )


class OllamaChatClient:
    """Minimal client for Ollama's non-streaming ``/api/chat`` endpoint."""

    def __init__(self, settings: Settings, session: Optional[requests.Session] = None):
        self.host = settings.OLLAMA_HOST
        self.model = settings.OLLAMA_MODEL
        self.timeout = settings.OLLAMA_TIMEOUT_SECONDS
        self.response_format: Optional[Dict[str, Any]] = (
            INTENT_RESPONSE_SCHEMA if settings.OLLAMA_STRUCTURED_OUTPUT else None
        )
        self.session = session or requests.Session()

    def chat(self, system: str, user: str) -> str:
        body: Dict[str, Any] = {
            "model": self.model,
            "messages": [
                {"role": "system", "content": system},
                {"role": "user", "content": user},
            ],
            "stream": False,
        }
        if self.response_format is not None:
            body["format"] = self.response_format

        try:
            resp = self.session.post(f"{self.host}/api/chat", json=body, timeout=self.timeout)
        except requests.RequestException as exc:
            raise ProviderError(f"Chat request failed: {exc}", stage=STAGE_INTENT) from exc

        if not resp.ok:
            raise ProviderError(
                f"Chat endpoint returned HTTP {resp.status_code}",
                stage=STAGE_INTENT,
                status_code=resp.status_code,
            )
        try:
            data = resp.json()
            content = data["message"]["content"]
        except (ValueError, KeyError, TypeError) as exc:
            raise ProviderError("Chat endpoint returned a malformed body", stage=STAGE_INTENT) from exc
        if not isinstance(content, str):
            raise ProviderError("Chat reply content is not text", stage=STAGE_INTENT)
        return content


class IntentExtractor:
    def __init__(self, settings: Settings, chat_client: Optional[OllamaChatClient] = None):
        self.chat_client = chat_client or OllamaChatClient(settings)

    def extract_intent(self, query: str, location_context: str) -> SearchIntent:
        """
        Ask the model for a structured intent.

        The model's phrase and category are returned verbatim; normalization
        is left to the caller.
        """
        user_prompt = build_user_prompt(query, location_context)
        logger.debug("Preparing AI request: user=%r", user_prompt)

        reply = self.chat_client.chat(SYSTEM_PROMPT, user_prompt)
        logger.debug("Received AI response: %r", reply)

        outcome = parse_intent_reply(reply)
        if not outcome.ok:
            logger.error("Invalid AI response (%s): %r", type(outcome.error).__name__, reply)
            raise outcome.error
        logger.debug("Parsed AI response: %s", outcome.intent)
        return outcome.intent
