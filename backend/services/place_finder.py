"""
Place finder pipeline.

Sequences one request: resolve the requester's locality, extract a search
intent from the query, normalize the search phrase, search places, and compose
the SearchResult. No retries; any surfaced error aborts the request.
"""
from __future__ import annotations

import logging
import uuid
from typing import Optional

from domain.models import Coordinate, SearchResult
from services.errors import IntentIncompleteError, PlaceSearchError
from services.geocoding import LocationContextResolver
from services.intent_extractor import IntentExtractor
from services.places_client import PlacesClient
from settings import Settings

logger = logging.getLogger(__name__)


def normalize_search_phrase(phrase: str, location_context: str) -> str:
    """Append ``near <context>`` unless the phrase already names where to look."""
    lowered = phrase.lower()
    if "near" in lowered or "in " in lowered:
        return phrase
    if not location_context:
        return phrase
    return f"{phrase} near {location_context}"


class PlaceFinder:
    def __init__(
        self,
        resolver: LocationContextResolver,
        extractor: IntentExtractor,
        places_client: PlacesClient,
    ):
        self.resolver = resolver
        self.extractor = extractor
        self.places_client = places_client

    @classmethod
    def from_settings(cls, settings: Settings) -> "PlaceFinder":
        return cls(
            resolver=LocationContextResolver(settings),
            extractor=IntentExtractor(settings),
            places_client=PlacesClient(settings),
        )

    def find_places(
        self,
        query: str,
        user_location: Coordinate,
        request_id: Optional[str] = None,
    ) -> SearchResult:
        request_id = request_id or uuid.uuid4().hex[:8]
        logger.info("[%s] Place search query=%r location=%s", request_id, query, user_location.as_query_param())

        if not query or not query.strip():
            raise IntentIncompleteError("Query is empty", payload=query)

        context = self.resolver.resolve_context(user_location)
        logger.debug("[%s] Location context=%r", request_id, context)

        try:
            intent = self.extractor.extract_intent(query, context)
            phrase = normalize_search_phrase(intent.search_phrase, context)
            if phrase != intent.search_phrase:
                logger.debug("[%s] Modified search query %r -> %r", request_id, intent.search_phrase, phrase)
                intent = intent.with_phrase(phrase)

            places = self.places_client.search_places(intent.search_phrase, user_location)
        except PlaceSearchError as exc:
            logger.error("[%s] Place search failed at stage %s: %s", request_id, exc.stage, exc.message)
            raise

        result = SearchResult(
            search_phrase_used=intent.search_phrase,
            category=intent.category,
            description=intent.description,
            places=tuple(places),
        )
        logger.info(
            "[%s] Successfully processed request type=%s results=%d",
            request_id,
            result.category,
            len(result.places),
        )
        return result
