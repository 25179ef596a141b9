"""Reverse geocoding of the requester's position into a locality name.

Uses the Google Geocoding API. Any trouble (network error, timeout, bad status,
empty result list, unparseable body) is a soft failure: the caller receives an
empty context and the pipeline carries on without a named locality.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Optional

import requests

from domain.models import Coordinate
from settings import Settings

GEOCODE_BASE_URL = "https://maps.googleapis.com/maps/api/geocode/json"
logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ContextLookup:
    """Outcome of a reverse geocode: either a context string or a failure reason."""
    context: str = ""
    failure: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.failure is None


def pick_locality(address_components: list[dict[str, Any]]) -> str:
    """Return the locality (city) name, falling back to the first-level admin area."""
    locality = ""
    area = ""
    for component in address_components or []:
        if not isinstance(component, dict):
            continue
        types = component.get("types") or []
        name = component.get("long_name") or ""
        if "locality" in types and not locality:
            locality = name
        elif "administrative_area_level_1" in types and not area:
            area = name
    return locality or area


class LocationContextResolver:
    def __init__(
        self,
        settings: Settings,
        session: Optional[requests.Session] = None,
        base_url: str = GEOCODE_BASE_URL,
    ):
        self.api_key = settings.GOOGLE_MAPS_API_KEY
        self.timeout = settings.HTTP_TIMEOUT_SECONDS
        self.base_url = base_url
        self.session = session or requests.Session()

    def lookup(self, coordinate: Coordinate) -> ContextLookup:
        params = {"latlng": coordinate.as_query_param(), "key": self.api_key}
        logger.debug("Reverse geocoding latlng=%s", params["latlng"])
        try:
            resp = self.session.get(self.base_url, params=params, timeout=self.timeout)
        except requests.RequestException as exc:
            return ContextLookup(failure=f"request error: {exc}")

        if not resp.ok:
            return ContextLookup(failure=f"HTTP {resp.status_code}")

        try:
            data = resp.json()
        except ValueError as exc:
            return ContextLookup(failure=f"invalid JSON: {exc}")

        if not isinstance(data, dict):
            return ContextLookup(failure="unexpected body")
        results = data.get("results")
        if not results:
            return ContextLookup(failure=f"no results (status={data.get('status')})")
        if not isinstance(results, list):
            return ContextLookup(failure="results is not a list")

        first = results[0] if isinstance(results[0], dict) else {}
        try:
            context = pick_locality(first.get("address_components") or [])
        except (AttributeError, KeyError, TypeError) as exc:
            return ContextLookup(failure=f"malformed address components: {exc}")
        return ContextLookup(context=context)

    def resolve_context(self, coordinate: Coordinate) -> str:
        """Return the locality name for ``coordinate``, or "" when it cannot be determined."""
        outcome = self.lookup(coordinate)
        if not outcome.ok:
            logger.warning(
                "Failed to get location context for %s: %s",
                coordinate.as_query_param(),
                outcome.failure,
            )
            return ""
        logger.info("Retrieved location context: %r", outcome.context)
        return outcome.context
