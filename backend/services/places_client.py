"""
Text place search against the Google Places API, ranked by distance from the requester.
"""
from __future__ import annotations

import logging
from typing import List, Optional

import requests

from domain.models import Coordinate, Place
from services.distance import distance_km
from services.errors import STAGE_PLACES, NoResultsError, ProviderError
from services.places_types import PlaceCandidate
from settings import Settings

PLACES_TEXTSEARCH_URL = "https://maps.googleapis.com/maps/api/place/textsearch/json"
# Provider statuses that mean the request itself was accepted.
_OK_STATUSES = {"OK", "ZERO_RESULTS"}


def build_place(candidate: PlaceCandidate, origin: Coordinate) -> Place:
    return Place(
        name=candidate.name,
        address=candidate.formatted_address,
        coordinate=candidate.coordinate,
        distance_km=distance_km(origin, candidate.coordinate),
        external_id=candidate.external_id,
        rating=candidate.rating,
        categories=tuple(candidate.categories),
    )


def rank_by_distance(places: List[Place]) -> List[Place]:
    """Sort ascending by distance; sorted() is stable so provider order breaks ties."""
    return sorted(places, key=lambda p: p.distance_km)


class PlacesClient:
    def __init__(
        self,
        settings: Settings,
        session: Optional[requests.Session] = None,
        base_url: str = PLACES_TEXTSEARCH_URL,
    ):
        self.api_key = settings.GOOGLE_MAPS_API_KEY
        self.timeout = settings.HTTP_TIMEOUT_SECONDS
        self.radius_m = settings.PLACES_SEARCH_RADIUS_M
        self.base_url = base_url
        self.session = session or requests.Session()
        self.logger = logging.getLogger(__name__)

    def _fetch_results(self, phrase: str, origin: Coordinate) -> list:
        params = {
            "query": phrase,
            "location": origin.as_query_param(),
            "radius": str(self.radius_m),
            "key": self.api_key,
        }
        self.logger.debug(
            "Searching places query=%r location=%s radius_m=%s",
            phrase,
            params["location"],
            params["radius"],
        )
        try:
            resp = self.session.get(self.base_url, params=params, timeout=self.timeout)
        except requests.RequestException as exc:
            raise ProviderError(f"Places request failed: {exc}", stage=STAGE_PLACES) from exc

        if not resp.ok:
            raise ProviderError(
                f"Places API returned HTTP {resp.status_code}",
                stage=STAGE_PLACES,
                status_code=resp.status_code,
            )

        try:
            data = resp.json()
        except ValueError as exc:
            raise ProviderError(
                "Places API returned a non-JSON body", stage=STAGE_PLACES, status_code=resp.status_code
            ) from exc

        if not isinstance(data, dict):
            raise ProviderError("Places API returned an unexpected body", stage=STAGE_PLACES)
        status = data.get("status", "OK")
        if status not in _OK_STATUSES:
            message = f"Places API status {status}"
            if data.get("error_message"):
                message += f": {data['error_message']}"
            raise ProviderError(
                message,
                stage=STAGE_PLACES,
                status_code=resp.status_code,
            )
        results = data.get("results") or []
        if not isinstance(results, list):
            raise ProviderError("Places API results is not a list", stage=STAGE_PLACES)
        return results

    def search_places(self, phrase: str, origin: Coordinate) -> List[Place]:
        """
        Search places matching ``phrase`` within the configured radius of ``origin``.

        Returns places sorted nearest first. Raises NoResultsError when nothing
        usable comes back and ProviderError when the call itself fails.
        """
        records = self._fetch_results(phrase, origin)

        places: List[Place] = []
        for record in records:
            try:
                candidate = PlaceCandidate.from_api(record)
            except (ValueError, TypeError, AttributeError) as exc:
                self.logger.warning("Skipping malformed place record: %s", exc)
                continue
            places.append(build_place(candidate, origin))

        if not places:
            self.logger.warning("No places found for query=%r", phrase)
            raise NoResultsError(phrase)

        ranked = rank_by_distance(places)
        self.logger.info(
            "Places search query=%r got %d results, nearest=%r (%.2f km)",
            phrase,
            len(ranked),
            ranked[0].name,
            ranked[0].distance_km,
        )
        return ranked
