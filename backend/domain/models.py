"""
Core domain models for the place finder.
These are framework-agnostic and can be used across all services.
"""
from dataclasses import dataclass, field, replace
from enum import Enum
from typing import Any, Dict, List, Mapping, Optional, Tuple


class PlaceCategory(str, Enum):
    """Closed set of categories the language model may assign to a query."""
    RESTAURANT_CAFE = "Restaurant/Cafe"
    SHOPPING = "Shopping"
    ENTERTAINMENT = "Entertainment"
    OUTDOOR_PARK = "Outdoor/Park"
    CULTURAL = "Cultural"
    NIGHTLIFE = "Nightlife"
    HEALTH_FITNESS = "Health/Fitness"
    EDUCATION = "Education"
    SERVICES = "Services"
    OTHER = "Other"

    @classmethod
    def values(cls) -> List[str]:
        return [c.value for c in cls]


@dataclass(frozen=True)
class Coordinate:
    """A latitude/longitude pair in decimal degrees. Ranges are not validated."""
    latitude: float
    longitude: float

    def as_query_param(self) -> str:
        return f"{self.latitude},{self.longitude}"

    def to_dict(self) -> Dict[str, float]:
        return {"lat": self.latitude, "lng": self.longitude}

    @classmethod
    def from_lat_lng(cls, data: Mapping[str, Any]) -> "Coordinate":
        """Build from a ``{"lat": .., "lng": ..}`` mapping (``lon`` also accepted)."""
        lat = data["lat"]
        lng = data["lng"] if "lng" in data else data["lon"]
        return cls(latitude=float(lat), longitude=float(lng))


@dataclass(frozen=True)
class SearchIntent:
    """Structured reading of a free-text query, as produced by the language model."""
    search_phrase: str
    category: str = PlaceCategory.OTHER.value
    description: str = ""

    def with_phrase(self, phrase: str) -> "SearchIntent":
        return replace(self, search_phrase=phrase)


@dataclass(frozen=True)
class Place:
    """A place returned to the caller, annotated with its distance from the requester."""
    name: str
    address: str
    coordinate: Coordinate
    distance_km: float
    external_id: str
    rating: Optional[float] = None
    categories: Tuple[str, ...] = field(default_factory=tuple)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "name": self.name,
            "address": self.address,
            "location": self.coordinate.to_dict(),
            "rating": self.rating,
            "types": list(self.categories),
            "place_id": self.external_id,
            "distance": self.distance_km,
        }


@dataclass(frozen=True)
class SearchResult:
    """
    Final artifact of a search.

    ``places`` is ordered by ``distance_km`` ascending; ``search_phrase_used``
    is the phrase that was actually sent to the place search.
    """
    search_phrase_used: str
    category: str
    description: str
    places: Tuple[Place, ...]

    def to_dict(self) -> Dict[str, Any]:
        return {
            "searchQuery": self.search_phrase_used,
            "type": self.category,
            "description": self.description,
            "places": [p.to_dict() for p in self.places],
        }
