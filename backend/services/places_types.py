from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from domain.models import Coordinate


@dataclass
class PlaceCandidate:
    name: str
    formatted_address: str
    coordinate: Coordinate
    external_id: str  # provider-assigned place id
    rating: Optional[float] = None
    categories: List[str] = field(default_factory=list)  # provider type tags, provider order

    @classmethod
    def from_api(cls, record: Dict[str, Any]) -> "PlaceCandidate":
        """Map one Text Search result. Raises ValueError when the record is unusable."""
        try:
            loc = record["geometry"]["location"]
            coordinate = Coordinate(latitude=float(loc["lat"]), longitude=float(loc["lng"]))
        except (KeyError, TypeError, ValueError) as exc:
            raise ValueError(f"place record has no usable location: {exc}") from exc
        rating = record.get("rating")
        return cls(
            name=str(record.get("name") or ""),
            formatted_address=str(record.get("formatted_address") or ""),
            coordinate=coordinate,
            external_id=str(record.get("place_id") or ""),
            rating=float(rating) if rating is not None else None,
            categories=[str(t) for t in (record.get("types") or [])],
        )
