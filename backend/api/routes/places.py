"""
Place search API routes.
"""
import logging
import uuid
from typing import List, Optional

from fastapi import APIRouter
from fastapi.responses import JSONResponse
from pydantic import BaseModel

from domain.models import Coordinate
from services.errors import (
    IntentIncompleteError,
    IntentParseError,
    NoResultsError,
    PlaceSearchError,
    ProviderError,
)
from services.place_finder import PlaceFinder
from settings import settings

router = APIRouter()
finder = PlaceFinder.from_settings(settings)
logger = logging.getLogger(__name__)

# Checked in order; subclasses before PlaceSearchError.
ERROR_RESPONSES = [
    (IntentParseError, 500, "Failed to parse location data"),
    (IntentIncompleteError, 400, "Could not determine location from query"),
    (NoResultsError, 404, "No places found"),
    (ProviderError, 502, "Upstream service unavailable"),
]


class LatLng(BaseModel):
    lat: float
    lng: float


class PlaceSearchRequest(BaseModel):
    query: str
    userLocation: LatLng


class PlaceResponse(BaseModel):
    name: str
    address: str
    location: LatLng
    rating: Optional[float] = None
    types: List[str]
    place_id: str
    distance: float


class SearchResultResponse(BaseModel):
    searchQuery: str
    type: str
    description: str
    places: List[PlaceResponse]


def error_response(exc: PlaceSearchError) -> JSONResponse:
    """Map a pipeline failure to a generic user-facing message and status code."""
    for error_type, status_code, message in ERROR_RESPONSES:
        if isinstance(exc, error_type):
            return JSONResponse(status_code=status_code, content={"error": message})
    return JSONResponse(status_code=500, content={"error": "Internal server error"})


@router.post("/places", response_model=SearchResultResponse)
def search_places(data: PlaceSearchRequest):
    """
    Find places matching a natural-language query near the user.

    Runs in FastAPI's threadpool; the pipeline makes three blocking calls.
    """
    request_id = uuid.uuid4().hex[:8]
    location = Coordinate.from_lat_lng(data.userLocation.model_dump())
    try:
        result = finder.find_places(data.query, location, request_id=request_id)
    except PlaceSearchError as exc:
        logger.error("[%s] Request failed (%s): %s", request_id, type(exc).__name__, exc)
        return error_response(exc)
    except Exception:
        logger.exception("[%s] Request processing error", request_id)
        return JSONResponse(status_code=500, content={"error": "Internal server error"})
    return result.to_dict()
