"""
Failure kinds surfaced by the place search pipeline.

Every error carries the ``stage`` that raised it so the transport layer can
report a specific cause. Reverse-geocoding trouble is not represented here:
the resolver folds it into an empty context.
"""
from __future__ import annotations

from typing import Any, Optional

STAGE_INTENT = "intent"
STAGE_PLACES = "places"


class PlaceSearchError(Exception):
    stage: str = "pipeline"

    def __init__(self, message: str, *, stage: Optional[str] = None) -> None:
        super().__init__(message)
        self.message = message
        if stage is not None:
            self.stage = stage

    def __str__(self) -> str:
        return f"[{self.stage}] {self.message}"


class IntentParseError(PlaceSearchError):
    """The model reply could not be parsed into a JSON object."""

    stage = STAGE_INTENT

    def __init__(self, message: str, raw_reply: str = "") -> None:
        super().__init__(message)
        self.raw_reply = raw_reply


class IntentIncompleteError(PlaceSearchError):
    """The model reply parsed, but has no usable ``searchQuery``."""

    stage = STAGE_INTENT

    def __init__(self, message: str, payload: Any = None) -> None:
        super().__init__(message)
        self.payload = payload


class ProviderError(PlaceSearchError):
    """An outbound call failed: network error, timeout, bad status or malformed body."""

    def __init__(self, message: str, *, stage: str, status_code: Optional[int] = None) -> None:
        super().__init__(message, stage=stage)
        self.status_code = status_code


class NoResultsError(PlaceSearchError):
    stage = STAGE_PLACES

    def __init__(self, phrase: str) -> None:
        super().__init__(f"No places found for {phrase!r}")
        self.phrase = phrase
