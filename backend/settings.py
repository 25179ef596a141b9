import os
from typing import Optional

# Basic settings helper to read environment configuration.


def _as_bool(val: str | None, default: bool = False) -> bool:
    if val is None:
        return default
    return val.lower() in ("1", "true", "yes", "on")


def _as_float(val: str | None, default: float) -> float:
    if val is None or not val.strip():
        return default
    return float(val)


class Settings:
    def __init__(
        self,
        google_maps_api_key: Optional[str] = None,
        ollama_host: Optional[str] = None,
        ollama_model: Optional[str] = None,
        ollama_structured_output: Optional[bool] = None,
        http_timeout_seconds: Optional[float] = None,
        ollama_timeout_seconds: Optional[float] = None,
        places_search_radius_m: Optional[int] = None,
        log_level: Optional[str] = None,
    ) -> None:
        if google_maps_api_key is None:
            google_maps_api_key = os.getenv("GOOGLE_MAPS_API_KEY") or os.getenv(
                "NEXT_PUBLIC_GOOGLE_MAPS_API_KEY", ""
            )
        self.GOOGLE_MAPS_API_KEY: str = google_maps_api_key
        self.OLLAMA_HOST: str = (ollama_host or os.getenv("OLLAMA_HOST") or "http://localhost:11434").rstrip("/")
        self.OLLAMA_MODEL: str = ollama_model or os.getenv("OLLAMA_MODEL") or "mistral"
        if ollama_structured_output is None:
            ollama_structured_output = _as_bool(os.getenv("OLLAMA_STRUCTURED_OUTPUT"), True)
        self.OLLAMA_STRUCTURED_OUTPUT: bool = ollama_structured_output
        if http_timeout_seconds is None:
            http_timeout_seconds = _as_float(os.getenv("HTTP_TIMEOUT_SECONDS"), 5.0)
        self.HTTP_TIMEOUT_SECONDS: float = http_timeout_seconds
        if ollama_timeout_seconds is None:
            ollama_timeout_seconds = _as_float(os.getenv("OLLAMA_TIMEOUT_SECONDS"), 60.0)
        self.OLLAMA_TIMEOUT_SECONDS: float = ollama_timeout_seconds
        if places_search_radius_m is None:
            places_search_radius_m = int(os.getenv("PLACES_SEARCH_RADIUS_M") or 5000)
        self.PLACES_SEARCH_RADIUS_M: int = places_search_radius_m
        self.LOG_LEVEL: str = (log_level or os.getenv("LOG_LEVEL") or "INFO").upper()


settings = Settings()
