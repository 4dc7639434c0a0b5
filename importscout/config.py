from __future__ import annotations

import os
from dataclasses import dataclass, field
from typing import Optional

API_KEY_ENV = "BRAVE_SEARCH_API_KEY"
BRAVE_SEARCH_ENDPOINT = "https://api.search.brave.com/res/v1/web/search"
PREVIEW_USER_AGENT = "Mozilla/5.0 (compatible; ESpecBot/1.0; +https://www.especauto.com/)"

DEFAULT_ELIGIBLE_FILTER = "now"
DEFAULT_SOON_MONTHS = 12
MIN_SOON_MONTHS = 1
MAX_SOON_MONTHS = 36
DEFAULT_LIMIT = 24
MIN_LIMIT = 1
MAX_LIMIT = 30
PROVIDER_MAX_COUNT = 20

DEFAULT_SEARCH_TIMEOUT_SECONDS = 10.0
DEFAULT_PREVIEW_TIMEOUT_SECONDS = 6.0
DEFAULT_ENRICH_WORKERS = 8
DEFAULT_PREVIEW_MAX_BYTES = 2_000_000


class ConfigurationError(RuntimeError):
    pass


def _env_bool(name: str, default: bool) -> bool:
    value = os.getenv(name)
    if value is None:
        return default
    return value.strip().lower() in {"1", "true", "yes", "y", "on"}


def _env_float(name: str, default: float) -> float:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    try:
        return float(raw)
    except ValueError:
        return default


def _env_api_key() -> Optional[str]:
    value = os.getenv(API_KEY_ENV, "").strip()
    return value or None


@dataclass(slots=True)
class SearchSettings:
    api_key: Optional[str] = field(default=None, repr=False)
    search_endpoint: str = BRAVE_SEARCH_ENDPOINT
    search_timeout_seconds: float = DEFAULT_SEARCH_TIMEOUT_SECONDS
    preview_timeout_seconds: float = DEFAULT_PREVIEW_TIMEOUT_SECONDS
    enrich_workers: int = DEFAULT_ENRICH_WORKERS
    preview_max_bytes: int = DEFAULT_PREVIEW_MAX_BYTES
    fetch_images: bool = True
    user_agent: str = PREVIEW_USER_AGENT

    @classmethod
    def from_env(cls, **overrides: object) -> "SearchSettings":
        try:
            workers = int(os.getenv("ENRICH_WORKERS", str(DEFAULT_ENRICH_WORKERS)))
        except ValueError:
            workers = DEFAULT_ENRICH_WORKERS
        kwargs: dict[str, object] = {
            "api_key": _env_api_key(),
            "search_endpoint": os.getenv("BRAVE_SEARCH_ENDPOINT", "").strip() or BRAVE_SEARCH_ENDPOINT,
            "search_timeout_seconds": _env_float("SEARCH_TIMEOUT_SECONDS", DEFAULT_SEARCH_TIMEOUT_SECONDS),
            "preview_timeout_seconds": _env_float("PREVIEW_TIMEOUT_SECONDS", DEFAULT_PREVIEW_TIMEOUT_SECONDS),
            "enrich_workers": max(1, workers),
            "preview_max_bytes": max(1, int(_env_float("PREVIEW_MAX_BYTES", DEFAULT_PREVIEW_MAX_BYTES))),
            "fetch_images": _env_bool("FETCH_PREVIEW_IMAGES", True),
            "user_agent": os.getenv("PREVIEW_USER_AGENT", "").strip() or PREVIEW_USER_AGENT,
        }
        kwargs.update(overrides)
        return cls(**kwargs)

    @property
    def search_configured(self) -> bool:
        return bool(self.api_key)

    def require_api_key(self) -> str:
        if not self.api_key:
            raise ConfigurationError(f"Missing {API_KEY_ENV} in environment.")
        return self.api_key
