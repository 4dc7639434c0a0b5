from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Optional

import requests

from importscout import get_logger
from importscout.config import PROVIDER_MAX_COUNT, SearchSettings
from importscout.models import RawCandidate

LOGGER = get_logger()

ERROR_BODY_LIMIT = 500
SAMPLE_SIZE = 3


class UpstreamError(RuntimeError):
    def __init__(self, status: int, details: str) -> None:
        super().__init__(f"Search provider returned HTTP {status}")
        self.status = status
        self.details = details


@dataclass(slots=True)
class ProviderPage:
    raw_results: list[Any]
    candidates: list[RawCandidate] = field(default_factory=list)
    request_url: Optional[str] = None

    @property
    def raw_count(self) -> int:
        return len(self.raw_results)

    def sample(self, size: int = SAMPLE_SIZE) -> list[dict[str, Any]]:
        rows: list[dict[str, Any]] = []
        for item in self.raw_results[:size]:
            if isinstance(item, dict):
                rows.append({"title": item.get("title"), "url": item.get("url")})
            else:
                rows.append({"title": None, "url": None})
        return rows


class BraveSearchClient:
    def __init__(self, settings: SearchSettings, session: Optional[requests.Session] = None) -> None:
        self.api_key = settings.require_api_key()
        self.settings = settings
        self.session = session or requests.Session()

    def search(self, query: str, limit: int) -> ProviderPage:
        params = {"q": query, "count": str(min(limit, PROVIDER_MAX_COUNT))}
        headers = {
            "Accept": "application/json",
            "X-Subscription-Token": self.api_key,
        }
        response = self.session.get(
            self.settings.search_endpoint,
            params=params,
            headers=headers,
            timeout=self.settings.search_timeout_seconds,
        )
        if not 200 <= response.status_code < 300:
            body = _safe_text(response)
            LOGGER.warning("Search provider error status=%s", response.status_code)
            raise UpstreamError(response.status_code, body[:ERROR_BODY_LIMIT])

        raw_results = _extract_web_results(response.json())
        candidates = [RawCandidate.from_result(item) for item in raw_results if isinstance(item, dict)]
        LOGGER.info(
            "Search provider status=%s results=%s candidates=%s",
            response.status_code,
            len(raw_results),
            len(candidates),
        )
        return ProviderPage(raw_results=raw_results, candidates=candidates, request_url=response.url)


def _extract_web_results(payload: Any) -> list[Any]:
    if not isinstance(payload, dict):
        return []
    web = payload.get("web")
    if not isinstance(web, dict):
        return []
    results = web.get("results")
    if not isinstance(results, list):
        return []
    return results


def _safe_text(response: requests.Response) -> str:
    try:
        return response.text or ""
    except (UnicodeDecodeError, requests.RequestException):
        return ""
