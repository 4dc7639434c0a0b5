from __future__ import annotations

import base64
import re
from dataclasses import dataclass, field
from datetime import date, datetime, timezone
from typing import Any, Mapping, Optional

from bs4 import BeautifulSoup

from importscout.config import (
    DEFAULT_ELIGIBLE_FILTER,
    DEFAULT_LIMIT,
    DEFAULT_SOON_MONTHS,
    MAX_LIMIT,
    MAX_SOON_MONTHS,
    MIN_LIMIT,
    MIN_SOON_MONTHS,
)
from importscout.pricing import PRICE_CURRENCY

LISTING_ID_LENGTH = 22
_WHITESPACE_RE = re.compile(r"\s+")


class RequestValidationError(ValueError):
    pass


def _iso_now() -> str:
    return datetime.now(timezone.utc).isoformat()


def clamp(value: int, minimum: int, maximum: int) -> int:
    return max(minimum, min(maximum, value))


def _int_param(raw: Any, default: int) -> int:
    if raw is None:
        return default
    text = str(raw).strip()
    if not text:
        return default
    try:
        return int(float(text))
    except (TypeError, ValueError, OverflowError):
        return default


def listing_id_for(url: str) -> str:
    encoded = base64.urlsafe_b64encode(url.encode("utf-8")).decode("ascii").rstrip("=")
    return encoded[:LISTING_ID_LENGTH]


def normalize_title(title: str) -> str:
    title = BeautifulSoup(title, "lxml").get_text(" ") if title else ""
    return _WHITESPACE_RE.sub(" ", title).strip()


@dataclass(frozen=True, slots=True)
class SearchRequest:
    query: str
    eligible: str = DEFAULT_ELIGIBLE_FILTER
    soon_months: int = DEFAULT_SOON_MONTHS
    limit: int = DEFAULT_LIMIT

    def __post_init__(self) -> None:
        if not self.query or not self.query.strip():
            raise RequestValidationError("Missing q")
        object.__setattr__(self, "query", self.query.strip())
        object.__setattr__(self, "soon_months", clamp(self.soon_months, MIN_SOON_MONTHS, MAX_SOON_MONTHS))
        object.__setattr__(self, "limit", clamp(self.limit, MIN_LIMIT, MAX_LIMIT))

    @classmethod
    def from_params(cls, params: Mapping[str, Any]) -> "SearchRequest":
        return cls(
            query=str(params.get("q") or "").strip(),
            eligible=str(params.get("eligible") or DEFAULT_ELIGIBLE_FILTER),
            soon_months=_int_param(params.get("soonMonths"), DEFAULT_SOON_MONTHS),
            limit=_int_param(params.get("limit"), DEFAULT_LIMIT),
        )

    def filters(self) -> dict[str, Any]:
        return {"eligible": self.eligible, "soonMonths": self.soon_months, "limit": self.limit}


@dataclass(slots=True)
class RawCandidate:
    title: str
    url: str
    description: str = ""

    @classmethod
    def from_result(cls, result: Mapping[str, Any]) -> "RawCandidate":
        def text(key: str) -> str:
            value = result.get(key)
            return value if isinstance(value, str) else ""

        return cls(title=text("title"), url=text("url").strip(), description=text("description"))

    @property
    def text(self) -> str:
        return f"{self.title} {self.description}"


@dataclass(frozen=True, slots=True)
class Eligibility:
    status: str
    confidence: str
    reason: str
    eligible_on: Optional[date] = None


@dataclass(slots=True)
class Listing:
    id: str
    title_raw: str
    title_normalized: str
    source_url: str
    source_domain: str
    snippet: str
    inferred_year: Optional[int]
    eligibility: Eligibility
    image_url: Optional[str] = None
    price_value: Optional[int] = None
    price_currency: str = PRICE_CURRENCY
    location_raw: Optional[str] = None

    def to_dict(self) -> dict[str, Any]:
        eligible_on = self.eligibility.eligible_on
        return {
            "id": self.id,
            "title_raw": self.title_raw,
            "title_normalized": self.title_normalized,
            "source_url": self.source_url,
            "source_domain": self.source_domain,
            "snippet": self.snippet,
            "image_url": self.image_url,
            "inferred_year": self.inferred_year,
            "price_value": self.price_value,
            "price_currency": self.price_currency,
            "location_raw": self.location_raw,
            "eligibility_status": self.eligibility.status,
            "eligible_on": eligible_on.isoformat() if eligible_on else None,
            "confidence": self.eligibility.confidence,
            "eligibility_reason": self.eligibility.reason,
        }


@dataclass(slots=True)
class SearchResponse:
    request: SearchRequest
    results: list[Listing]
    raw_count: int
    sample: list[dict[str, Any]]
    rejection_counts: dict[str, int] = field(default_factory=dict)
    fetched_at: str = field(default_factory=_iso_now)

    def to_dict(self) -> dict[str, Any]:
        return {
            "query": self.request.query,
            "filters": self.request.filters(),
            "results": [listing.to_dict() for listing in self.results],
            "debug": {
                "braveCount": self.raw_count,
                "braveSample": self.sample,
                "rejections": dict(self.rejection_counts),
            },
            "fetched_at": self.fetched_at,
        }
