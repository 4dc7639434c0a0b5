from __future__ import annotations

from collections import Counter
from dataclasses import dataclass
from datetime import date
from typing import Iterable, Optional

from importscout.domain_rules import REASON_CATEGORY_PAGE, REASON_NOT_LISTING, domain_rejection
from importscout.eligibility import classify, infer_year, should_include
from importscout.models import Eligibility, RawCandidate
from importscout.safety import source_domain

REASON_MISSING_URL = "missing url"
REASON_INVALID_URL = "invalid url"
REASON_ELIGIBILITY = "filtered by eligibility"

REJECTION_REASONS = (
    REASON_MISSING_URL,
    REASON_INVALID_URL,
    REASON_NOT_LISTING,
    REASON_CATEGORY_PAGE,
    REASON_ELIGIBILITY,
)


@dataclass(slots=True)
class ClassifiedCandidate:
    candidate: RawCandidate
    domain: str
    year: Optional[int]
    eligibility: Eligibility


@dataclass(slots=True)
class FilterOutcome:
    kept: list[ClassifiedCandidate]
    rejection_counts: dict[str, int]


def filter_candidates(
    candidates: Iterable[RawCandidate],
    *,
    eligible: str,
    soon_months: int,
    today: Optional[date] = None,
) -> FilterOutcome:
    if today is None:
        today = date.today()
    kept: list[ClassifiedCandidate] = []
    counts: Counter[str] = Counter()

    for candidate in candidates:
        if not candidate.url:
            counts[REASON_MISSING_URL] += 1
            continue
        domain = source_domain(candidate.url)
        if domain is None:
            counts[REASON_INVALID_URL] += 1
            continue
        reason = domain_rejection(domain, candidate.url)
        if reason:
            counts[reason] += 1
            continue

        year = infer_year(candidate.text, current_year=today.year)
        eligibility = classify(year, soon_months, today=today)
        if not should_include(eligibility.status, eligible):
            counts[REASON_ELIGIBILITY] += 1
            continue
        kept.append(ClassifiedCandidate(candidate=candidate, domain=domain, year=year, eligibility=eligibility))

    rejection_counts = {reason: counts.get(reason, 0) for reason in REJECTION_REASONS}
    return FilterOutcome(kept=kept, rejection_counts=rejection_counts)
