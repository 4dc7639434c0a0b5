"""25-year rule heuristics.

A vehicle is treated as import-eligible 25 years after an assumed build date
of January 1 of its model year. The model year comes from the listing title
and snippet, so every verdict is at best ``medium`` confidence.
"""

from __future__ import annotations

import re
from datetime import date
from typing import Optional

from importscout.models import Eligibility

ELIGIBILITY_YEARS = 25
MIN_MODEL_YEAR = 1950

STATUS_ELIGIBLE_NOW = "eligible_now"
STATUS_ELIGIBLE_SOON = "eligible_soon"
STATUS_NOT_ELIGIBLE = "not_eligible"
STATUS_UNCERTAIN = "uncertain"

STATUSES = (STATUS_ELIGIBLE_NOW, STATUS_ELIGIBLE_SOON, STATUS_NOT_ELIGIBLE, STATUS_UNCERTAIN)

FILTER_ALL = "all"
FILTER_NOW = "now"
FILTER_SOON = "soon"
FILTER_UNCERTAIN = "uncertain"

FILTER_MODES = (FILTER_ALL, FILTER_NOW, FILTER_SOON, FILTER_UNCERTAIN)

_INCLUDED_STATUSES: dict[str, frozenset[str]] = {
    FILTER_ALL: frozenset({STATUS_ELIGIBLE_NOW, STATUS_ELIGIBLE_SOON, STATUS_UNCERTAIN}),
    FILTER_NOW: frozenset({STATUS_ELIGIBLE_NOW}),
    FILTER_SOON: frozenset({STATUS_ELIGIBLE_NOW, STATUS_ELIGIBLE_SOON}),
    FILTER_UNCERTAIN: frozenset({STATUS_ELIGIBLE_NOW, STATUS_ELIGIBLE_SOON, STATUS_UNCERTAIN}),
}

YEAR_RE = re.compile(r"\b(19[5-9]\d|20[0-2]\d)\b")


def infer_year(text: Optional[str], current_year: Optional[int] = None) -> Optional[int]:
    """Return the first plausible model year in ``text``.

    Only the first year-like token is considered; if it falls outside
    [1950, current_year + 1] the result is None.
    """
    match = YEAR_RE.search(text or "")
    if not match:
        return None
    year = int(match.group(1))
    if current_year is None:
        current_year = date.today().year
    if year < MIN_MODEL_YEAR or year > current_year + 1:
        return None
    return year


def months_between(start: date, end: date) -> int:
    # Calendar months only; day-of-month is ignored.
    return (end.year - start.year) * 12 + (end.month - start.month)


def eligible_date(year: int) -> date:
    return date(year + ELIGIBILITY_YEARS, 1, 1)


def classify(year: Optional[int], soon_months: int, today: Optional[date] = None) -> Eligibility:
    if today is None:
        today = date.today()

    if year is None:
        return Eligibility(
            status=STATUS_UNCERTAIN,
            confidence="low",
            reason="Year not found in listing title/snippet. Needs build/registration date.",
        )

    eligible_on = eligible_date(year)
    if eligible_on <= today:
        return Eligibility(
            status=STATUS_ELIGIBLE_NOW,
            confidence="medium",
            reason=(
                f"Eligible under the 25-year rule based on inferred year ({year}). "
                "Confirm build month for high confidence."
            ),
        )

    if months_between(today, eligible_on) <= soon_months:
        return Eligibility(
            status=STATUS_ELIGIBLE_SOON,
            confidence="medium",
            reason=(
                f"Likely eligible on {eligible_on.strftime('%b %Y')} (25-year rule) "
                f"based on inferred year ({year})."
            ),
            eligible_on=eligible_on,
        )

    return Eligibility(
        status=STATUS_NOT_ELIGIBLE,
        confidence="medium",
        reason=f"Not yet eligible under the 25-year rule based on inferred year ({year}).",
        eligible_on=eligible_on,
    )


def should_include(status: str, filter_mode: str) -> bool:
    included = _INCLUDED_STATUSES.get(filter_mode)
    if included is None:
        return False
    return status in included
