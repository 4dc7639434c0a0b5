from __future__ import annotations

SOURCE_SITES: tuple[str, ...] = (
    "mobile.de",
    "autoscout24",
    "marktplaats.nl",
    "leboncoin.fr",
    "subito.it",
    "autotrader.co.uk",
)

# Words and URL fragments that show up on individual ads rather than brand pages.
LISTING_URL_HINTS: tuple[str, ...] = (
    "details.html?id=",
    "fahrzeuge/details",
    "Anzeige",
    "ad id",
    "ref:",
    "immatriculation",
    "kenteken",
)

LISTING_VALUE_HINTS: tuple[str, ...] = ("€", "EUR", "km", "miles")

EXCLUDED_FRAGMENTS: tuple[str, ...] = ("suchen.mobile.de", "/marke/", "/modell/", "/auto/")


def _any_of(terms: tuple[str, ...]) -> str:
    return "(" + " OR ".join(f'"{term}"' for term in terms) + ")"


def source_scope() -> str:
    return " OR ".join(f"site:{site}" for site in SOURCE_SITES)


def exclusions() -> str:
    return " ".join(f"-{fragment}" for fragment in EXCLUDED_FRAGMENTS)


def build_search_query(user_query: str) -> str:
    return " ".join(
        (
            user_query,
            _any_of(LISTING_URL_HINTS),
            _any_of(LISTING_VALUE_HINTS),
            source_scope(),
            exclusions(),
        )
    )
