from __future__ import annotations

from importscout.query import build_search_query, exclusions, source_scope


def test_build_search_query_starts_with_user_query() -> None:
    query = build_search_query("BMW E36")
    assert query.startswith("BMW E36 (")


def test_build_search_query_scopes_marketplaces() -> None:
    assert source_scope() == (
        "site:mobile.de OR site:autoscout24 OR site:marktplaats.nl OR "
        "site:leboncoin.fr OR site:subito.it OR site:autotrader.co.uk"
    )
    assert source_scope() in build_search_query("Golf")


def test_build_search_query_full_layout() -> None:
    expected = (
        'Golf ("details.html?id=" OR "fahrzeuge/details" OR "Anzeige" OR "ad id" OR "ref:" '
        'OR "immatriculation" OR "kenteken") ("€" OR "EUR" OR "km" OR "miles") '
        "site:mobile.de OR site:autoscout24 OR site:marktplaats.nl OR site:leboncoin.fr "
        "OR site:subito.it OR site:autotrader.co.uk -suchen.mobile.de -/marke/ -/modell/ -/auto/"
    )
    assert build_search_query("Golf") == expected


def test_build_search_query_is_deterministic() -> None:
    assert build_search_query("Skyline R33") == build_search_query("Skyline R33")
    assert exclusions().split() == ["-suchen.mobile.de", "-/marke/", "-/modell/", "-/auto/"]
