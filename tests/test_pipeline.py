from __future__ import annotations

import threading
import time
from datetime import date
from typing import Optional

from importscout.config import SearchSettings
from importscout.models import RawCandidate, SearchRequest
from importscout.pipeline import ListingSearchPipeline
from importscout.search_provider import ProviderPage

TODAY = date(2026, 10, 19)


class StubSearchClient:
    def __init__(self, candidates: list[RawCandidate]) -> None:
        self.candidates = candidates
        self.calls: list[tuple[str, int]] = []

    def search(self, query: str, limit: int) -> ProviderPage:
        self.calls.append((query, limit))
        raw = [{"title": c.title, "url": c.url, "description": c.description} for c in self.candidates]
        return ProviderPage(raw_results=raw, candidates=list(self.candidates))


class SlowImageFetcher:
    """Finishes later for earlier URLs so completion order is reversed."""

    def __init__(self, delays: dict[str, float]) -> None:
        self.delays = delays
        self.lock = threading.Lock()
        self.completed: list[str] = []

    def fetch(self, url: str) -> Optional[str]:
        time.sleep(self.delays.get(url, 0.0))
        with self.lock:
            self.completed.append(url)
        return f"{url}/image.jpg"


def _candidates(count: int) -> list[RawCandidate]:
    return [
        RawCandidate(
            title=f"199{i} BMW E36 <b>328i</b>",
            url=f"https://www.autoscout24.de/angebote/{i}",
            description=f"€{i + 1}.500 - 200.000 km",
        )
        for i in range(count)
    ]


def test_run_builds_query_and_listings() -> None:
    search = StubSearchClient(_candidates(1))
    pipeline = ListingSearchPipeline(
        SearchSettings(api_key="k"),
        search_client=search,
        image_fetcher=SlowImageFetcher({}),
    )
    response = pipeline.run(SearchRequest(query="BMW E36", eligible="all"), today=TODAY)
    query, limit = search.calls[0]
    assert query.startswith("BMW E36 (")
    assert limit == 24
    listing = response.results[0]
    assert listing.title_raw == "1990 BMW E36 <b>328i</b>"
    assert listing.title_normalized == "1990 BMW E36 328i"
    assert listing.source_domain == "autoscout24.de"
    assert listing.inferred_year == 1990
    assert listing.price_value == 1500
    assert listing.price_currency == "EUR"
    assert listing.image_url == "https://www.autoscout24.de/angebote/0/image.jpg"
    assert listing.eligibility.status == "eligible_now"


def test_enrichment_keeps_provider_order() -> None:
    candidates = _candidates(4)
    delays = {c.url: 0.05 * (4 - i) for i, c in enumerate(candidates)}
    fetcher = SlowImageFetcher(delays)
    pipeline = ListingSearchPipeline(
        SearchSettings(api_key="k", enrich_workers=4),
        search_client=StubSearchClient(candidates),
        image_fetcher=fetcher,
    )
    response = pipeline.run(SearchRequest(query="BMW", eligible="all"), today=TODAY)
    urls = [c.url for c in candidates]
    assert [listing.source_url for listing in response.results] == urls
    assert [listing.image_url for listing in response.results] == [f"{u}/image.jpg" for u in urls]
    assert fetcher.completed[0] == urls[-1]


def test_failed_enrichment_degrades_to_null_image() -> None:
    class FlakyFetcher:
        def fetch(self, url: str) -> Optional[str]:
            if url.endswith("/1"):
                raise RuntimeError("unexpected markup")
            return "https://cdn.example/ok.jpg"

    pipeline = ListingSearchPipeline(
        SearchSettings(api_key="k"),
        search_client=StubSearchClient(_candidates(3)),
        image_fetcher=FlakyFetcher(),
    )
    response = pipeline.run(SearchRequest(query="BMW", eligible="all"), today=TODAY)
    assert [listing.image_url for listing in response.results] == [
        "https://cdn.example/ok.jpg",
        None,
        "https://cdn.example/ok.jpg",
    ]


def test_fetch_images_disabled_skips_fetcher() -> None:
    class ExplodingFetcher:
        def fetch(self, url: str) -> Optional[str]:
            raise AssertionError("should not be called")

    pipeline = ListingSearchPipeline(
        SearchSettings(api_key="k", fetch_images=False),
        search_client=StubSearchClient(_candidates(2)),
        image_fetcher=ExplodingFetcher(),
    )
    response = pipeline.run(SearchRequest(query="BMW", eligible="all"), today=TODAY)
    assert [listing.image_url for listing in response.results] == [None, None]


def test_response_debug_and_filters() -> None:
    candidates = _candidates(2) + [
        RawCandidate(title="2015 BMW M3", url="https://www.autoscout24.de/angebote/new", description=""),
        RawCandidate(title="BMW", url="https://www.mobile.de/auto/bmw", description=""),
        RawCandidate(title="BMW 3er", url="https://www.subito.it/auto/x", description=""),
    ]
    pipeline = ListingSearchPipeline(
        SearchSettings(api_key="k", fetch_images=False),
        search_client=StubSearchClient(candidates),
    )
    response = pipeline.run(SearchRequest(query="BMW", eligible="now", soon_months=6, limit=10), today=TODAY)
    payload = response.to_dict()
    assert payload["query"] == "BMW"
    assert payload["filters"] == {"eligible": "now", "soonMonths": 6, "limit": 10}
    assert payload["debug"]["braveCount"] == 5
    assert len(payload["debug"]["braveSample"]) == 3
    assert payload["debug"]["rejections"]["not a listing page"] == 1
    assert payload["debug"]["rejections"]["filtered by eligibility"] == 2
    assert [item["source_url"] for item in payload["results"]] == [c.url for c in candidates[:2]]
    assert payload["fetched_at"].endswith("+00:00")


def test_soon_listing_reports_eligible_on() -> None:
    candidate = RawCandidate(title="2002 BMW E46", url="https://www.marktplaats.nl/v/1", description="")
    pipeline = ListingSearchPipeline(
        SearchSettings(api_key="k", fetch_images=False),
        search_client=StubSearchClient([candidate]),
    )
    response = pipeline.run(SearchRequest(query="E46", eligible="soon"), today=TODAY)
    item = response.to_dict()["results"][0]
    assert item["eligibility_status"] == "eligible_soon"
    assert item["eligible_on"] == "2027-01-01"
    assert item["price_value"] is None
    assert item["location_raw"] is None
