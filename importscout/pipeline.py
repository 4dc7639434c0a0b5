from __future__ import annotations

from concurrent.futures import ThreadPoolExecutor
from datetime import date
from typing import Optional, Protocol

from importscout import get_logger
from importscout.config import SearchSettings
from importscout.filtering import ClassifiedCandidate, filter_candidates
from importscout.models import Listing, SearchRequest, SearchResponse, listing_id_for, normalize_title
from importscout.preview import PreviewImageFetcher
from importscout.pricing import PRICE_CURRENCY, infer_price
from importscout.query import build_search_query
from importscout.search_provider import BraveSearchClient, ProviderPage

LOGGER = get_logger()


class SearchClientProtocol(Protocol):
    def search(self, query: str, limit: int) -> ProviderPage:
        ...


class ImageFetcherProtocol(Protocol):
    def fetch(self, url: str) -> Optional[str]:
        ...


class ListingSearchPipeline:
    def __init__(
        self,
        settings: SearchSettings,
        search_client: Optional[SearchClientProtocol] = None,
        image_fetcher: Optional[ImageFetcherProtocol] = None,
    ) -> None:
        self.settings = settings
        self.search_client = search_client or BraveSearchClient(settings)
        self.image_fetcher = image_fetcher or PreviewImageFetcher(settings)

    def run(self, request: SearchRequest, *, today: Optional[date] = None) -> SearchResponse:
        query = build_search_query(request.query)
        page = self.search_client.search(query, request.limit)
        outcome = filter_candidates(
            page.candidates,
            eligible=request.eligible,
            soon_months=request.soon_months,
            today=today,
        )
        images = self._fetch_images(outcome.kept, workers=min(self.settings.enrich_workers, request.limit))
        results = [_build_listing(item, image) for item, image in zip(outcome.kept, images)]
        LOGGER.info(
            "Search q=%r eligible=%s raw=%s kept=%s",
            request.query,
            request.eligible,
            page.raw_count,
            len(results),
        )
        return SearchResponse(
            request=request,
            results=results,
            raw_count=page.raw_count,
            sample=page.sample(),
            rejection_counts=outcome.rejection_counts,
        )

    def _fetch_images(self, items: list[ClassifiedCandidate], *, workers: int) -> list[Optional[str]]:
        if not items or not self.settings.fetch_images:
            return [None] * len(items)
        workers = max(1, min(workers, len(items)))
        images: list[Optional[str]] = []
        with ThreadPoolExecutor(max_workers=workers) as executor:
            futures = [executor.submit(self.image_fetcher.fetch, item.candidate.url) for item in items]
            # Joined in submission order so output follows provider order.
            for item, future in zip(items, futures):
                try:
                    images.append(future.result())
                except Exception:
                    LOGGER.exception("Preview enrichment failed for %s", item.candidate.url)
                    images.append(None)
        return images


def _build_listing(item: ClassifiedCandidate, image_url: Optional[str]) -> Listing:
    candidate = item.candidate
    return Listing(
        id=listing_id_for(candidate.url),
        title_raw=candidate.title,
        title_normalized=normalize_title(candidate.title),
        source_url=candidate.url,
        source_domain=item.domain,
        snippet=candidate.description,
        inferred_year=item.year,
        eligibility=item.eligibility,
        image_url=image_url,
        price_value=infer_price(candidate.text),
        price_currency=PRICE_CURRENCY,
    )
