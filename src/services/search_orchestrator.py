# src/services/search_orchestrator.py

"""Orchestrates the multi-site price aggregation pipeline."""

import asyncio
import logging
import time
from dataclasses import asdict
from datetime import datetime, timezone
from typing import Any

from src.config.settings import Settings
from src.config.sites import (
    categorize_product,
    get_currency_for_country,
    get_sites_for_country,
    supported_countries,
)
from src.filters.deduplicator import ListingDeduplicator
from src.filters.price_range_filter import PriceRangeFilter
from src.filters.product_validator import ProductValidator
from src.filters.relevance_matcher import RelevanceMatcher
from src.models.listing import RawListing, SiteConfig
from src.models.search import (
    CountryComparison,
    SearchMetadata,
    SearchRequest,
    SearchResponse,
    SiteFetchResult,
)
from src.scrapers.browser_session import BrowserSession
from src.scrapers.concurrency_gate import ConcurrencyGate
from src.scrapers.site_scraper import SiteScraper
from src.services.currency_converter import CurrencyConverter
from src.services.price_ranker import PriceRanker

logger = logging.getLogger("price_scout.orchestrator")


class SearchError(Exception):
    """Base class for errors surfaced to the caller."""


class InvalidSearchRequest(SearchError):
    """The request is structurally invalid; no site was contacted."""

    def __init__(
        self,
        message: str,
        *,
        required: list[str] | None = None,
        supported_countries: list[str] | None = None,
        received: Any = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.required = required
        self.supported_countries = supported_countries
        self.received = received

    def to_dict(self) -> dict[str, Any]:
        """Client-error payload for the routing layer or CLI."""
        payload: dict[str, Any] = {"error": self.message}
        if self.required is not None:
            payload["required"] = self.required
        if self.supported_countries is not None:
            payload["supportedCountries"] = self.supported_countries
        if self.received is not None:
            payload["received"] = self.received
        return payload


class UnknownSiteError(SearchError):
    """A single-site test named a site missing from the catalog."""

    def __init__(self, site_name: str, available: list[str]) -> None:
        super().__init__(f"Site not found: {site_name}")
        self.site_name = site_name
        self.available = available


def select_sites(
    sites: list[SiteConfig],
    category: str,
    limit: int | None = None,
) -> list[SiteConfig]:
    """Keep sites serving *category*, highest priority first.

    Sites without categories serve everything. When no site matches
    the category, every site is used.
    """
    relevant = [
        site
        for site in sites
        if site.categories is None or category in site.categories
    ]
    chosen = relevant or list(sites)
    chosen = sorted(chosen, key=lambda s: s.priority, reverse=True)
    if limit is not None:
        chosen = chosen[:limit]
    return chosen


def _site_report(result: SiteFetchResult) -> dict[str, Any]:
    """Summarise one site task for the response metadata."""
    return {
        "site": result.site,
        "strategy": result.strategy,
        "listings": len(result.listings),
        "error": result.error,
        "elapsedMs": round(result.elapsed_ms),
    }


class SearchOrchestrator:
    """Coordinates fetching, relevance filtering, ranking and statistics."""

    def __init__(
        self,
        browser_session: BrowserSession | None = None,
        converter: CurrencyConverter | None = None,
    ) -> None:
        self.settings = Settings()
        self.converter = converter or CurrencyConverter()
        self.ranker = PriceRanker(self.converter)
        self.price_filter = PriceRangeFilter(self.converter)
        self._browser_session = browser_session

    # ── Validation ───────────────────────────────────────

    def validate_request(
        self, request: SearchRequest,
    ) -> list[SiteConfig]:
        """Check the request and return the catalog sites for its country.

        Raises:
            InvalidSearchRequest: missing fields, bad numbers, or an
                unsupported country.
        """
        query = (request.query or "").strip()
        country = (request.country or "").strip()
        if not query or not country:
            raise InvalidSearchRequest(
                "Missing required fields",
                required=["country", "query"],
                received={
                    "country": bool(country),
                    "query": bool(query),
                },
            )
        for name in ("min_price", "max_price"):
            value = getattr(request, name)
            if value is not None and value < 0:
                raise InvalidSearchRequest(
                    f"{name} must not be negative", received=value
                )
        if request.max_results is not None and request.max_results < 1:
            raise InvalidSearchRequest(
                "max_results must be at least 1",
                received=request.max_results,
            )

        sites = get_sites_for_country(country)
        if not sites:
            raise InvalidSearchRequest(
                "Country not supported",
                supported_countries=supported_countries(),
                received=country,
            )
        return sites

    # ── Fan-out / join ───────────────────────────────────

    def _make_scraper(self, site: SiteConfig) -> SiteScraper:
        """Build the fetch-strategy runner for one site."""
        return SiteScraper(site, self._browser_session)

    async def _fetch_site(
        self, site: SiteConfig, query: str,
    ) -> SiteFetchResult:
        """Run one site's fetch strategy (inside a gate slot)."""
        scraper = self._make_scraper(site)
        return await scraper.run(query)

    async def fetch_all(
        self,
        sites: list[SiteConfig],
        query: str,
    ) -> list[SiteFetchResult]:
        """Fetch every site under the concurrency gate and join.

        Failures never propagate: each becomes a ``SiteFetchResult``
        carrying the error text.
        """
        gate = ConcurrencyGate(self.settings.MAX_CONCURRENT_REQUESTS)

        def task_for(site: SiteConfig) -> Any:
            return lambda: self._fetch_site(site, query)

        outcomes = await asyncio.gather(
            *(
                gate.run(task_for(site), label=site.name)
                for site in sites
            )
        )

        results: list[SiteFetchResult] = []
        for site, outcome in zip(sites, outcomes):
            if outcome.ok and outcome.value is not None:
                results.append(outcome.value)
            else:
                results.append(
                    SiteFetchResult(
                        site=site.name,
                        error=str(outcome.error) or type(
                            outcome.error
                        ).__name__,
                    )
                )
                logger.warning(
                    "Failed to fetch %s: %s", site.name, outcome.error
                )
        return results

    # ── Pipeline ─────────────────────────────────────────

    async def search(self, request: SearchRequest) -> SearchResponse:
        """Run the full aggregation pipeline for one query.

        validate → select sites → gated fetch → merge → dedup →
        relevance → normalise → price range → sort → truncate →
        rank → statistics.
        """
        start = time.monotonic()
        sites = self.validate_request(request)
        query = request.query.strip()
        country = request.country.strip().upper()
        max_results = request.max_results or self.settings.DEFAULT_MAX_RESULTS
        target_currency = get_currency_for_country(country)
        category = categorize_product(query)

        sites_to_scrape = select_sites(
            sites, category, self.settings.MAX_SITES_PER_QUERY
        )
        logger.info(
            "Searching '%s' in %s across %d sites (category=%s)",
            query,
            country,
            len(sites_to_scrape),
            category,
        )

        site_results = await self.fetch_all(sites_to_scrape, query)
        raw: list[RawListing] = [
            listing for r in site_results for listing in r.listings
        ]

        metadata = SearchMetadata(
            query=query,
            country=country,
            currency=target_currency,
            total_found=len(raw),
            sites_searched=len(sites_to_scrape),
            sites_used=[s.name for s in sites_to_scrape],
            site_reports=[_site_report(r) for r in site_results],
            filters={
                "minPrice": request.min_price,
                "maxPrice": request.max_price,
                "maxResults": max_results,
                "category": category,
                "priceCurrency": self.settings.PRICE_FILTER_CURRENCY,
            },
        )
        logger.info(
            "Found %d raw listings from %d sites",
            len(raw),
            len(sites_to_scrape),
        )

        valid, _ = ProductValidator.validate(raw)
        unique, _ = ListingDeduplicator.deduplicate(valid)
        relevant, _ = RelevanceMatcher.filter_relevant(unique, query)
        scored = RelevanceMatcher.enhance(relevant, query)
        normalized = self.ranker.normalize_all(scored, target_currency)

        in_range, _ = self.price_filter.filter_by_price_range(
            normalized,
            request.min_price,
            request.max_price,
            self.settings.PRICE_FILTER_CURRENCY,
            target_currency,
        )
        final = self.ranker.rank(
            self.ranker.sort_by_price(in_range)[:max_results]
        )

        metadata.total_results = len(final)
        metadata.price_statistics = self.ranker.statistics(final)
        metadata.processing_time_ms = round(
            (time.monotonic() - start) * 1000, 1
        )
        metadata.last_updated = datetime.now(timezone.utc).isoformat()
        if not final:
            metadata.message = "No products found for this query"

        logger.info(
            "Search '%s' completed: %d results in %.0fms",
            query,
            len(final),
            metadata.processing_time_ms,
        )
        return SearchResponse(results=final, metadata=metadata)

    # ── Supplementary operations ─────────────────────────

    async def test_site(
        self,
        site_name: str,
        query: str,
        country: str = "US",
    ) -> SiteFetchResult:
        """Run the fetch strategy for a single site by name substring."""
        sites = get_sites_for_country(country or "US")
        needle = site_name.strip().lower()
        match = next(
            (s for s in sites if needle and needle in s.name.lower()),
            None,
        )
        if match is None:
            raise UnknownSiteError(site_name, [s.name for s in sites])
        logger.info("Testing site %s with query '%s'", match.name, query)
        return await self._fetch_site(match, query)

    async def _compare_one(
        self, query: str, country: str,
    ) -> CountryComparison:
        """Top listings and statistics for one country."""
        code = country.strip().upper()
        currency = get_currency_for_country(code)
        sites = get_sites_for_country(code)
        if not sites:
            return CountryComparison(
                country=code,
                currency=currency,
                error="Country not supported",
            )
        sites = sites[: self.settings.COMPARE_SITES_PER_COUNTRY]
        results = await self.fetch_all(sites, query)
        raw = [listing for r in results for listing in r.listings]
        valid, _ = ProductValidator.validate(raw)
        relevant, _ = RelevanceMatcher.filter_relevant(valid, query)
        scored = RelevanceMatcher.enhance(relevant, query)
        ranked = self.ranker.rank(
            self.ranker.normalize_all(scored, currency)
        )
        return CountryComparison(
            country=code,
            currency=currency,
            listings=ranked[: self.settings.COMPARE_TOP_LISTINGS],
            statistics=self.ranker.statistics(ranked),
        )

    async def compare_countries(
        self,
        query: str,
        countries: list[str] | None = None,
    ) -> list[CountryComparison]:
        """Compare prices for *query* across countries concurrently."""
        if not query or not query.strip():
            raise InvalidSearchRequest(
                "Query is required", required=["query"]
            )
        codes = countries or self.settings.COMPARE_DEFAULT_COUNTRIES
        logger.info(
            "Comparing prices for '%s' across %s",
            query,
            ", ".join(codes),
        )

        async def guarded(code: str) -> CountryComparison:
            try:
                return await self._compare_one(query.strip(), code)
            except Exception as exc:
                logger.warning(
                    "Error comparing prices for %s: %s",
                    code,
                    exc,
                    exc_info=True,
                )
                return CountryComparison(
                    country=code.upper(),
                    currency=get_currency_for_country(code),
                    error=str(exc),
                )

        return list(await asyncio.gather(*(guarded(c) for c in codes)))


def supported_catalog() -> dict[str, Any]:
    """Countries, their currencies and sites, plus the total site count."""
    countries = supported_countries()
    info = [
        {
            "country": code,
            "currency": get_currency_for_country(code),
            "sites": [
                {
                    "name": site.name,
                    "priority": site.priority,
                    "categories": list(site.categories or ("all",)),
                }
                for site in get_sites_for_country(code)
            ],
        }
        for code in countries
    ]
    return {
        "supportedCountries": info,
        "totalSites": sum(len(entry["sites"]) for entry in info),
    }


def response_to_dict(response: SearchResponse) -> dict[str, Any]:
    """Serialise a response to plain JSON-ready data."""
    return {
        "results": [asdict(item) for item in response.results],
        "metadata": asdict(response.metadata),
    }
