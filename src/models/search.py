# src/models/search.py

"""Request, per-site outcome and response models for one search run."""

from dataclasses import dataclass, field
from typing import Any

from src.models.listing import (
    NormalizedListing,
    PriceStatistics,
    RawListing,
)


@dataclass
class SearchRequest:
    """Caller input for a single aggregated price search."""

    query: str
    country: str
    min_price: float | None = None
    max_price: float | None = None
    max_results: int | None = None


@dataclass
class SiteFetchResult:
    """Outcome of one site task: listings on success, a reason on failure.

    ``strategy`` names the terminal fetch state: ``fast``, ``rendered``,
    ``degraded`` or ``none`` when every state came back empty.
    """

    site: str
    listings: list[RawListing] = field(
        default_factory=lambda: list[RawListing]()
    )
    strategy: str = "none"
    error: str | None = None
    elapsed_ms: float = 0.0

    @property
    def ok(self) -> bool:
        """True when the site produced at least one listing."""
        return bool(self.listings)


@dataclass
class SearchMetadata:
    """Descriptive metadata returned alongside the ranked results."""

    query: str
    country: str
    currency: str
    total_results: int = 0
    total_found: int = 0
    sites_searched: int = 0
    sites_used: list[str] = field(
        default_factory=lambda: list[str]()
    )
    site_reports: list[dict[str, Any]] = field(
        default_factory=lambda: list[dict[str, Any]]()
    )
    processing_time_ms: float = 0.0
    price_statistics: PriceStatistics | None = None
    filters: dict[str, Any] = field(
        default_factory=lambda: dict[str, Any]()
    )
    last_updated: str = ""
    message: str = ""


@dataclass
class SearchResponse:
    """Ranked listings plus metadata for one search run."""

    results: list[NormalizedListing]
    metadata: SearchMetadata


@dataclass
class CountryComparison:
    """Top listings and statistics for one country in a comparison."""

    country: str
    currency: str
    listings: list[NormalizedListing] = field(
        default_factory=lambda: list[NormalizedListing]()
    )
    statistics: PriceStatistics | None = None
    error: str | None = None
