# src/models/listing.py

"""Site configuration and listing models for inter-module data flow."""

from dataclasses import dataclass, field


@dataclass(frozen=True)
class SelectorMap:
    """CSS selectors locating one site's listing fields.

    Every field except ``products`` may hold comma-separated
    alternatives; extraction takes the first one that yields a value.
    """

    products: str
    title: str
    price: str
    link: str
    image: str = ""


@dataclass(frozen=True)
class SiteConfig:
    """Read-only catalog entry for one e-commerce site in one country."""

    name: str
    base_url: str
    search_url: str                     # Contains the {query} placeholder
    selectors: SelectorMap
    country: str
    priority: int = 5
    categories: tuple[str, ...] | None = None

    def build_search_url(self, encoded_query: str) -> str:
        """Substitute an already percent-encoded query into the template."""
        return self.search_url.replace("{query}", encoded_query)


@dataclass
class RawListing:
    """A single listing as extracted from one site's search page."""

    title: str
    price: float
    currency: str
    link: str
    source: str
    image: str | None = None


@dataclass
class ScoredListing:
    """A relevance-scored listing with title-derived specifications."""

    listing: RawListing
    relevance_score: float
    specifications: dict[str, str] = field(
        default_factory=lambda: dict[str, str]()
    )
    price_per_unit: float | None = None


@dataclass
class Savings:
    """Savings of one listing against the most expensive in its set."""

    amount: float = 0.0
    percentage: float = 0.0


@dataclass
class NormalizedListing:
    """A listing converted to the target currency and ranked."""

    product_name: str
    link: str
    source: str
    image: str | None
    currency: str
    normalized_price: float
    display_price: str
    original_price: float
    original_currency: str
    relevance_score: float
    specifications: dict[str, str]
    price_per_unit: float | None
    availability: str
    trust_score: float
    last_updated: str
    rank: int = 0
    price_rank: int = 0
    savings: Savings = field(default_factory=Savings)


@dataclass
class PriceStatistics:
    """Summary statistics over a ranked result set."""

    min: float
    max: float
    median: float
    average: float
    count: int
    range: float
    currency: str
