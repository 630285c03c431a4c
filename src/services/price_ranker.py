# src/services/price_ranker.py

"""Currency normalisation, ranking and price statistics."""

import bisect
import logging
import math
import re
from datetime import datetime, timezone

from src.models.listing import (
    NormalizedListing,
    PriceStatistics,
    Savings,
    ScoredListing,
)
from src.services.currency_converter import CurrencyConverter

logger = logging.getLogger("price_scout.ranker")

DEFAULT_TRUST_SCORE = 0.70

TRUST_SCORES: dict[str, float] = {
    "Amazon US": 0.95,
    "Amazon India": 0.95,
    "Amazon UK": 0.95,
    "Amazon Germany": 0.95,
    "Amazon Australia": 0.95,
    "Amazon Canada": 0.95,
    "Best Buy": 0.90,
    "Best Buy Canada": 0.90,
    "Walmart": 0.85,
    "Target": 0.85,
    "Flipkart": 0.88,
    "Myntra": 0.82,
    "Croma": 0.80,
    "Sangeetha Mobiles": 0.75,
    "Currys": 0.80,
    "Argos": 0.78,
    "Otto": 0.75,
    "JB Hi-Fi": 0.80,
}

_MAX_NAME_LENGTH = 100


def round_half_up(value: float) -> int:
    """Round to the nearest integer with .5 going up."""
    return int(math.floor(value + 0.5))


def clean_product_name(title: str | None) -> str:
    """Collapse whitespace, strip unusual characters, cap at 100 chars."""
    if not title:
        return "Unknown Product"
    collapsed = re.sub(r"\s+", " ", title)
    stripped = re.sub(r"[^\w\s\-.,()]", "", collapsed).strip()
    return stripped[:_MAX_NAME_LENGTH] or "Unknown Product"


def trust_score(source: str) -> float:
    """Static reputation weight of a source site."""
    return TRUST_SCORES.get(source, DEFAULT_TRUST_SCORE)


def availability(price: float) -> str:
    """Listings with a valid price are assumed to be in stock."""
    return "In Stock" if price > 0 else "Out of Stock"


def price_rank(price: float, sorted_prices: list[float]) -> int:
    """Percentile of *price*: position of the first price >= it.

    Tied prices share the lower percentile.
    """
    if not sorted_prices:
        return 0
    position = bisect.bisect_left(sorted_prices, price)
    return round_half_up(100 * position / len(sorted_prices))


def calculate_savings(price: float, prices: list[float]) -> Savings:
    """Savings of *price* against the most expensive price in the set."""
    if not prices:
        return Savings()
    max_price = max(prices)
    min_price = min(prices)
    if max_price == min_price:
        return Savings()
    amount = max_price - price
    return Savings(
        amount=round(amount, 2),
        percentage=round(amount / max_price * 100, 2),
    )


class PriceRanker:
    """Normalise listings into one currency, rank them and summarise."""

    def __init__(
        self, converter: CurrencyConverter | None = None,
    ) -> None:
        self.converter = converter or CurrencyConverter()

    def normalize(
        self,
        scored: ScoredListing,
        target_currency: str,
        timestamp: str | None = None,
    ) -> NormalizedListing:
        """Convert one scored listing into the target currency."""
        listing = scored.listing
        normalized_price = self.converter.convert(
            listing.price, listing.currency, target_currency
        )
        return NormalizedListing(
            product_name=clean_product_name(listing.title),
            link=listing.link,
            source=listing.source,
            image=listing.image,
            currency=target_currency,
            normalized_price=normalized_price,
            display_price=self.converter.format_price(
                normalized_price, target_currency
            ),
            original_price=listing.price,
            original_currency=listing.currency,
            relevance_score=scored.relevance_score,
            specifications=dict(scored.specifications),
            price_per_unit=scored.price_per_unit,
            availability=availability(listing.price),
            trust_score=trust_score(listing.source),
            last_updated=timestamp
            or datetime.now(timezone.utc).isoformat(),
        )

    def normalize_all(
        self,
        scored: list[ScoredListing],
        target_currency: str,
    ) -> list[NormalizedListing]:
        """Normalise every listing, dropping non-positive prices."""
        timestamp = datetime.now(timezone.utc).isoformat()
        normalized = [
            self.normalize(item, target_currency, timestamp)
            for item in scored
        ]
        valid = [n for n in normalized if n.normalized_price > 0]
        if len(valid) != len(normalized):
            logger.info(
                "Dropped %d listings with invalid normalised prices",
                len(normalized) - len(valid),
            )
        return valid

    @staticmethod
    def sort_by_price(
        listings: list[NormalizedListing],
    ) -> list[NormalizedListing]:
        """Stable ascending sort by normalised price."""
        return sorted(listings, key=lambda n: n.normalized_price)

    @staticmethod
    def rank(
        listings: list[NormalizedListing],
    ) -> list[NormalizedListing]:
        """Sort ascending and assign rank, percentile and savings.

        Percentiles and savings are relative to exactly the listings
        passed in, so call this on the final result set.
        """
        ranked = PriceRanker.sort_by_price(listings)
        prices = [n.normalized_price for n in ranked]
        for index, item in enumerate(ranked, 1):
            item.rank = index
            item.price_rank = price_rank(item.normalized_price, prices)
            item.savings = calculate_savings(item.normalized_price, prices)
        logger.info("Ranked %d listings", len(ranked))
        return ranked

    @staticmethod
    def statistics(
        listings: list[NormalizedListing],
    ) -> PriceStatistics | None:
        """Min, max, upper-middle median, mean, count and range.

        Returns ``None`` when no listing has a positive price.
        """
        prices = sorted(
            n.normalized_price for n in listings if n.normalized_price > 0
        )
        if not prices:
            return None
        low = prices[0]
        high = prices[-1]
        return PriceStatistics(
            min=low,
            max=high,
            median=round(prices[len(prices) // 2], 2),
            average=round(sum(prices) / len(prices), 2),
            count=len(prices),
            range=high - low,
            currency=listings[0].currency,
        )
