# src/filters/price_range_filter.py

"""Post-ranking filtering by a caller-supplied price range."""

import logging

from src.models.listing import NormalizedListing
from src.services.currency_converter import CurrencyConverter

logger = logging.getLogger("price_scout.filters")


class PriceRangeFilter:
    """Keep normalised listings whose price lies within [min, max]."""

    def __init__(
        self, converter: CurrencyConverter | None = None,
    ) -> None:
        self.converter = converter or CurrencyConverter()

    def filter_by_price_range(
        self,
        listings: list[NormalizedListing],
        min_price: float | None,
        max_price: float | None,
        bound_currency: str,
        target_currency: str,
    ) -> tuple[list[NormalizedListing], int]:
        """Apply inclusive bounds given in *bound_currency*.

        The bounds are converted into the result set's shared
        *target_currency* once and compared directly. Returns the
        kept listings and the number excluded.
        """
        if not min_price and not max_price:
            return listings, 0

        low = (
            self.converter.convert(min_price, bound_currency, target_currency)
            if min_price
            else None
        )
        high = (
            self.converter.convert(max_price, bound_currency, target_currency)
            if max_price
            else None
        )

        kept = [
            listing
            for listing in listings
            if (low is None or listing.normalized_price >= low)
            and (high is None or listing.normalized_price <= high)
        ]
        excluded = len(listings) - len(kept)
        if excluded:
            logger.info(
                "Price range [%s, %s] %s excluded %d listings",
                low,
                high,
                target_currency,
                excluded,
            )
        return kept, excluded
