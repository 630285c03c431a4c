# src/filters/product_validator.py

"""Listing validation: drop listings without a usable price before ranking."""

import logging
import math

from src.models.listing import RawListing

logger = logging.getLogger("price_scout.filters")


class ProductValidator:
    """Validate listings and drop those missing essential fields."""

    @staticmethod
    def validate(
        listings: list[RawListing],
    ) -> tuple[list[RawListing], int]:
        """Drop listings with blank titles, links, or non-positive prices.

        Returns the valid listings and the count of dropped items.
        """
        valid: list[RawListing] = []
        dropped = 0

        for listing in listings:
            if not listing.title.strip() or not listing.link:
                logger.debug(
                    "Dropped listing with empty title/link "
                    "(source=%s, link=%s)",
                    listing.source,
                    listing.link,
                )
                dropped += 1
                continue
            if not math.isfinite(listing.price) or listing.price <= 0:
                logger.debug(
                    "Dropped listing with invalid price "
                    "(title=%s, source=%s)",
                    listing.title,
                    listing.source,
                )
                dropped += 1
                continue
            valid.append(listing)

        if dropped:
            logger.info(
                "Validation dropped %d invalid listings",
                dropped,
            )

        return valid, dropped
