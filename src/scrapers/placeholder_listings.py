# src/scrapers/placeholder_listings.py

"""Synthetic listings used only in demo mode when a site returns nothing."""

import logging
import random

from src.config.sites import get_currency_for_country
from src.models.listing import RawListing, SiteConfig

logger = logging.getLogger("price_scout.placeholder")

_TITLE_VARIATIONS: list[str] = [
    "{query}",
    "{query} - Premium Edition",
    "{query} Pro",
    "{query} (Latest Model)",
    "{query} - Best Seller",
]
_COLORS: list[str] = ["Black", "White", "Blue", "Silver", "Red"]
_STORAGE: list[str] = ["64GB", "128GB", "256GB", "512GB"]
_PHONE_HINTS: tuple[str, ...] = ("phone", "iphone", "galaxy", "pixel")


def placeholder_title(query: str, index: int) -> str:
    """Build a plausible title variant for the *index*-th placeholder."""
    title = _TITLE_VARIATIONS[index % len(_TITLE_VARIATIONS)].format(
        query=query
    )
    if any(hint in query.lower() for hint in _PHONE_HINTS):
        title += (
            f" {_STORAGE[index % len(_STORAGE)]}"
            f" {_COLORS[index % len(_COLORS)]}"
        )
    return title


def generate_placeholder_listings(
    site: SiteConfig,
    query: str,
    rng: random.Random | None = None,
) -> list[RawListing]:
    """Return 2-3 placeholder listings priced in the site's currency."""
    rng = rng or random.Random()
    currency = get_currency_for_country(site.country)
    base_price = 100 + rng.random() * 500
    count = rng.randint(2, 3)

    listings = [
        RawListing(
            title=placeholder_title(query, i),
            price=float(round(base_price + i * 50 + rng.random() * 100)),
            currency=currency,
            link=f"{site.base_url.rstrip('/')}/product-{i + 1}",
            source=site.name,
        )
        for i in range(count)
    ]
    logger.info(
        "[%s] Generated %d placeholder listings (demo mode)",
        site.name,
        len(listings),
    )
    return listings
