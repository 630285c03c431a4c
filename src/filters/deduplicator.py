# src/filters/deduplicator.py

"""Listing deduplication across the sites of one search run."""

import logging
import re

from src.models.listing import RawListing

logger = logging.getLogger("price_scout.filters")


class ListingDeduplicator:
    """Collapse duplicate listings by normalised link or same-site title."""

    # Tracking params and fragments don't change listing identity
    _STRIP_PARAMS_RE = re.compile(r"[?#].*$")

    @staticmethod
    def _normalise_link(link: str) -> str:
        """Lowercase a link and strip its query, fragment and trailing slash."""
        if not link:
            return ""
        cleaned = ListingDeduplicator._STRIP_PARAMS_RE.sub("", link)
        return cleaned.rstrip("/").lower()

    @staticmethod
    def _normalise_title(title: str) -> str:
        """Reduce a title to lowercase alphanumerics and single spaces."""
        alpha_only = re.sub(r"[^a-z0-9\s]", "", title.lower())
        return " ".join(alpha_only.split())

    @staticmethod
    def deduplicate(
        listings: list[RawListing],
    ) -> tuple[list[RawListing], int]:
        """Remove duplicates, keeping the cheapest listing of each group.

        A listing duplicates an earlier one when its normalised link
        matches, or when it comes from the same site with the same
        normalised title. Kept listings stay in first-seen order.

        Returns the deduplicated list and the count of removed dupes.
        """
        if not listings:
            return [], 0

        seen_links: dict[str, int] = {}
        seen_titles: dict[str, int] = {}
        kept: list[RawListing] = []
        removed = 0

        for listing in listings:
            norm_link = ListingDeduplicator._normalise_link(listing.link)
            title_key = (
                f"{listing.source}:"
                f"{ListingDeduplicator._normalise_title(listing.title)}"
            )

            existing_idx: int | None = None
            if norm_link and norm_link in seen_links:
                existing_idx = seen_links[norm_link]
            elif title_key in seen_titles:
                existing_idx = seen_titles[title_key]

            if existing_idx is not None:
                current = kept[existing_idx]
                # Prices are only comparable within one currency
                if (
                    listing.currency == current.currency
                    and 0 < listing.price < current.price
                ):
                    kept[existing_idx] = listing
                removed += 1
                continue

            idx = len(kept)
            if norm_link:
                seen_links[norm_link] = idx
            seen_titles[title_key] = idx
            kept.append(listing)

        if removed:
            logger.info(
                "Deduplication removed %d duplicate listings",
                removed,
            )

        return kept, removed
