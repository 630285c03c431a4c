# src/filters/relevance_matcher.py

"""Lexical relevance filtering and scoring of listings against a query."""

import logging
from dataclasses import dataclass

from src.filters.spec_extractor import (
    calculate_price_per_unit,
    extract_specifications,
)
from src.models.listing import RawListing, ScoredListing

logger = logging.getLogger("price_scout.filters")

MIN_TOKEN_LENGTH = 3
MATCH_RATIO_THRESHOLD = 0.4
EXACT_RATIO_THRESHOLD = 0.2
EXACT_BONUS_WEIGHT = 0.2
MIN_RELEVANCE_SCORE = 0.1
# Score for queries with no significant tokens
NEUTRAL_RELEVANCE_SCORE = 0.5


@dataclass
class TokenMatch:
    """Per-title tally of query-token hits."""

    total: int
    matched: int = 0
    exact: int = 0

    @property
    def match_ratio(self) -> float:
        """Share of query tokens matched in any direction."""
        return self.matched / self.total if self.total else 0.0

    @property
    def exact_ratio(self) -> float:
        """Share of query tokens matched exactly."""
        return self.exact / self.total if self.total else 0.0


def query_tokens(query: str) -> list[str]:
    """Lowercased query tokens longer than two characters."""
    return [
        token
        for token in query.lower().split()
        if len(token) >= MIN_TOKEN_LENGTH
    ]


def _tokens_match(query_token: str, title_token: str) -> bool:
    """True when one token contains the other.

    A title token found inside the query token only counts when it is
    significant and leads the query token (``airdopes`` for
    ``airdopes311``), so ``phone`` does not match ``iphone``. This is
    deliberately narrower than plain two-way containment, which would
    keep "Android Phone" for an iPhone query.
    """
    if query_token in title_token:
        return True
    return (
        len(title_token) >= MIN_TOKEN_LENGTH
        and query_token.startswith(title_token)
    )


def match_tokens(tokens: list[str], title: str) -> TokenMatch:
    """Count query tokens hit by the title; first title-token hit wins."""
    title_tokens = title.lower().split()
    tally = TokenMatch(total=len(tokens))
    for query_token in tokens:
        for title_token in title_tokens:
            if _tokens_match(query_token, title_token):
                tally.matched += 1
                if title_token == query_token:
                    tally.exact += 1
                break
    return tally


class RelevanceMatcher:
    """Keep listings lexically related to the query and score them."""

    @staticmethod
    def is_relevant(query: str, title: str) -> bool:
        """Keep iff 40% of query tokens match or 20% match exactly."""
        tokens = query_tokens(query)
        if not tokens:
            return True
        tally = match_tokens(tokens, title)
        return (
            tally.match_ratio >= MATCH_RATIO_THRESHOLD
            or tally.exact_ratio >= EXACT_RATIO_THRESHOLD
        )

    @staticmethod
    def score(query: str, title: str) -> float:
        """Relevance in [0.1, 1.0]: exact hits weigh 1.0, partial 0.5."""
        tokens = query_tokens(query)
        if not tokens:
            return NEUTRAL_RELEVANCE_SCORE
        tally = match_tokens(tokens, title)
        partial = tally.matched - tally.exact
        match_score = tally.exact * 1.0 + partial * 0.5
        base = min(match_score / tally.total, 1.0)
        final = min(base + EXACT_BONUS_WEIGHT * tally.exact_ratio, 1.0)
        return max(MIN_RELEVANCE_SCORE, final)

    @staticmethod
    def filter_relevant(
        listings: list[RawListing],
        query: str,
    ) -> tuple[list[RawListing], int]:
        """Drop unrelated listings.

        Returns the kept listings and the number dropped. A query made
        only of short tokens passes every listing through.
        """
        if not listings:
            return [], 0
        if not query_tokens(query):
            logger.info(
                "Query '%s' has no significant tokens; "
                "skipping relevance filter",
                query,
            )
            return list(listings), 0

        kept = [
            listing
            for listing in listings
            if RelevanceMatcher.is_relevant(query, listing.title)
        ]
        dropped = len(listings) - len(kept)
        logger.info(
            "Relevance filter kept %d/%d listings for '%s'",
            len(kept),
            len(listings),
            query,
        )
        return kept, dropped

    @staticmethod
    def enhance(
        listings: list[RawListing],
        query: str,
    ) -> list[ScoredListing]:
        """Attach relevance scores, title specifications and price-per-GB."""
        return [
            ScoredListing(
                listing=listing,
                relevance_score=RelevanceMatcher.score(
                    query, listing.title
                ),
                specifications=extract_specifications(listing.title),
                price_per_unit=calculate_price_per_unit(
                    listing.title, listing.price
                ),
            )
            for listing in listings
        ]
