# tests/test_price_ranker.py

"""Tests for normalisation, ranking and price statistics."""

import unittest

from src.models.listing import (
    NormalizedListing,
    RawListing,
    Savings,
    ScoredListing,
)
from src.services.price_ranker import (
    DEFAULT_TRUST_SCORE,
    PriceRanker,
    availability,
    calculate_savings,
    clean_product_name,
    price_rank,
    round_half_up,
    trust_score,
)


def _normalized(
    price: float, name: str = "Item", currency: str = "USD"
) -> NormalizedListing:
    """Build a NormalizedListing with only the price varying."""
    return NormalizedListing(
        product_name=name,
        link=f"https://shop.example.com/{name}",
        source="Test Shop",
        image=None,
        currency=currency,
        normalized_price=price,
        display_price=f"${price:.2f}",
        original_price=price,
        original_currency=currency,
        relevance_score=1.0,
        specifications={},
        price_per_unit=None,
        availability="In Stock",
        trust_score=0.7,
        last_updated="2026-01-01T00:00:00+00:00",
    )


def _scored(
    price: float, currency: str = "USD", source: str = "Amazon India"
) -> ScoredListing:
    """Build a ScoredListing around a RawListing."""
    raw = RawListing(
        title="  Boat   Airdopes 311™  ",
        price=price,
        currency=currency,
        link="https://www.amazon.in/dp/B0",
        source=source,
    )
    return ScoredListing(
        listing=raw,
        relevance_score=0.85,
        specifications={"color": "Black"},
    )


class TestHelpers(unittest.TestCase):
    """Module-level helper functions."""

    def test_round_half_up(self) -> None:
        """Halves round upwards."""
        self.assertEqual(round_half_up(12.5), 13)
        self.assertEqual(round_half_up(2.5), 3)
        self.assertEqual(round_half_up(2.49), 2)

    def test_clean_product_name(self) -> None:
        """Whitespace collapses and unusual characters are removed."""
        self.assertEqual(
            clean_product_name("  Boat   Airdopes 311™  "),
            "Boat Airdopes 311",
        )
        self.assertEqual(clean_product_name(""), "Unknown Product")
        self.assertEqual(len(clean_product_name("x" * 250)), 100)

    def test_trust_score(self) -> None:
        """Known sources use the table; others use the default."""
        self.assertEqual(trust_score("Amazon US"), 0.95)
        self.assertEqual(trust_score("Corner Shop"), DEFAULT_TRUST_SCORE)

    def test_availability(self) -> None:
        """A positive price means in stock."""
        self.assertEqual(availability(10.0), "In Stock")
        self.assertEqual(availability(0.0), "Out of Stock")


class TestPriceRank(unittest.TestCase):
    """price_rank percentiles."""

    def test_distinct_prices(self) -> None:
        """Percentile is the share of strictly cheaper prices."""
        prices = [100.0, 200.0, 300.0, 400.0]
        self.assertEqual(
            [price_rank(p, prices) for p in prices], [0, 25, 50, 75]
        )

    def test_ties_share_lower_percentile(self) -> None:
        """Equal prices get the same percentile."""
        prices = [100.0, 200.0, 200.0, 300.0]
        self.assertEqual(price_rank(200.0, prices), 25)
        self.assertEqual(price_rank(300.0, prices), 75)

    def test_rounding(self) -> None:
        """Percentiles round half up."""
        prices = [1.0, 2.0, 3.0]
        self.assertEqual(price_rank(2.0, prices), 33)
        self.assertEqual(price_rank(3.0, prices), 67)

    def test_empty(self) -> None:
        """An empty set has no percentile."""
        self.assertEqual(price_rank(10.0, []), 0)


class TestSavings(unittest.TestCase):
    """calculate_savings behaviour."""

    def test_against_maximum(self) -> None:
        """Savings are measured against the most expensive price."""
        savings = calculate_savings(100.0, [100.0, 200.0, 300.0])
        self.assertEqual(savings.amount, 200.0)
        self.assertEqual(savings.percentage, 66.67)

    def test_most_expensive_saves_nothing(self) -> None:
        """The maximum price has zero savings."""
        self.assertEqual(
            calculate_savings(300.0, [100.0, 300.0]), Savings(0.0, 0.0)
        )

    def test_all_equal(self) -> None:
        """A set of equal prices has zero savings everywhere."""
        self.assertEqual(
            calculate_savings(50.0, [50.0, 50.0]), Savings(0.0, 0.0)
        )

    def test_empty(self) -> None:
        """No prices means no savings."""
        self.assertEqual(calculate_savings(50.0, []), Savings())


class TestNormalize(unittest.TestCase):
    """PriceRanker.normalize and normalize_all."""

    def setUp(self) -> None:
        self.ranker = PriceRanker()

    def test_normalize_same_currency(self) -> None:
        """A same-currency listing keeps its price and gains display."""
        item = self.ranker.normalize(_scored(2999.0, "INR"), "INR")
        self.assertEqual(item.normalized_price, 2999.0)
        self.assertEqual(item.display_price, "₹2999.00")
        self.assertEqual(item.product_name, "Boat Airdopes 311")
        self.assertEqual(item.original_currency, "INR")
        self.assertEqual(item.trust_score, 0.95)
        self.assertEqual(item.availability, "In Stock")
        self.assertEqual(item.relevance_score, 0.85)
        self.assertEqual(item.specifications, {"color": "Black"})
        self.assertTrue(item.last_updated)

    def test_normalize_converts(self) -> None:
        """A foreign-currency listing is converted to the target."""
        item = self.ranker.normalize(_scored(100.0, "USD"), "INR")
        self.assertEqual(item.normalized_price, 8325.0)
        self.assertEqual(item.original_price, 100.0)
        self.assertEqual(item.currency, "INR")

    def test_display_uses_target_currency(self) -> None:
        """JPY display prices have no decimals."""
        item = self.ranker.normalize(_scored(10.0, "USD"), "JPY")
        self.assertEqual(item.display_price, "¥1,495")

    def test_normalize_all_drops_non_positive(self) -> None:
        """Listings that normalise to zero are discarded."""
        result = self.ranker.normalize_all(
            [_scored(10.0), _scored(0.004)], "USD"
        )
        self.assertEqual(len(result), 1)
        self.assertEqual(result[0].normalized_price, 10.0)


class TestRank(unittest.TestCase):
    """PriceRanker.rank behaviour."""

    def test_ranks_form_permutation(self) -> None:
        """Ranks are 1..n in ascending price order."""
        ranked = PriceRanker.rank(
            [_normalized(300.0, "c"), _normalized(100.0, "a"),
             _normalized(200.0, "b")]
        )
        self.assertEqual([r.rank for r in ranked], [1, 2, 3])
        self.assertEqual(
            [r.product_name for r in ranked], ["a", "b", "c"]
        )
        self.assertEqual([r.price_rank for r in ranked], [0, 33, 67])

    def test_stable_for_ties(self) -> None:
        """Equal prices keep their incoming order."""
        ranked = PriceRanker.rank(
            [_normalized(50.0, "first"), _normalized(50.0, "second")]
        )
        self.assertEqual(
            [r.product_name for r in ranked], ["first", "second"]
        )
        self.assertEqual([r.price_rank for r in ranked], [0, 0])

    def test_single_listing(self) -> None:
        """A lone listing is rank 1 with zero savings."""
        ranked = PriceRanker.rank([_normalized(999.0)])
        self.assertEqual(ranked[0].rank, 1)
        self.assertEqual(ranked[0].price_rank, 0)
        self.assertEqual(ranked[0].savings, Savings(0.0, 0.0))

    def test_savings_assigned(self) -> None:
        """The cheapest listing saves against the most expensive."""
        ranked = PriceRanker.rank(
            [_normalized(80.0), _normalized(100.0)]
        )
        self.assertEqual(ranked[0].savings, Savings(20.0, 20.0))
        self.assertEqual(ranked[1].savings, Savings(0.0, 0.0))

    def test_empty(self) -> None:
        """Ranking nothing returns nothing."""
        self.assertEqual(PriceRanker.rank([]), [])


class TestStatistics(unittest.TestCase):
    """PriceRanker.statistics behaviour."""

    def test_even_count_upper_median(self) -> None:
        """The median is the upper-middle element."""
        stats = PriceRanker.statistics(
            [_normalized(p) for p in (400.0, 100.0, 300.0, 200.0)]
        )
        assert stats is not None
        self.assertEqual(stats.min, 100.0)
        self.assertEqual(stats.max, 400.0)
        self.assertEqual(stats.median, 300.0)
        self.assertEqual(stats.average, 250.0)
        self.assertEqual(stats.count, 4)
        self.assertEqual(stats.range, 300.0)
        self.assertEqual(stats.currency, "USD")

    def test_invariants(self) -> None:
        """min <= median <= max and min <= average <= max."""
        stats = PriceRanker.statistics(
            [_normalized(p) for p in (12.5, 99.99, 45.0)]
        )
        assert stats is not None
        self.assertLessEqual(stats.min, stats.median)
        self.assertLessEqual(stats.median, stats.max)
        self.assertLessEqual(stats.min, stats.average)
        self.assertLessEqual(stats.average, stats.max)
        self.assertAlmostEqual(stats.range, stats.max - stats.min)

    def test_empty_is_none(self) -> None:
        """No listings yields no statistics."""
        self.assertIsNone(PriceRanker.statistics([]))


if __name__ == "__main__":
    unittest.main()
