# tests/test_extractor.py

"""Tests for selector-driven listing extraction."""

import unittest

from src.models.listing import SelectorMap, SiteConfig
from src.scrapers.extractor import (
    ListingExtractor,
    parse_price,
    resolve_url,
    split_selectors,
)


def _make_site(country: str = "US") -> SiteConfig:
    """Build a site whose selectors use comma-separated alternatives."""
    return SiteConfig(
        name="Test Shop",
        base_url="https://shop.example.com",
        search_url="https://shop.example.com/s?q={query}",
        selectors=SelectorMap(
            products=".card",
            title=".name-primary, .name",
            price=".sale, .price",
            link="a.main, a",
            image="img",
        ),
        country=country,
    )


def _card(
    title: str = "",
    price: str = "",
    href: str = "",
    img: str = "",
) -> str:
    """Render one listing container."""
    parts = ['<div class="card">']
    if title:
        parts.append(f'<span class="name">{title}</span>')
    if price:
        parts.append(f'<span class="price">{price}</span>')
    if href:
        parts.append(f'<a href="{href}">view</a>')
    if img:
        parts.append(f'<img src="{img}">')
    parts.append("</div>")
    return "".join(parts)


def _page(*cards: str) -> str:
    """Wrap containers into a minimal HTML document."""
    return f"<html><body>{''.join(cards)}</body></html>"


class TestParsePrice(unittest.TestCase):
    """parse_price behaviour."""

    def test_dollar_with_thousands(self) -> None:
        """Currency symbols and thousands separators are stripped."""
        self.assertEqual(parse_price("$1,299.99"), 1299.99)

    def test_indian_grouping(self) -> None:
        """Lakh-style grouping parses as one number."""
        self.assertEqual(parse_price("₹1,29,999"), 129999.0)

    def test_european_decimal_comma(self) -> None:
        """A trailing comma group of two digits is a decimal part."""
        self.assertEqual(parse_price("1.299,00 €"), 1299.0)
        self.assertEqual(parse_price("12,99 €"), 12.99)

    def test_trailing_dot(self) -> None:
        """Amazon's whole-part text ends with a dot."""
        self.assertEqual(parse_price("999."), 999.0)

    def test_rs_prefix(self) -> None:
        """The 'Rs.' prefix dot is not read as a decimal point."""
        self.assertEqual(parse_price("Rs. 2,999"), 2999.0)

    def test_unparsable_is_zero(self) -> None:
        """Text without digits yields 0."""
        self.assertEqual(parse_price("Price unavailable"), 0.0)
        self.assertEqual(parse_price(""), 0.0)
        self.assertEqual(parse_price(None), 0.0)


class TestResolveUrl(unittest.TestCase):
    """resolve_url behaviour."""

    def test_absolute_unchanged(self) -> None:
        """Absolute URLs are returned as-is."""
        self.assertEqual(
            resolve_url("https://cdn.example.com/a.jpg", "https://x.com"),
            "https://cdn.example.com/a.jpg",
        )

    def test_root_relative(self) -> None:
        """Root-relative paths are prefixed with the base URL."""
        self.assertEqual(
            resolve_url("/dp/B0123", "https://www.amazon.com"),
            "https://www.amazon.com/dp/B0123",
        )

    def test_bare_relative(self) -> None:
        """Bare relative paths are joined with the base URL."""
        self.assertEqual(
            resolve_url("item/42", "https://shop.example.com"),
            "https://shop.example.com/item/42",
        )

    def test_empty(self) -> None:
        """Missing href resolves to an empty string."""
        self.assertEqual(resolve_url("", "https://x.com"), "")


class TestSplitSelectors(unittest.TestCase):
    """split_selectors behaviour."""

    def test_splits_and_strips(self) -> None:
        """Alternatives are split on commas and trimmed."""
        self.assertEqual(
            split_selectors("h2 a span, h2 a ,"), ["h2 a span", "h2 a"]
        )

    def test_empty(self) -> None:
        """An empty selector has no alternatives."""
        self.assertEqual(split_selectors(""), [])


class TestExtractFromHtml(unittest.TestCase):
    """ListingExtractor.extract_from_html behaviour."""

    def setUp(self) -> None:
        self.extractor = ListingExtractor(_make_site())

    def test_complete_listing(self) -> None:
        """A complete container produces one listing."""
        html = _page(
            _card("Phone X 128GB", "$499.00", "/p/1", "/img/1.jpg")
        )
        listings = self.extractor.extract_from_html(html)
        self.assertEqual(len(listings), 1)
        listing = listings[0]
        self.assertEqual(listing.title, "Phone X 128GB")
        self.assertEqual(listing.price, 499.0)
        self.assertEqual(listing.currency, "USD")
        self.assertEqual(listing.link, "https://shop.example.com/p/1")
        self.assertEqual(
            listing.image, "https://shop.example.com/img/1.jpg"
        )
        self.assertEqual(listing.source, "Test Shop")

    def test_price_only_container_dropped(self) -> None:
        """A container with a price but no title emits nothing."""
        html = _page(_card(price="$10.00", href="/p/1"))
        self.assertEqual(self.extractor.extract_from_html(html), [])

    def test_missing_link_dropped(self) -> None:
        """A container without a link emits nothing."""
        html = _page(_card("Widget", "$10.00"))
        self.assertEqual(self.extractor.extract_from_html(html), [])

    def test_zero_price_dropped(self) -> None:
        """An unparsable price drops the listing."""
        html = _page(_card("Widget", "See price in cart", "/p/1"))
        self.assertEqual(self.extractor.extract_from_html(html), [])

    def test_missing_image_allowed(self) -> None:
        """Image is optional."""
        html = _page(_card("Widget", "$10.00", "/p/1"))
        listings = self.extractor.extract_from_html(html)
        self.assertEqual(len(listings), 1)
        self.assertIsNone(listings[0].image)

    def test_first_non_empty_alternative_wins(self) -> None:
        """An empty first alternative falls through to the next one."""
        html = _page(
            '<div class="card"><span class="name-primary"> </span>'
            '<span class="name">Fallback Title</span>'
            '<span class="sale"></span><span class="price">$5</span>'
            '<a href="/p/9">go</a></div>'
        )
        listings = self.extractor.extract_from_html(html)
        self.assertEqual(listings[0].title, "Fallback Title")
        self.assertEqual(listings[0].price, 5.0)

    def test_lazy_image_attribute(self) -> None:
        """data-src is used when src holds a data: placeholder."""
        html = _page(
            '<div class="card"><span class="name">Lamp</span>'
            '<span class="price">$20</span><a href="/p/2">go</a>'
            '<img src="data:image/gif;base64,R0lG" data-src="/i/lamp.jpg">'
            "</div>"
        )
        listings = self.extractor.extract_from_html(html)
        self.assertEqual(
            listings[0].image, "https://shop.example.com/i/lamp.jpg"
        )

    def test_cap_of_ten_listings(self) -> None:
        """At most MAX_LISTINGS_PER_SITE listings are produced."""
        cards = [
            _card(f"Item {i}", f"${i + 1}.00", f"/p/{i}")
            for i in range(15)
        ]
        listings = self.extractor.extract_from_html(_page(*cards))
        self.assertEqual(len(listings), 10)
        self.assertEqual(listings[0].title, "Item 0")

    def test_currency_defaults_to_market(self) -> None:
        """Without a symbol, the site's market currency applies."""
        extractor = ListingExtractor(_make_site(country="IN"))
        html = _page(_card("Earbuds", "2,999", "/p/1"))
        listings = extractor.extract_from_html(html)
        self.assertEqual(listings[0].currency, "INR")

    def test_symbol_overrides_market(self) -> None:
        """A recognised symbol sets the listing currency."""
        extractor = ListingExtractor(_make_site(country="IN"))
        html = _page(_card("Earbuds", "£29.99", "/p/1"))
        listings = extractor.extract_from_html(html)
        self.assertEqual(listings[0].currency, "GBP")

    def test_no_containers(self) -> None:
        """A page without containers yields no listings."""
        self.assertEqual(
            self.extractor.extract_from_html("<html></html>"), []
        )


class TestExtractFromRows(unittest.TestCase):
    """ListingExtractor.extract_from_rows behaviour (rendered tier)."""

    def test_rows_become_listings(self) -> None:
        """Rows from the page script are parsed like static fields."""
        extractor = ListingExtractor(_make_site())
        rows = [
            {
                "title": "Phone X",
                "priceText": "$699.99",
                "link": "/p/1",
                "image": "",
            },
            {"title": "", "priceText": "$1", "link": "/p/2", "image": ""},
        ]
        listings = extractor.extract_from_rows(rows)
        self.assertEqual(len(listings), 1)
        self.assertEqual(listings[0].price, 699.99)
        self.assertEqual(listings[0].link, "https://shop.example.com/p/1")

    def test_script_args_carry_selectors(self) -> None:
        """The page script receives the selector map and a row limit."""
        extractor = ListingExtractor(_make_site())
        selectors, limit = extractor.script_args()
        self.assertEqual(selectors["products"], ".card")
        self.assertGreaterEqual(limit, 10)


if __name__ == "__main__":
    unittest.main()
