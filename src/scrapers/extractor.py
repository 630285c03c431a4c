# src/scrapers/extractor.py

"""Selector-driven listing extraction from static HTML or a live page."""

import logging
import re
from typing import Any
from urllib.parse import urljoin

from bs4 import BeautifulSoup, Tag

from src.config.settings import Settings
from src.config.sites import get_currency_for_country
from src.models.listing import RawListing, SiteConfig
from src.services.currency_converter import detect_currency

logger = logging.getLogger("price_scout.extractor")

_IMAGE_ATTRS: tuple[str, ...] = ("src", "data-src", "data-lazy-src")

# Runs inside the page; mirrors the static alternative-selector rules
# and returns raw strings so parsing stays on the Python side.
RENDERED_EXTRACT_SCRIPT = """
([selectors, limit]) => {
  const split = (sel) => (sel || '').split(',').map(s => s.trim()).filter(Boolean);
  const firstText = (el, sel) => {
    for (const s of split(sel)) {
      const found = el.querySelector(s);
      const text = found ? (found.textContent || '').trim() : '';
      if (text) return text;
    }
    return '';
  };
  const firstAttr = (el, sel, attrs) => {
    for (const s of split(sel)) {
      const found = el.querySelector(s);
      if (!found) continue;
      for (const a of attrs) {
        const v = found.getAttribute(a);
        if (v && !v.startsWith('data:')) return v;
      }
    }
    return '';
  };
  const rows = [];
  for (const el of document.querySelectorAll(selectors.products)) {
    rows.push({
      title: firstText(el, selectors.title),
      priceText: firstText(el, selectors.price),
      link: firstAttr(el, selectors.link, ['href']),
      image: firstAttr(el, selectors.image, ['src', 'data-src', 'data-lazy-src']),
    });
    if (rows.length >= limit) break;
  }
  return rows;
}
"""


def split_selectors(selector: str | None) -> list[str]:
    """Split a comma-separated selector list into its alternatives."""
    if not selector:
        return []
    return [part.strip() for part in selector.split(",") if part.strip()]


def parse_price(text: str | None) -> float:
    """Extract a numeric price from text like ``'₹1,29,999.00'``.

    Handles ``1.299,00`` style decimals; returns 0.0 when no number
    can be found.
    """
    if not text:
        return 0.0
    cleaned = re.sub(r"[^\d.,]", " ", text).strip()
    match = re.search(r"\d[\d.,]*", cleaned)
    if not match:
        return 0.0
    number = match.group(0).rstrip(".,")
    if "," in number and "." in number:
        if number.rfind(",") > number.rfind("."):
            number = number.replace(".", "").replace(",", ".")
        else:
            number = number.replace(",", "")
    elif "," in number:
        head, _, tail = number.rpartition(",")
        # "12,99" is a decimal comma; "1,299" groups thousands
        if len(tail) == 2 and "," not in head:
            number = f"{head}.{tail}"
        else:
            number = number.replace(",", "")
    elif number.count(".") > 1:
        number = number.replace(".", "")
    try:
        return float(number)
    except ValueError:
        return 0.0


def resolve_url(href: str | None, base_url: str) -> str:
    """Make a root-relative or bare relative URL absolute."""
    if not href:
        return ""
    href = href.strip()
    if href.startswith(("http://", "https://")):
        return href
    return urljoin(base_url.rstrip("/") + "/", href)


class ListingExtractor:
    """Apply a site's selector map to produce ``RawListing`` records."""

    def __init__(self, site: SiteConfig) -> None:
        self.site = site
        self.market_currency = get_currency_for_country(site.country)
        self.limit = Settings.MAX_LISTINGS_PER_SITE

    # ── Field resolution (static) ────────────────────────

    @staticmethod
    def _first_text(container: Tag, selector: str) -> str:
        """Text of the first alternative selector yielding non-empty text."""
        for alternative in split_selectors(selector):
            found = container.select_one(alternative)
            if found is None:
                continue
            text = found.get_text(" ", strip=True)
            if text:
                return text
        return ""

    @staticmethod
    def _first_attr(
        container: Tag,
        selector: str,
        attrs: tuple[str, ...],
    ) -> str:
        """First usable attribute value across alternative selectors."""
        for alternative in split_selectors(selector):
            found = container.select_one(alternative)
            if found is None:
                continue
            for attr in attrs:
                value = found.get(attr)
                if isinstance(value, list):
                    value = " ".join(value)
                if value and not value.startswith("data:"):
                    return str(value)
        return ""

    # ── Listing assembly (shared by both tiers) ──────────

    def build_listing(
        self,
        title: str,
        price_text: str,
        href: str,
        image_src: str,
    ) -> RawListing | None:
        """Assemble a listing, or ``None`` when a required field is missing."""
        title = " ".join(title.split())
        price = parse_price(price_text)
        link = resolve_url(href, self.site.base_url)
        if not title or price <= 0 or not link:
            return None
        return RawListing(
            title=title,
            price=price,
            currency=detect_currency(price_text, self.market_currency),
            link=link,
            source=self.site.name,
            image=resolve_url(image_src, self.site.base_url) or None,
        )

    # ── Static tier ──────────────────────────────────────

    def extract_from_html(self, html: str) -> list[RawListing]:
        """Parse fetched HTML with BeautifulSoup and extract listings."""
        soup = BeautifulSoup(html, "lxml")
        return self.extract_from_soup(soup)

    def extract_from_soup(self, soup: BeautifulSoup) -> list[RawListing]:
        """Extract up to ``MAX_LISTINGS_PER_SITE`` listings from a document."""
        selectors = self.site.selectors
        listings: list[RawListing] = []
        dropped = 0
        for container in soup.select(selectors.products):
            if len(listings) >= self.limit:
                break
            try:
                listing = self.build_listing(
                    title=self._first_text(container, selectors.title),
                    price_text=self._first_text(
                        container, selectors.price
                    ),
                    href=self._first_attr(
                        container, selectors.link, ("href",)
                    ),
                    image_src=self._first_attr(
                        container, selectors.image, _IMAGE_ATTRS
                    ),
                )
            except Exception as exc:
                logger.warning(
                    "[%s] Error parsing listing element: %s",
                    self.site.name,
                    exc,
                )
                listing = None
            if listing is None:
                dropped += 1
                continue
            listings.append(listing)

        if dropped:
            logger.debug(
                "[%s] Dropped %d incomplete listing containers",
                self.site.name,
                dropped,
            )
        return listings

    # ── Rendered tier ────────────────────────────────────

    def extract_from_rows(
        self, rows: list[dict[str, Any]],
    ) -> list[RawListing]:
        """Build listings from rows returned by ``RENDERED_EXTRACT_SCRIPT``."""
        listings: list[RawListing] = []
        for row in rows:
            if len(listings) >= self.limit:
                break
            listing = self.build_listing(
                title=str(row.get("title") or ""),
                price_text=str(row.get("priceText") or ""),
                href=str(row.get("link") or ""),
                image_src=str(row.get("image") or ""),
            )
            if listing is not None:
                listings.append(listing)
        return listings

    def script_args(self) -> list[Any]:
        """Arguments passed to ``RENDERED_EXTRACT_SCRIPT`` in the page."""
        selectors = self.site.selectors
        return [
            {
                "products": selectors.products,
                "title": selectors.title,
                "price": selectors.price,
                "link": selectors.link,
                "image": selectors.image,
            },
            # Over-fetch: incomplete rows are dropped on this side
            self.limit * 3,
        ]
