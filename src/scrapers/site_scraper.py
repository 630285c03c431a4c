# src/scrapers/site_scraper.py

"""Per-site fetch strategy: fast fetch, rendered fetch, degraded backfill."""

import asyncio
import enum
import logging
import random
import time
from typing import Any
from urllib.parse import quote

import cloudscraper  # type: ignore[import-untyped]
from curl_cffi import requests as curl_requests

from src.config.settings import Settings
from src.models.listing import RawListing, SiteConfig
from src.models.search import SiteFetchResult
from src.scrapers.browser_session import (
    BrowserSession,
    get_browser_session,
)
from src.scrapers.extractor import (
    RENDERED_EXTRACT_SCRIPT,
    ListingExtractor,
)
from src.scrapers.placeholder_listings import (
    generate_placeholder_listings,
)


class FetchState(enum.Enum):
    """States of the per-site fetch state machine."""

    FAST = "fast"
    RENDERED = "rendered"
    DEGRADED = "degraded"
    DONE = "none"


class SiteScraper:
    """Run the fast → rendered → degraded fetch sequence for one site.

    Any transport, parse or timeout error inside a state counts as
    "zero listings" for that state and moves the machine forward.
    """

    # Cloudflare challenge page markers (checked before keyword scan)
    _CF_CHALLENGE_MARKERS: list[str] = [
        "challenges.cloudflare.com",
        "cdn-cgi/challenge-platform",
        "just a moment",
        "cf-turnstile",
        "cf_chl_opt",
    ]

    def __init__(
        self,
        site: SiteConfig,
        browser_session: BrowserSession | None = None,
    ) -> None:
        self.site = site
        self.logger = logging.getLogger(
            f"price_scout.site.{site.name.lower().replace(' ', '_')}"
        )
        self.settings = Settings()
        self.extractor = ListingExtractor(site)
        self.session = curl_requests.Session(
            impersonate=self.settings.IMPERSONATE_BROWSER
        )
        self._browser_session = browser_session
        self._request_timeout: int = self.settings.fast_fetch_timeout()
        self.last_error: str | None = None

    # ── Helpers ──────────────────────────────────────────

    def _random_user_agent(self) -> str:
        """Pick a user agent from the configured pool."""
        return random.choice(self.settings.USER_AGENTS)

    def search_url(self, query: str) -> str:
        """Return the site's search URL with *query* percent-encoded."""
        return self.site.build_search_url(quote(query, safe=""))

    def _note_error(self, stage: str, exc: BaseException) -> None:
        """Log a swallowed stage failure and remember it for the report."""
        self.last_error = f"{stage}: {exc}"
        self.logger.warning(
            "[%s] %s failed: %s",
            self.site.name,
            stage,
            exc,
            exc_info=True,
        )

    def _validate_response(self, text: str) -> bool:
        """Reject Cloudflare challenge pages and CAPTCHA walls."""
        lower = text.lower()
        for marker in self._CF_CHALLENGE_MARKERS:
            if marker in lower:
                self.logger.warning(
                    "[%s] Cloudflare challenge detected (marker: '%s')",
                    self.site.name,
                    marker,
                )
                return False

        # Skip the keyword scan on content-rich pages (false positives)
        has_body_content = "<body" in lower and len(text) > 5000
        if not has_body_content:
            for keyword in self.settings.CAPTCHA_KEYWORDS:
                if keyword in lower:
                    self.logger.warning(
                        "[%s] CAPTCHA keyword '%s' detected",
                        self.site.name,
                        keyword,
                    )
                    return False
        return True

    # ── FastFetch ────────────────────────────────────────

    def _fetch_html(self, url: str) -> str | None:
        """GET with retries via curl_cffi, then a cloudscraper attempt."""
        headers: dict[str, str] = {
            **self.settings.DEFAULT_HEADERS,
            "User-Agent": self._random_user_agent(),
            "Referer": self.site.base_url,
        }
        for attempt in range(self.settings.MAX_RETRIES):
            try:
                resp = self.session.get(
                    url,
                    headers=headers,
                    timeout=self._request_timeout,
                )
                if resp.status_code == 200:
                    if self._validate_response(resp.text):
                        return str(resp.text)
                else:
                    self.logger.warning(
                        "[%s] HTTP %d on attempt %d",
                        self.site.name,
                        resp.status_code,
                        attempt + 1,
                    )
            except Exception as exc:
                self.last_error = f"fast fetch: {exc}"
                self.logger.warning(
                    "[%s] Request error on attempt %d: %s",
                    self.site.name,
                    attempt + 1,
                    exc,
                    exc_info=True,
                )
            if attempt + 1 < self.settings.MAX_RETRIES:
                time.sleep(self.settings.RETRY_DELAY * (attempt + 1))

        # Fallback: cloudscraper (JS challenge solver)
        self.logger.info(
            "[%s] curl_cffi exhausted, falling back to cloudscraper",
            self.site.name,
        )
        try:
            _cs: Any = cloudscraper
            scraper: Any = _cs.create_scraper()
            fallback_resp: Any = scraper.get(
                url,
                headers=headers,
                timeout=self._request_timeout,
            )
            if fallback_resp.status_code == 200:
                text = str(fallback_resp.text)
                if self._validate_response(text):
                    return text
        except Exception as exc:
            self._note_error("cloudscraper fallback", exc)
        return None

    def fast_fetch(self, query: str) -> list[RawListing]:
        """Fetch the static search page and extract listings from it."""
        url = self.search_url(query)
        self.logger.info(
            "[%s] Fast fetch: %s", self.site.name, url
        )
        try:
            html = self._fetch_html(url)
            if not html:
                return []
            return self.extractor.extract_from_html(html)
        except Exception as exc:
            self._note_error("fast fetch", exc)
            return []

    # ── RenderedFetch ────────────────────────────────────

    def rendering_available(self) -> bool:
        """Whether the deployment allows the rendered-fetch tier."""
        return (
            self.settings.RENDERING_ENABLED
            and not self.settings.RESOURCE_CONSTRAINED
        )

    async def rendered_fetch(self, query: str) -> list[RawListing]:
        """Render the search page in the shared browser and extract."""
        url = self.search_url(query)
        self.logger.info(
            "[%s] Rendered fetch: %s", self.site.name, url
        )
        session = self._browser_session or get_browser_session()
        page: Any = None
        try:
            page = await session.new_page(self._random_user_agent())
            await page.goto(
                url,
                wait_until="networkidle",
                timeout=self.settings.NAVIGATION_TIMEOUT_MS,
            )
            try:
                await page.wait_for_selector(
                    self.site.selectors.products,
                    timeout=self.settings.SELECTOR_TIMEOUT_MS,
                )
            except Exception:
                self.logger.warning(
                    "[%s] No listings for selector %s",
                    self.site.name,
                    self.site.selectors.products,
                )
                return []
            rows: list[dict[str, Any]] = await page.evaluate(
                RENDERED_EXTRACT_SCRIPT,
                self.extractor.script_args(),
            )
            return self.extractor.extract_from_rows(rows or [])
        except Exception as exc:
            self._note_error("rendered fetch", exc)
            return []
        finally:
            if page is not None:
                try:
                    await page.context.close()
                except Exception as exc:
                    self.logger.debug(
                        "[%s] Page close failed: %s", self.site.name, exc
                    )

    # ── State machine ────────────────────────────────────

    async def run(self, query: str) -> SiteFetchResult:
        """Drive the fetch state machine to a terminal state."""
        start = time.monotonic()
        self.last_error = None
        listings: list[RawListing] = []
        state = FetchState.FAST
        terminal = FetchState.DONE

        while state is not FetchState.DONE:
            if state is FetchState.FAST:
                listings = await asyncio.to_thread(self.fast_fetch, query)
                if listings:
                    terminal = FetchState.FAST
                    state = FetchState.DONE
                elif self.rendering_available():
                    self.logger.info(
                        "[%s] Fast fetch empty, trying rendered fetch",
                        self.site.name,
                    )
                    state = FetchState.RENDERED
                else:
                    state = FetchState.DEGRADED
            elif state is FetchState.RENDERED:
                listings = await self.rendered_fetch(query)
                if listings:
                    terminal = FetchState.RENDERED
                    state = FetchState.DONE
                else:
                    state = FetchState.DEGRADED
            else:
                if self.settings.DEMO_MODE:
                    listings = generate_placeholder_listings(
                        self.site, query
                    )
                    terminal = FetchState.DEGRADED
                state = FetchState.DONE

        elapsed_ms = (time.monotonic() - start) * 1000
        self.logger.info(
            "[%s] Found %d listings via %s (%.0fms)",
            self.site.name,
            len(listings),
            terminal.value,
            elapsed_ms,
        )
        return SiteFetchResult(
            site=self.site.name,
            listings=listings,
            strategy=terminal.value,
            error=None if listings else (
                self.last_error or "no listings found"
            ),
            elapsed_ms=elapsed_ms,
        )
