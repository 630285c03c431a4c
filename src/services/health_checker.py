# src/services/health_checker.py

"""Connectivity health checker for catalog sites."""

import asyncio
import logging
import random
import time
from dataclasses import dataclass

from curl_cffi import requests as curl_requests

from src.config.settings import Settings
from src.config.sites import SITES_BY_COUNTRY, get_sites_for_country
from src.models.listing import SiteConfig

logger = logging.getLogger("price_scout.health")


@dataclass
class HealthResult:
    """Result of a single site health check."""

    site: str
    country: str
    status: str  # "ok", "slow", "down"
    latency_ms: float
    message: str


def probe_site(site: SiteConfig) -> HealthResult:
    """Probe one site's homepage for connectivity."""
    start = time.monotonic()
    try:
        session = curl_requests.Session(
            impersonate=Settings.IMPERSONATE_BROWSER
        )
        resp = session.get(
            site.base_url,
            headers={
                **Settings.DEFAULT_HEADERS,
                "User-Agent": random.choice(Settings.USER_AGENTS),
            },
            timeout=Settings.HEALTH_TIMEOUT,
        )
        elapsed_ms = (time.monotonic() - start) * 1000

        if resp.status_code != 200:
            return HealthResult(
                site=site.name,
                country=site.country,
                status="down",
                latency_ms=elapsed_ms,
                message=f"HTTP {resp.status_code}",
            )

        if elapsed_ms > Settings.HEALTH_SLOW_MS:
            return HealthResult(
                site=site.name,
                country=site.country,
                status="slow",
                latency_ms=elapsed_ms,
                message="High latency",
            )

        return HealthResult(
            site=site.name,
            country=site.country,
            status="ok",
            latency_ms=elapsed_ms,
            message="",
        )

    except Exception as exc:
        elapsed_ms = (time.monotonic() - start) * 1000
        return HealthResult(
            site=site.name,
            country=site.country,
            status="down",
            latency_ms=elapsed_ms,
            message=str(exc)[:80],
        )


class HealthChecker:
    """Runs concurrent health probes against catalog sites."""

    def __init__(self, country: str | None = None) -> None:
        if country:
            self.sites = get_sites_for_country(country)
        else:
            self.sites = [
                site
                for sites in SITES_BY_COUNTRY.values()
                for site in sites
            ]

    async def check_all(self) -> list[HealthResult]:
        """Probe every selected site concurrently."""
        tasks = [
            asyncio.to_thread(probe_site, site)
            for site in self.sites
        ]
        results: list[HealthResult] = list(
            await asyncio.gather(*tasks)
        )
        for r in results:
            logger.info(
                "Health check %s (%s): %s (%.0fms) %s",
                r.site,
                r.country,
                r.status,
                r.latency_ms,
                r.message,
            )
        return results
