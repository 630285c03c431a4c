# src/config/settings.py

"""Central configuration for the price_scout aggregator."""

import os
from pathlib import Path

from curl_cffi.requests import BrowserTypeLiteral
from dotenv import load_dotenv

load_dotenv()


def _env_flag(name: str, default: bool = False) -> bool:
    """Read a boolean switch from the environment."""
    raw = os.getenv(name)
    if raw is None:
        return default
    return raw.strip().lower() in ("1", "true", "yes", "on")


def _env_int(name: str, default: int) -> int:
    """Read a positive integer from the environment."""
    raw = os.getenv(name, "")
    try:
        value = int(raw)
    except ValueError:
        return default
    return value if value > 0 else default


class Settings:
    """Central configuration for the price_scout aggregator."""

    # --- Deployment modes (read once at startup) ---
    APP_ENV: str = os.getenv("APP_ENV", "production").lower()
    DEMO_MODE: bool = APP_ENV == "development" or _env_flag("DEMO_MODE")
    RESOURCE_CONSTRAINED: bool = _env_flag("RESOURCE_CONSTRAINED")
    RENDERING_ENABLED: bool = (
        _env_flag("ENABLE_BROWSER", default=True)
        and not RESOURCE_CONSTRAINED
    )

    # --- Fast fetch ---
    REQUEST_TIMEOUT: int = _env_int("REQUEST_TIMEOUT", 30)
    CONSTRAINED_REQUEST_TIMEOUT: int = 5
    MAX_RETRIES: int = 2                # Attempts per transport
    RETRY_DELAY: float = 1.0            # Seconds, multiplied per attempt
    MAX_CONCURRENT_REQUESTS: int = _env_int(
        "MAX_CONCURRENT_REQUESTS", 5
    )
    CAPTCHA_KEYWORDS: list[str] = [
        "captcha",
        "verify you are human",
        "unusual traffic",
        "automated requests",
    ]

    # --- Rendered fetch ---
    NAVIGATION_TIMEOUT_MS: int = 30_000
    SELECTOR_TIMEOUT_MS: int = 10_000
    VIEWPORT: dict[str, int] = {"width": 1366, "height": 768}
    BROWSER_ARGS: list[str] = [
        "--no-sandbox",
        "--disable-setuid-sandbox",
        "--disable-dev-shm-usage",
        "--disable-accelerated-2d-canvas",
        "--no-first-run",
        "--no-zygote",
        "--disable-gpu",
    ]

    # --- Extraction & results ---
    MAX_LISTINGS_PER_SITE: int = 10
    DEFAULT_MAX_RESULTS: int = 20
    MAX_SITES_PER_QUERY: int | None = None
    COMPARE_SITES_PER_COUNTRY: int = 2
    COMPARE_TOP_LISTINGS: int = 3
    COMPARE_DEFAULT_COUNTRIES: list[str] = ["US", "IN", "GB"]
    PRICE_FILTER_CURRENCY: str = "USD"

    # --- Browser Impersonation ---
    IMPERSONATE_BROWSER: BrowserTypeLiteral = "chrome131"
    USER_AGENTS: list[str] = [
        (
            "Mozilla/5.0 (Windows NT 10.0; Win64; x64) "
            "AppleWebKit/537.36 (KHTML, like Gecko) "
            "Chrome/131.0.0.0 Safari/537.36"
        ),
        (
            "Mozilla/5.0 (Windows NT 10.0; Win64; x64) "
            "AppleWebKit/537.36 (KHTML, like Gecko) "
            "Chrome/130.0.0.0 Safari/537.36"
        ),
        (
            "Mozilla/5.0 (Macintosh; Intel Mac OS X 10_15_7) "
            "AppleWebKit/537.36 (KHTML, like Gecko) "
            "Chrome/131.0.0.0 Safari/537.36"
        ),
        (
            "Mozilla/5.0 (X11; Linux x86_64) "
            "AppleWebKit/537.36 (KHTML, like Gecko) "
            "Chrome/129.0.0.0 Safari/537.36"
        ),
        (
            "Mozilla/5.0 (Macintosh; Intel Mac OS X 14_5) "
            "AppleWebKit/605.1.15 (KHTML, like Gecko) "
            "Version/17.5 Safari/605.1.15"
        ),
    ]
    DEFAULT_HEADERS: dict[str, str] = {
        "Accept": (
            "text/html,application/xhtml+xml,"
            "application/xml;q=0.9,image/webp,*/*;q=0.8"
        ),
        "Accept-Language": "en-US,en;q=0.5",
        "DNT": "1",
        "Upgrade-Insecure-Requests": "1",
    }

    # --- Health check ---
    HEALTH_TIMEOUT: int = 10            # Seconds per site
    HEALTH_SLOW_MS: float = 5000.0

    # --- Paths ---
    BASE_DIR: Path = Path(__file__).resolve().parent.parent.parent
    LOGS_DIR: Path = BASE_DIR / "logs"

    @classmethod
    def fast_fetch_timeout(cls) -> int:
        """Return the fast-path timeout for the current deployment mode."""
        if cls.RESOURCE_CONSTRAINED:
            return cls.CONSTRAINED_REQUEST_TIMEOUT
        return cls.REQUEST_TIMEOUT
