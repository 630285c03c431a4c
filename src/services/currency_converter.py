# src/services/currency_converter.py

"""Static-rate currency conversion, symbol detection and price display."""

import logging

logger = logging.getLogger("price_scout.currency")

# Units of each currency per 1 USD
EXCHANGE_RATES: dict[str, float] = {
    "USD": 1.0,
    "INR": 83.25,
    "GBP": 0.79,
    "EUR": 0.92,
    "AUD": 1.52,
    "CAD": 1.35,
    "JPY": 149.50,
    "KRW": 1320.0,
    "CNY": 7.25,
    "BRL": 5.12,
    "MXN": 17.85,
}

CURRENCY_SYMBOLS: dict[str, str] = {
    "USD": "$",
    "INR": "₹",
    "GBP": "£",
    "EUR": "€",
    "AUD": "A$",
    "CAD": "C$",
    "JPY": "¥",
    "KRW": "₩",
    "CNY": "¥",
    "BRL": "R$",
    "MXN": "$",
}

# Rendered without decimals and with thousands separators
ZERO_DECIMAL_CURRENCIES: frozenset[str] = frozenset({"JPY", "KRW"})

# Checked in order: longer prefixed dollar forms before their
# suffixes ("CA$" before "A$") and all of them before the bare "$"
_SYMBOL_TO_CURRENCY: list[tuple[str, str]] = [
    ("CA$", "CAD"),
    ("AU$", "AUD"),
    ("MX$", "MXN"),
    ("US$", "USD"),
    ("A$", "AUD"),
    ("C$", "CAD"),
    ("R$", "BRL"),
    ("₹", "INR"),
    ("Rs", "INR"),
    ("£", "GBP"),
    ("€", "EUR"),
    ("₩", "KRW"),
    ("¥", "JPY"),
    ("$", "USD"),
]


def detect_currency(price_text: str | None, market_currency: str) -> str:
    """Infer the ISO currency of a raw price string.

    Falls back to *market_currency* when no known symbol is present.
    A bare ``$`` or ``¥`` on a market whose own currency uses that
    symbol (CAD/AUD/MXN storefronts, CNY) resolves to the market
    currency.
    """
    if not price_text:
        return market_currency
    market_symbol = CURRENCY_SYMBOLS.get(market_currency, "")
    for symbol, currency in _SYMBOL_TO_CURRENCY:
        if symbol not in price_text:
            continue
        if symbol in ("$", "¥") and market_symbol.endswith(symbol):
            return market_currency
        return currency
    return market_currency


class CurrencyConverter:
    """Convert prices between currencies via USD-denominated rates."""

    def __init__(
        self, rates: dict[str, float] | None = None,
    ) -> None:
        self.rates: dict[str, float] = dict(
            rates if rates is not None else EXCHANGE_RATES
        )

    def convert(
        self,
        price: float,
        from_currency: str | None,
        to_currency: str | None,
    ) -> float:
        """Convert *price* and round to 2 decimals.

        Returns 0 for a missing price or currency, and the original
        price (rounded) when either rate is unknown.
        """
        if not price or not from_currency or not to_currency:
            return 0.0

        source = from_currency.upper()
        target = to_currency.upper()
        if source == target:
            return round(price, 2)

        from_rate = self.rates.get(source)
        to_rate = self.rates.get(target)
        if not from_rate or not to_rate:
            logger.warning(
                "Exchange rate not found for %s or %s; "
                "passing %.2f through unconverted",
                source,
                target,
                price,
            )
            return round(price, 2)

        usd_price = price / from_rate
        return round(usd_price * to_rate, 2)

    @staticmethod
    def format_price(price: float, currency: str | None) -> str:
        """Render a price with its currency symbol, e.g. ``$999.00``."""
        if not price or not currency:
            return "N/A"
        code = currency.upper()
        symbol = CURRENCY_SYMBOLS.get(code, code)
        if code in ZERO_DECIMAL_CURRENCIES:
            return f"{symbol}{int(price + 0.5):,}"
        return f"{symbol}{price:.2f}"
