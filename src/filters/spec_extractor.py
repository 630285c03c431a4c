# src/filters/spec_extractor.py

"""Pattern-based specification extraction from listing titles."""

import re

_STORAGE_RE = re.compile(
    r"(\d+)\s*(GB|TB)\b(?!\s*(?:RAM|Memory))", re.IGNORECASE
)
_RAM_RE = re.compile(r"(\d+)\s*GB\s*(RAM|Memory)", re.IGNORECASE)
_SCREEN_RE = re.compile(
    r"(\d+(?:\.\d+)?)\s*[\"”-]?\s*(inch(?:es)?)\b", re.IGNORECASE
)
_COLOR_RE = re.compile(
    r"\b(Black|White|Red|Blue|Green|Gold|Silver|Rose|Gray|Grey|"
    r"Pink|Purple|Yellow|Orange)\b",
    re.IGNORECASE,
)

_GB_PER_TB = 1024


def extract_specifications(title: str) -> dict[str, str]:
    """Pull storage, RAM, screen size and colour out of a title.

    Only the keys that matched are present, e.g.
    ``{"storage": "128GB", "color": "Black"}``.
    """
    specs: dict[str, str] = {}
    if not title:
        return specs

    storage = _STORAGE_RE.search(title)
    if storage:
        specs["storage"] = storage.group(0).strip()

    ram = _RAM_RE.search(title)
    if ram:
        specs["ram"] = ram.group(0)

    screen = _SCREEN_RE.search(title)
    if screen:
        specs["screen_size"] = screen.group(0).strip()

    color = _COLOR_RE.search(title)
    if color:
        specs["color"] = color.group(0)

    return specs


def storage_in_gb(title: str) -> int | None:
    """Storage capacity in GB (TB counted as 1024 GB), if any."""
    match = _STORAGE_RE.search(title or "")
    if not match:
        return None
    amount = int(match.group(1))
    if match.group(2).upper() == "TB":
        amount *= _GB_PER_TB
    return amount or None


def calculate_price_per_unit(title: str, price: float) -> float | None:
    """Price per GB of storage, rounded to 2 decimals."""
    capacity = storage_in_gb(title)
    if capacity is None or price <= 0:
        return None
    return round(price / capacity, 2)
