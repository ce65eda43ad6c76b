from __future__ import annotations

import re
from typing import Optional

BUILDING_TYPE_CONSCRIPTION = 1
BUILDING_TYPE_PROVISIONAL = 2

PROVISIONAL_PREFIX = "ev."

_WHITESPACE = re.compile(r"\s+")


def clean_value(value: Optional[object]) -> Optional[str]:
    if value is None:
        return None
    text = str(value).strip()
    return text or None


def fold(value: Optional[str]) -> str:
    """Return a case-insensitive key for sorting and loose comparisons."""
    if not value:
        return ""
    return _WHITESPACE.sub(" ", value.strip()).casefold()


def compose_street_number(value: Optional[object], letter: Optional[str]) -> Optional[str]:
    number = clean_value(value)
    suffix = clean_value(letter)
    if number is None and suffix is None:
        return None
    return (number or "") + (suffix or "")


def compose_house_number(
    number: Optional[object],
    street_number: Optional[str],
    building_type: int,
) -> str:
    """Build the display house number of a registry address point.

    Conscription-numbered buildings read ``123`` or ``123/4a`` when the
    address also carries a street number; provisional (evidence) numbered
    buildings read ``ev.123``.
    """
    base = clean_value(number)
    if base is None:
        raise ValueError("building number is required")
    if building_type == BUILDING_TYPE_CONSCRIPTION:
        if street_number:
            return f"{base}/{street_number}"
        return base
    if building_type == BUILDING_TYPE_PROVISIONAL:
        return f"{PROVISIONAL_PREFIX}{base}"
    raise ValueError(f"unsupported building type {building_type!r}")


def build_is_in(city: Optional[str], region: Optional[str], country: Optional[str]) -> Optional[str]:
    parts = [part for part in (clean_value(city), clean_value(region), clean_value(country)) if part]
    if not parts:
        return None
    return ", ".join(parts)
