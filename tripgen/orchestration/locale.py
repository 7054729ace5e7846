"""Free-text place name to hub code resolution."""

import re

from tripgen.adapters.catalogs import load_gazetteer

_CODE = re.compile(r"^[A-Z]{3}$")
_PAREN_CODE = re.compile(r"\(([A-Z]{3})\)")
_DASH_CODE = re.compile(r"[-–]\s*([A-Z]{3})$")
_REGION_SUFFIX = re.compile(r",\s*[a-z\s]+$")
_AIRPORT_SUFFIX = re.compile(r"\s+(airport|international|intl)$")


def normalize_place(place: str) -> str:
    """Lowercase and strip trailing ', Region' and 'Airport' qualifiers."""
    normalized = place.strip().lower()
    normalized = _REGION_SUFFIX.sub("", normalized)
    normalized = _AIRPORT_SUFFIX.sub("", normalized)
    return normalized.strip()


def resolve_hub_code(place: str | None) -> str:
    """Resolve a free-text place to a 3-letter hub code.

    First match wins:
    1. Input is already an uppercase code ("CDG")
    2. Code embedded in parentheses or after a dash ("Paris (CDG)", "Paris - CDG")
    3. Exact gazetteer match on the normalized name
    4. Gazetteer key is a substring of the input, or vice versa

    Args:
        place: Free-text place name

    Returns:
        Hub code, or "" when nothing matches
    """
    if not place:
        return ""
    stripped = place.strip()

    if _CODE.match(stripped):
        return stripped

    embedded = _PAREN_CODE.search(stripped) or _DASH_CODE.search(stripped)
    if embedded:
        return embedded.group(1)

    gazetteer = load_gazetteer()
    lowered = stripped.lower()
    normalized = normalize_place(stripped)
    if not normalized:
        return ""

    if lowered in gazetteer:
        return gazetteer[lowered]
    if normalized in gazetteer:
        return gazetteer[normalized]

    for key, code in gazetteer.items():
        if key in normalized or normalized in key:
            return code

    return ""
