from __future__ import annotations

import logging
import re
from urllib.parse import quote

from geo_engine.models import GeoPoint

logger = logging.getLogger(__name__)

_DECIMAL = r"(-?\d+\.\d+)"
_LINK_PATTERNS = (
    re.compile(rf"@{_DECIMAL},{_DECIMAL}"),
    re.compile(rf"[?&]q={_DECIMAL},{_DECIMAL}"),
    re.compile(rf"destination={_DECIMAL},{_DECIMAL}"),
    re.compile(rf"{_DECIMAL}[,|/ ]+{_DECIMAL}"),
)

DIRECTIONS_URL = "https://www.google.com/maps/dir/?api=1&destination={lat},{lng}"
SEARCH_URL = "https://www.google.com/maps/search/?api=1&query={query}"


def parse_maps_link(link: str | None) -> GeoPoint | None:
    """Extract coordinates from a Google Maps URL.

    Tries the ``@lat,lng`` viewport form, then ``q=``, then ``destination=``
    and finally any two consecutive decimals in the URL.
    """
    if not link:
        return None
    for pattern in _LINK_PATTERNS:
        match = pattern.search(link)
        if match is None:
            continue
        try:
            return GeoPoint(lat=float(match.group(1)), lng=float(match.group(2)))
        except ValueError:
            logger.warning("maps_link_parse_failed", extra={"component": "geo_engine", "link": link})
            return None
    return None


def directions_url(
    *,
    point: GeoPoint | None,
    maps_link: str | None,
    name: str,
    address: str,
) -> str:
    if point is not None:
        return DIRECTIONS_URL.format(lat=point.lat, lng=point.lng)
    if maps_link:
        return maps_link
    return SEARCH_URL.format(query=quote(f"{name} {address}", safe=""))
