"""
Attribute detection on free-form feature properties.

Site exports name their columns inconsistently (``lat``, ``Site_Latitude``,
``AZIMUTH``, ``Long``...). Each concept has an ordered list of
case-insensitive patterns; the first pattern that matches any key wins,
and within a pattern the first key in property order wins. Patterns carry
their own anchors: latitude and azimuth keys must match whole, longitude
keys only need to start with ``lon`` or end with ``lng``.
"""
import math
import re
from typing import Any, Dict, Optional, Sequence

from sector_locator.core.geometry import normalize_angle
from sector_locator.data.features import LngLat

LATITUDE_KEY_PATTERNS = (
    re.compile(r'^(site_?)?lat(itude)?$', re.IGNORECASE),
)

LONGITUDE_KEY_PATTERNS = (
    re.compile(r'^(site_?)?lon(gitude)?', re.IGNORECASE),
    re.compile(r'lng$', re.IGNORECASE),
)

AZIMUTH_KEY_PATTERNS = (
    re.compile(r'^(site_?)?(azimuth|bearing|heading|dir(ection)?|orient(ation)?)$', re.IGNORECASE),
)

# Leading numeric prefix, the way loosely typed exports store numbers ("120deg")
_NUMERIC_PREFIX = re.compile(r'^\s*[+-]?(\d+\.?\d*|\.\d+)([eE][+-]?\d+)?')


def find_property_key(properties: Optional[Dict[str, Any]],
                      patterns: Sequence[re.Pattern]) -> Optional[str]:
    """
    Return the first property key matching one of the patterns.

    Args:
        properties: Feature properties (may be None)
        patterns: Compiled patterns in priority order

    Returns:
        Matching key, or None
    """
    if not properties:
        return None
    for pattern in patterns:
        for key in properties:
            if isinstance(key, str) and pattern.search(key):
                return key
    return None


def parse_number(value: Any) -> Optional[float]:
    """
    Leniently parse a property value as a finite float.

    Numbers pass through; strings contribute their leading numeric prefix.
    Booleans, empty values and non-finite results give None.
    """
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        number = float(value)
    elif isinstance(value, str):
        match = _NUMERIC_PREFIX.match(value)
        if not match:
            return None
        number = float(match.group(0))
    else:
        return None
    return number if math.isfinite(number) else None


def explicit_center(properties: Optional[Dict[str, Any]]) -> Optional[LngLat]:
    """
    Tower position declared in the feature's attributes.

    Returns:
        LngLat when both a latitude and a longitude attribute parse to
        in-range numbers, else None
    """
    lat_key = find_property_key(properties, LATITUDE_KEY_PATTERNS)
    lng_key = find_property_key(properties, LONGITUDE_KEY_PATTERNS)
    if lat_key is None or lng_key is None:
        return None

    lat = parse_number(properties[lat_key])
    lng = parse_number(properties[lng_key])
    if lat is None or lng is None:
        return None
    if abs(lat) > 90 or abs(lng) > 180:
        return None
    return LngLat(lng, lat)


def explicit_azimuth(properties: Optional[Dict[str, Any]]) -> Optional[float]:
    """Normalized azimuth declared in the feature's attributes, or None."""
    key = find_property_key(properties, AZIMUTH_KEY_PATTERNS)
    if key is None:
        return None
    value = parse_number(properties[key])
    if value is None:
        return None
    return normalize_angle(value)
