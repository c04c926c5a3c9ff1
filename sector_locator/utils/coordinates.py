"""
Free-text coordinate parsing.

Recognises "lat, lng" / "lat lng" input. Anything else is reported as no
match (None) so the caller can hand the text to an external geocoder.
"""
import re
from typing import NamedTuple, Optional

_COORDINATE_PAIR = re.compile(r'^(-?\d+(\.\d+)?)[,\s]+(-?\d+(\.\d+)?)$')


class LatLng(NamedTuple):
    """A parsed query coordinate."""
    lat: float
    lng: float


def _in_range(lat: float, lng: float) -> bool:
    return abs(lat) <= 90 and abs(lng) <= 180


def parse_coordinate_string(text: str, lenient: bool = False) -> Optional[LatLng]:
    """
    Parse a coordinate pair typed by a user.

    Args:
        text: Input such as "53.3498, -6.2603" or "53.3498 -6.2603"
        lenient: Also accept any two comma separated float values
            ("+53.3498 , -6.26e0"), still range checked

    Returns:
        LatLng, or None when the text is not an in-range coordinate pair

    Example:
        >>> parse_coordinate_string("53.3498, -6.2603")
        LatLng(lat=53.3498, lng=-6.2603)
        >>> parse_coordinate_string("Dublin") is None
        True
    """
    if not isinstance(text, str):
        return None
    stripped = text.strip()

    match = _COORDINATE_PAIR.match(stripped)
    if match:
        lat, lng = float(match.group(1)), float(match.group(3))
        if _in_range(lat, lng):
            return LatLng(lat, lng)

    if lenient and ',' in stripped:
        parts = [part.strip() for part in stripped.split(',')]
        if len(parts) == 2:
            try:
                lat, lng = float(parts[0]), float(parts[1])
            except ValueError:
                return None
            if _in_range(lat, lng):
                return LatLng(lat, lng)

    return None
