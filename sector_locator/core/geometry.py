"""
Geospatial geometry functions for sector matching.

Provides angle arithmetic plus distance and bearing calculations using the
haversine formula for great-circle distance between coordinates.
"""
import math
from typing import Tuple


# Earth's radius in meters (mean radius)
EARTH_RADIUS_M = 6371000.0

DISTANCE_UNITS = {
    "m": 1.0,
    "meters": 1.0,
    "km": 1000.0,
    "kilometers": 1000.0,
}


def normalize_angle(angle: float) -> float:
    """
    Normalize any angle to the range [0, 360).

    Args:
        angle: Angle in degrees, any magnitude or sign

    Returns:
        Equivalent angle in [0, 360)

    Example:
        >>> normalize_angle(-90)
        270.0
        >>> normalize_angle(720)
        0.0
    """
    result = ((angle % 360.0) + 360.0) % 360.0
    # Tiny negative inputs round up to exactly 360.0
    if result >= 360.0:
        return 0.0
    return result


def angular_deviation(angle1: float, angle2: float) -> float:
    """
    Calculate the shortest angular difference between two bearings.

    This accounts for the circular nature of bearings (e.g., the difference
    between 10° and 350° is 20°, not 340°).

    Args:
        angle1: First bearing in degrees
        angle2: Second bearing in degrees

    Returns:
        Absolute difference in degrees (0-180)

    Example:
        >>> angular_deviation(10, 350)
        20.0
        >>> angular_deviation(0, 180)
        180.0
    """
    diff = abs(angle1 - angle2) % 360.0

    if diff > 180:
        diff = 360.0 - diff

    return diff


def haversine_distance(lat1: float, lon1: float, lat2: float, lon2: float,
                       unit: str = "m") -> float:
    """
    Calculate great-circle distance between two points using Haversine formula.

    Args:
        lat1: Latitude of first point (decimal degrees)
        lon1: Longitude of first point (decimal degrees)
        lat2: Latitude of second point (decimal degrees)
        lon2: Longitude of second point (decimal degrees)
        unit: "m"/"meters" or "km"/"kilometers"

    Returns:
        Distance in the requested unit

    Raises:
        ValueError: If unit is not recognised

    Example:
        >>> # Distance from Dublin to Cork (Ireland)
        >>> distance = haversine_distance(53.3498, -6.2603, 51.8985, -8.4756, unit="km")
        >>> print(f"{distance:.1f} km")
        219.4 km

    References:
        https://en.wikipedia.org/wiki/Haversine_formula
    """
    if unit not in DISTANCE_UNITS:
        raise ValueError(f"Unknown distance unit '{unit}'. Must be one of: {sorted(DISTANCE_UNITS)}")

    lat1_rad = math.radians(lat1)
    lon1_rad = math.radians(lon1)
    lat2_rad = math.radians(lat2)
    lon2_rad = math.radians(lon2)

    dlat = lat2_rad - lat1_rad
    dlon = lon2_rad - lon1_rad

    a = (math.sin(dlat / 2)) ** 2 + \
        math.cos(lat1_rad) * math.cos(lat2_rad) * (math.sin(dlon / 2)) ** 2

    # Rounding can push antipodal points just past 1
    a = min(1.0, max(0.0, a))

    c = 2 * math.atan2(math.sqrt(a), math.sqrt(1 - a))

    return EARTH_RADIUS_M * c / DISTANCE_UNITS[unit]


def calculate_bearing(lat1: float, lon1: float, lat2: float, lon2: float) -> float:
    """
    Calculate initial bearing (forward azimuth) from point 1 to point 2.

    The bearing is the angle (in degrees) measured clockwise from north
    to the direction of point 2 from point 1. The bearing between
    coincident points is 0.

    Args:
        lat1: Latitude of starting point (decimal degrees)
        lon1: Longitude of starting point (decimal degrees)
        lat2: Latitude of destination point (decimal degrees)
        lon2: Longitude of destination point (decimal degrees)

    Returns:
        Bearing in degrees [0, 360), where 0° = North and 90° = East

    References:
        https://www.movable-type.co.uk/scripts/latlong.html
    """
    if lat1 == lat2 and lon1 == lon2:
        return 0.0

    lat1_rad = math.radians(lat1)
    lat2_rad = math.radians(lat2)
    dlon = math.radians(lon2 - lon1)

    y = math.sin(dlon) * math.cos(lat2_rad)
    x = math.cos(lat1_rad) * math.sin(lat2_rad) - \
        math.sin(lat1_rad) * math.cos(lat2_rad) * math.cos(dlon)

    return normalize_angle(math.degrees(math.atan2(y, x)))


def get_distance_and_bearing(lat1: float, lon1: float,
                             lat2: float, lon2: float) -> Tuple[float, float]:
    """
    Calculate both distance and bearing between two points.

    Args:
        lat1: Latitude of starting point (decimal degrees)
        lon1: Longitude of starting point (decimal degrees)
        lat2: Latitude of destination point (decimal degrees)
        lon2: Longitude of destination point (decimal degrees)

    Returns:
        Tuple of (distance_meters, bearing_degrees)
    """
    distance = haversine_distance(lat1, lon1, lat2, lon2)
    bearing = calculate_bearing(lat1, lon1, lat2, lon2)

    return distance, bearing


def is_within_sector(target_bearing: float,
                     antenna_azimuth: float,
                     beamwidth: float = 65.0) -> bool:
    """
    Check if a bearing falls within an antenna's sector.

    Args:
        target_bearing: Bearing from antenna to the target (degrees)
        antenna_azimuth: Antenna's main beam direction (degrees)
        beamwidth: Antenna's horizontal beamwidth (degrees), default 65°

    Returns:
        True if the bearing is within half a beamwidth of the azimuth

    Example:
        >>> is_within_sector(60, antenna_azimuth=45, beamwidth=65)
        True
        >>> is_within_sector(60, antenna_azimuth=225, beamwidth=65)
        False
    """
    return angular_deviation(target_bearing, antenna_azimuth) <= beamwidth / 2


def turning_angle(vertex: Tuple[float, float],
                  prev_vertex: Tuple[float, float],
                  next_vertex: Tuple[float, float]) -> float:
    """
    Interior angle at a ring vertex formed by its two neighbours.

    Args:
        vertex: (lng, lat) of the vertex
        prev_vertex: (lng, lat) of the previous ring vertex
        next_vertex: (lng, lat) of the next ring vertex

    Returns:
        Angle in degrees [0, 180]; a sharp tip gives a small value
    """
    to_prev = calculate_bearing(vertex[1], vertex[0], prev_vertex[1], prev_vertex[0])
    to_next = calculate_bearing(vertex[1], vertex[0], next_vertex[1], next_vertex[0])
    return angular_deviation(to_prev, to_next)

