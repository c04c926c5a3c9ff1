"""
Shared fixtures: small synthetic site layouts with known geometry.

Positions are built in GeoJSON order ([lng, lat]). Longitude offsets are
scaled by 1/cos(lat) so that bearings measured from the origin come out
at the requested angle.
"""
import math

import pytest

from sector_locator.data.features import SiteFeature


def offset(lat, lng, bearing_deg, distance_deg):
    """Position ``distance_deg`` (degrees of latitude) away along a bearing."""
    theta = math.radians(bearing_deg)
    return [
        lng + distance_deg * math.sin(theta) / math.cos(math.radians(lat)),
        lat + distance_deg * math.cos(theta),
    ]


def wedge_feature(lat, lng, azimuth, beamwidth=60.0, radius=0.01, properties=None):
    """Sector polygon drawn from the tower tip, tip first."""
    tip = [lng, lat]
    half = beamwidth / 2
    ring = [
        tip,
        offset(lat, lng, azimuth - half, radius),
        offset(lat, lng, azimuth, radius),
        offset(lat, lng, azimuth + half, radius),
        tip,
    ]
    return SiteFeature(
        geometry={'type': 'Polygon', 'coordinates': [ring]},
        properties=dict(properties or {}),
    )


def point_feature(lat, lng, properties=None):
    return SiteFeature(
        geometry={'type': 'Point', 'coordinates': [lng, lat]},
        properties=dict(properties or {}),
    )


def hexagon_feature(lat, lng, radius=0.002, properties=None):
    """Regular hexagon centered on (lat, lng), the way omni cells are drawn."""
    ring = [offset(lat, lng, angle, radius) for angle in range(0, 360, 60)]
    ring.append(ring[0])
    return SiteFeature(
        geometry={'type': 'Polygon', 'coordinates': [ring]},
        properties=dict(properties or {}),
    )


@pytest.fixture
def make_wedge():
    return wedge_feature


@pytest.fixture
def make_point():
    return point_feature


@pytest.fixture
def make_hexagon():
    return hexagon_feature


@pytest.fixture
def three_sector_site():
    """One tower at (53.35, -6.26) with sectors at 0, 120 and 240 degrees."""
    return [
        wedge_feature(53.35, -6.26, azimuth, properties={'cell_name': f"S{i + 1}"})
        for i, azimuth in enumerate((0, 120, 240))
    ]
