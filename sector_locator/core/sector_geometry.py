"""
Sector geometry inference from polygon topology.

A sector polygon is a wedge drawn from the tower outwards, so seen from
the anchor its vertices cluster inside the covered arc and leave one large
empty gap behind the antenna. The coverage wedge is the complement of the
largest angular gap between vertex bearings.

Known inconsistency, kept on purpose: when the feature carries an explicit
azimuth attribute, that value is reported as the azimuth but the wedge
(start/end/beamwidth) is still the geometric one and is not re-centered on
it. The reported azimuth can therefore sit outside [start_angle, end_angle].
"""
from dataclasses import dataclass
from typing import List, Optional, Tuple

from sector_locator.core.geometry import (
    calculate_bearing,
    haversine_distance,
    normalize_angle,
)
from sector_locator.core.properties import explicit_azimuth
from sector_locator.data.features import LngLat, SiteFeature, coord_all, feature_centroid
from sector_locator.utils.config import SectorGeometryParams
from sector_locator.utils.error_handling import degrade_on_error
from sector_locator.utils.logging_config import get_logger

logger = get_logger(__name__)


@dataclass(frozen=True)
class SectorGeometry:
    """
    Directional coverage of one feature as seen from its anchor.

    The wedge runs clockwise from ``start_angle`` to ``end_angle``.
    Omnidirectional features always have a beamwidth of 360.
    """
    azimuth: float
    beamwidth: float
    is_omni: bool
    start_angle: float
    end_angle: float

    @classmethod
    def omni(cls, azimuth: float = 0.0) -> 'SectorGeometry':
        return cls(azimuth=azimuth, beamwidth=360.0, is_omni=True, start_angle=0.0, end_angle=360.0)

    @classmethod
    def synthetic(cls, azimuth: float, beamwidth: float) -> 'SectorGeometry':
        """Fixed-width wedge centered on an attribute azimuth."""
        half = beamwidth / 2
        return cls(
            azimuth=azimuth,
            beamwidth=beamwidth,
            is_omni=False,
            start_angle=normalize_angle(azimuth - half),
            end_angle=normalize_angle(azimuth + half),
        )


def largest_bearing_gap(bearings: List[float]) -> Tuple[float, float, float]:
    """
    Largest empty arc between circularly sorted bearings.

    Args:
        bearings: Bearings in [0, 360), any order

    Returns:
        Tuple of (gap_degrees, gap_start, gap_end): the gap runs clockwise
        from gap_start to gap_end. The first maximal gap wins ties.

    Example:
        >>> largest_bearing_gap([10, 20, 200])
        (180, 20, 200)
    """
    ordered = sorted(bearings)
    max_gap, gap_start, gap_end = 0.0, 0.0, 0.0

    for i, current in enumerate(ordered):
        following = ordered[(i + 1) % len(ordered)]
        diff = following - current
        # Last-to-first transition wraps through north
        if diff < 0:
            diff += 360
        if diff > max_gap:
            max_gap, gap_start, gap_end = diff, current, following

    return max_gap, gap_start, gap_end


def wedge_from_bearings(bearings: List[float],
                        omni_gap_threshold_deg: float = 60.0) -> Optional[Tuple[float, float, float]]:
    """
    Coverage wedge implied by a set of vertex bearings.

    Args:
        bearings: Bearings from the anchor to the outer vertices
        omni_gap_threshold_deg: Gaps smaller than this mean no direction

    Returns:
        Tuple of (start_angle, end_angle, beamwidth), or None when the
        vertices surround the anchor (omnidirectional)
    """
    max_gap, gap_start, gap_end = largest_bearing_gap(bearings)
    if max_gap < omni_gap_threshold_deg:
        return None
    # Coverage starts where the gap ends and ends where it starts
    return gap_end, gap_start, 360.0 - max_gap


def _omni_on_failure(feature, anchor, params=None) -> SectorGeometry:
    return SectorGeometry.omni()


@degrade_on_error(_omni_on_failure)
def analyze_sector_geometry(feature: SiteFeature,
                            anchor: LngLat,
                            params: Optional[SectorGeometryParams] = None) -> SectorGeometry:
    """
    Infer azimuth, beamwidth and coverage wedge of a feature.

    Args:
        feature: Feature to analyse
        anchor: Tower center of the feature's site
        params: Collapse tolerance, omni gap threshold, synthetic beamwidth

    Returns:
        SectorGeometry; an omnidirectional result if the geometry cannot be
        analysed
    """
    params = params or SectorGeometryParams()
    anchor = LngLat(float(anchor[0]), float(anchor[1]))
    attribute_azimuth = explicit_azimuth(feature.properties)

    def point_like() -> SectorGeometry:
        if attribute_azimuth is not None:
            return SectorGeometry.synthetic(attribute_azimuth, params.synthetic_beamwidth_deg)
        return SectorGeometry.omni()

    if feature.geometry_type in (None, 'Point'):
        return point_like()

    centroid = feature_centroid(feature)
    if _distance_m(anchor, centroid) < params.collapse_tolerance_m:
        # Polygon drawn as a small circle around the tower
        return point_like()

    outer = [
        c for c in coord_all(feature.geometry)
        if _distance_m(c, anchor) > params.collapse_tolerance_m
    ]
    if not outer:
        return SectorGeometry.omni(
            azimuth=calculate_bearing(anchor.lat, anchor.lng, centroid.lat, centroid.lng)
        )

    bearings = [calculate_bearing(anchor.lat, anchor.lng, c.lat, c.lng) for c in outer]
    wedge = wedge_from_bearings(bearings, params.omni_gap_threshold_deg)
    if wedge is None:
        return SectorGeometry.omni()

    start_angle, end_angle, beamwidth = wedge
    geometric_azimuth = normalize_angle(start_angle + beamwidth / 2)

    return SectorGeometry(
        azimuth=attribute_azimuth if attribute_azimuth is not None else geometric_azimuth,
        beamwidth=beamwidth,
        is_omni=False,
        start_angle=start_angle,
        end_angle=end_angle,
    )


def _distance_m(a: LngLat, b: LngLat) -> float:
    return haversine_distance(a[1], a[0], b[1], b[0])
