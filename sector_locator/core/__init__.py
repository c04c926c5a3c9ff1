"""
Core geometric inference for sector matching.

Contains angle/distance primitives, the vertex frequency index, tower
center inference and sector wedge analysis.
"""
from sector_locator.core.geometry import (
    normalize_angle,
    angular_deviation,
    haversine_distance,
    calculate_bearing,
    get_distance_and_bearing,
    is_within_sector,
    EARTH_RADIUS_M,
)
from sector_locator.core.frequency_index import CoordinateFrequencyIndex
from sector_locator.core.tower_center import (
    infer_tower_center,
    infer_tower_center_with_strategy,
    annotate_features,
)
from sector_locator.core.sector_geometry import (
    SectorGeometry,
    analyze_sector_geometry,
)

__all__ = [
    'normalize_angle',
    'angular_deviation',
    'haversine_distance',
    'calculate_bearing',
    'get_distance_and_bearing',
    'is_within_sector',
    'EARTH_RADIUS_M',
    'CoordinateFrequencyIndex',
    'infer_tower_center',
    'infer_tower_center_with_strategy',
    'annotate_features',
    'SectorGeometry',
    'analyze_sector_geometry',
]
