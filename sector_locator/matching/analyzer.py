"""
Query entrypoint: which site, and which sector of it, serves a location.

Pipeline for one query against one annotated dataset:
  1. Bounding-box prefilter (falls back to the whole dataset)
  2. Cluster features into sites by rounded anchor
  3. Rank sites by distance and pick the requested rank
  4. Score every sector of that site and keep the best one
"""
import time
from dataclasses import dataclass, field
from typing import Any, Dict, Optional, Sequence

from pydantic import ValidationError

from sector_locator.core.geometry import calculate_bearing
from sector_locator.data.features import SiteFeature
from sector_locator.data.schemas import Coordinate
from sector_locator.matching.sector_scoring import score_sector_candidates
from sector_locator.matching.sites import (
    bounding_box_filter,
    cluster_sites,
    rank_sites,
    select_site,
)
from sector_locator.utils.config import LocatorConfig, get_default_config
from sector_locator.utils.error_handling import validate_features_not_empty
from sector_locator.utils.exceptions import GeometryError
from sector_locator.utils.logging_config import get_logger

logger = get_logger(__name__)


@dataclass
class AnalysisResult:
    """
    Best matching site and sector for one query point.

    ``bearing`` is measured from the query point towards the site, and
    ``distance_km`` is the site distance. Provenance fields are filled in
    by the caller that knows which data source was queried.
    """
    nearest_feature: SiteFeature
    distance_km: float
    bearing: float
    sector_azimuth: float
    sector_beamwidth: float
    deviation_angle: float
    is_inside: bool
    is_omni: bool
    search_point: Dict[str, float]
    nearest_point: Dict[str, float]
    rank: int
    total_sites: int
    source_id: str = 'unknown'
    source_name: str = 'unknown'
    custom_field: Optional[str] = None
    custom_value: Any = None
    timestamp: float = field(default_factory=time.time)

    def to_dict(self) -> Dict[str, Any]:
        """JSON-friendly view of the result."""
        feature = self.nearest_feature
        return {
            'feature_id': feature.feature_id,
            'feature_properties': dict(feature.properties),
            'distance_km': self.distance_km,
            'bearing': self.bearing,
            'sector_azimuth': self.sector_azimuth,
            'sector_beamwidth': self.sector_beamwidth,
            'deviation_angle': self.deviation_angle,
            'is_inside': self.is_inside,
            'is_omni': self.is_omni,
            'search_point': dict(self.search_point),
            'nearest_point': dict(self.nearest_point),
            'rank': self.rank,
            'total_sites': self.total_sites,
            'source_id': self.source_id,
            'source_name': self.source_name,
            'custom_field': self.custom_field,
            'custom_value': self.custom_value,
            'timestamp': self.timestamp,
        }


def validate_query_point(lat: float, lng: float) -> Coordinate:
    """
    Validate a query coordinate.

    Raises:
        GeometryError: If the coordinate is non-numeric, non-finite or out of range
    """
    try:
        return Coordinate(lat=lat, lng=lng)
    except ValidationError as e:
        raise GeometryError(f"Invalid query coordinates (lat={lat}, lng={lng})") from e


def analyze(query_lat: float,
            query_lng: float,
            features: Sequence[SiteFeature],
            rank: int = 1,
            config: Optional[LocatorConfig] = None) -> AnalysisResult:
    """
    Find the site at ``rank`` and its best facing sector for a query point.

    Args:
        query_lat: Query latitude (decimal degrees)
        query_lng: Query longitude (decimal degrees)
        features: Annotated features of one dataset
        rank: 1-based site rank (1 = nearest); clamped to the valid range
        config: Heuristic parameters (defaults when omitted)

    Returns:
        AnalysisResult for the selected site

    Raises:
        NoFeaturesError: If ``features`` is empty
        NoSuitableSiteError: If no site could be formed
        GeometryError: If the query coordinate is invalid

    Example:
        >>> result = analyze(53.3498, -6.2603, features)
        >>> result.rank, result.total_sites
        (1, 42)
    """
    config = config or get_default_config()
    validate_features_not_empty(features)
    query = validate_query_point(query_lat, query_lng)

    candidates = bounding_box_filter(features, query.lat, query.lng, config.site_search)
    sites = rank_sites(cluster_sites(candidates, query.lat, query.lng, config.site_search))
    site, safe_rank = select_site(sites, rank)

    scored = score_sector_candidates(
        site, query.lat, query.lng, config.scoring, config.sector_geometry
    )
    best = scored[0]

    result = AnalysisResult(
        nearest_feature=best.feature,
        distance_km=site.distance_km,
        bearing=calculate_bearing(query.lat, query.lng, site.anchor.lat, site.anchor.lng),
        sector_azimuth=best.azimuth,
        sector_beamwidth=best.beamwidth,
        deviation_angle=best.deviation,
        is_inside=best.is_inside,
        is_omni=best.sector.is_omni,
        search_point={'lat': query.lat, 'lng': query.lng},
        nearest_point={'lat': site.anchor.lat, 'lng': site.anchor.lng},
        rank=safe_rank,
        total_sites=len(sites),
        source_id=best.feature.source_id,
        source_name=best.feature.source_name,
    )

    if config.custom_result_field:
        result.custom_field = config.custom_result_field
        result.custom_value = best.feature.properties.get(config.custom_result_field)

    logger.info(
        "Site selected",
        rank=safe_rank,
        total_sites=len(sites),
        site=site.key,
        distance_km=round(site.distance_km, 4),
        feature_id=best.feature.feature_id,
        tier=best.tier,
    )
    return result
