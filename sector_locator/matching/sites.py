"""
Site clustering and ranking.

Features whose anchors round to the same 4-decimal coordinate (~11 m) are
treated as one physical site. Sites are ranked by great-circle distance to
the query point and selected by 1-based rank.
"""
import math
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Sequence, Tuple

from sector_locator.core.geometry import haversine_distance
from sector_locator.data.features import LngLat, SiteFeature, coord_all, feature_centroid
from sector_locator.utils.config import SiteSearchParams
from sector_locator.utils.error_handling import GEOMETRY_ERRORS
from sector_locator.utils.exceptions import NoSuitableSiteError
from sector_locator.utils.logging_config import get_logger

logger = get_logger(__name__)


@dataclass
class Site:
    """
    A cluster of features sharing one physical anchor.

    Attributes:
        key: Rounded "lat,lng" clustering key
        anchor: Reference point, the anchor of the first member seen
        distance_km: Great-circle distance from the query point
        members: Features of the site, in input order
    """
    key: str
    anchor: LngLat
    distance_km: float
    members: List[SiteFeature] = field(default_factory=list)


@dataclass(frozen=True)
class BoundingBox:
    min_lat: float
    max_lat: float
    min_lng: float
    max_lng: float

    def contains(self, position: LngLat) -> bool:
        return (self.min_lat <= position.lat <= self.max_lat
                and self.min_lng <= position.lng <= self.max_lng)


def query_window(lat: float, lng: float, params: Optional[SiteSearchParams] = None) -> BoundingBox:
    """
    Lat/lng window around a query point.

    The longitude half-width grows towards the poles to account for
    meridian convergence, capped by ``min_lng_scale``.
    """
    params = params or SiteSearchParams()
    lat_threshold = params.lat_window_deg
    lng_threshold = params.lat_window_deg / max(params.min_lng_scale, math.cos(math.radians(lat)))
    return BoundingBox(
        min_lat=lat - lat_threshold,
        max_lat=lat + lat_threshold,
        min_lng=lng - lng_threshold,
        max_lng=lng + lng_threshold,
    )


def _prefilter_position(feature: SiteFeature) -> Optional[LngLat]:
    if feature.anchor is not None:
        return feature.anchor
    try:
        return feature_centroid(feature)
    except GEOMETRY_ERRORS:
        return None


def bounding_box_filter(features: Sequence[SiteFeature],
                        lat: float,
                        lng: float,
                        params: Optional[SiteSearchParams] = None) -> List[SiteFeature]:
    """
    Cheap spatial prefilter ahead of exact distance ranking.

    Args:
        features: Annotated features of one dataset
        lat: Query latitude
        lng: Query longitude
        params: Window size parameters

    Returns:
        Features whose anchor (or centroid, lacking one) lies in the query
        window; the whole input when nothing does, so a very distant query
        still gets a nearest site.
    """
    window = query_window(lat, lng, params)
    candidates = []
    for feature in features:
        position = _prefilter_position(feature)
        if position is not None and window.contains(position):
            candidates.append(feature)

    if not candidates:
        logger.info("No features in query window, ranking the full dataset", features=len(features))
        return list(features)
    return candidates


def _cluster_position(feature: SiteFeature) -> Optional[LngLat]:
    if feature.anchor is not None:
        return feature.anchor
    coords = coord_all(feature.geometry)
    if coords:
        return coords[0]
    try:
        return feature_centroid(feature)
    except GEOMETRY_ERRORS:
        return None


def site_key(position: LngLat, precision: int = 4) -> str:
    """Clustering key of an anchor: "lat,lng" rounded to ``precision`` decimals."""
    # Exact binary half-way values round to even, so a key can differ in the
    # last digit from one made by a half-up formatter. Adding 0.0 turns -0.0
    # into 0.0 so that "-0.0000" never splits a site.
    lat = round(position.lat, precision) + 0.0
    lng = round(position.lng, precision) + 0.0
    return f"{lat:.{precision}f},{lng:.{precision}f}"


def cluster_sites(features: Sequence[SiteFeature],
                  lat: float,
                  lng: float,
                  params: Optional[SiteSearchParams] = None) -> List[Site]:
    """
    Group features into sites by rounded anchor.

    The first feature seen for a key fixes the site's reference point and
    its distance (km) to the query point.

    Returns:
        Sites in order of first appearance
    """
    params = params or SiteSearchParams()
    sites: Dict[str, Site] = {}
    skipped = 0

    for feature in features:
        position = _cluster_position(feature)
        if position is None:
            skipped += 1
            continue

        key = site_key(position, params.cluster_precision)
        site = sites.get(key)
        if site is None:
            site = Site(
                key=key,
                anchor=position,
                distance_km=haversine_distance(lat, lng, position.lat, position.lng, unit="km"),
            )
            sites[key] = site
        site.members.append(feature)

    if skipped:
        logger.warning("Features without coordinates skipped", skipped=skipped)

    return list(sites.values())


def rank_sites(sites: Sequence[Site]) -> List[Site]:
    """Sites sorted by ascending distance; equal distances keep input order."""
    return sorted(sites, key=lambda site: site.distance_km)


def clamp_rank(rank: int, total_sites: int) -> int:
    """Clamp a 1-based rank into [1, total_sites]."""
    return max(1, min(int(rank), total_sites))


def select_site(ranked_sites: Sequence[Site], rank: int = 1) -> Tuple[Site, int]:
    """
    Pick the site at a 1-based rank.

    Args:
        ranked_sites: Output of rank_sites
        rank: Requested rank; clamped to the available range

    Returns:
        Tuple of (site, effective rank)

    Raises:
        NoSuitableSiteError: If there are no sites at all
    """
    if not ranked_sites:
        raise NoSuitableSiteError()
    safe_rank = clamp_rank(rank, len(ranked_sites))
    return ranked_sites[safe_rank - 1], safe_rank
