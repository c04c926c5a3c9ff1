"""
Sector candidate scoring.

Within the selected site every member feature is scored against the query
point (lower is better). The base score is the angular deviation between
the sector azimuth and the site-to-query bearing; exactly one tier bonus is
then subtracted:

    inside the polygon        -10000
    near-field (< 30 m)       -5000
    inside the beam           -2000
    back/side lobe            none

Tiers are far enough apart that a better tier always wins regardless of
deviation. A final -10 favours features carrying an explicit azimuth
attribute over ones whose azimuth had to be inferred.
"""
from dataclasses import dataclass
from typing import List, Optional

from shapely.geometry import Point, shape

from sector_locator.core.geometry import (
    angular_deviation,
    get_distance_and_bearing,
    is_within_sector,
)
from sector_locator.core.properties import explicit_azimuth
from sector_locator.core.sector_geometry import SectorGeometry, analyze_sector_geometry
from sector_locator.data.features import SiteFeature
from sector_locator.matching.sites import Site
from sector_locator.utils.config import ScoringParams, SectorGeometryParams
from sector_locator.utils.error_handling import degrade_on_error
from sector_locator.utils.logging_config import get_logger

logger = get_logger(__name__)

TIER_INSIDE = 'inside'
TIER_NEAR_FIELD = 'near_field'
TIER_IN_BEAM = 'in_beam'
TIER_OUT_OF_BEAM = 'out_of_beam'


@dataclass
class SectorCandidate:
    """One member feature of a site evaluated against the query point."""
    feature: SiteFeature
    sector: SectorGeometry
    deviation: float
    is_inside: bool
    is_in_beam: bool
    has_explicit_azimuth: bool
    tier: str
    score: float

    @property
    def azimuth(self) -> float:
        return self.sector.azimuth

    @property
    def beamwidth(self) -> float:
        return self.sector.beamwidth


@degrade_on_error(False)
def point_in_feature(feature: SiteFeature, lng: float, lat: float) -> bool:
    """
    Whether a point lies strictly inside a polygonal feature.

    Non-polygonal features are never "inside"; invalid geometry counts as
    not containing the point.
    """
    if not feature.is_polygonal:
        return False
    return bool(shape(feature.geometry).contains(Point(lng, lat)))


def score_candidate(deviation: float,
                    is_inside: bool,
                    is_near_field: bool,
                    is_in_beam: bool,
                    has_explicit_azimuth: bool,
                    params: Optional[ScoringParams] = None):
    """
    Score of one candidate and the tier that produced it.

    Returns:
        Tuple of (score, tier); lower scores win
    """
    params = params or ScoringParams()
    score = deviation

    if is_inside:
        score -= params.inside_bonus
        tier = TIER_INSIDE
    elif is_near_field:
        score -= params.near_field_bonus
        tier = TIER_NEAR_FIELD
    elif is_in_beam:
        score -= params.in_beam_bonus
        tier = TIER_IN_BEAM
    else:
        tier = TIER_OUT_OF_BEAM

    if has_explicit_azimuth:
        score -= params.explicit_azimuth_bonus

    return score, tier


def score_sector_candidates(site: Site,
                            lat: float,
                            lng: float,
                            scoring: Optional[ScoringParams] = None,
                            geometry_params: Optional[SectorGeometryParams] = None) -> List[SectorCandidate]:
    """
    Evaluate every member of a site against the query point.

    Args:
        site: Selected site
        lat: Query latitude
        lng: Query longitude
        scoring: Tier bonuses and near-field radius
        geometry_params: Parameters for sector wedge analysis

    Returns:
        Candidates sorted by ascending score; ties keep member order, so
        the first-encountered best candidate comes first
    """
    scoring = scoring or ScoringParams()
    anchor = site.anchor

    distance_m, bearing_site_to_query = get_distance_and_bearing(anchor.lat, anchor.lng, lat, lng)
    is_near_field = distance_m < scoring.near_field_m

    candidates = []
    for feature in site.members:
        sector = analyze_sector_geometry(feature, anchor, geometry_params)
        has_attribute_azimuth = explicit_azimuth(feature.properties) is not None

        # Direction is meaningless for omni cells and at very short range
        if sector.is_omni or is_near_field:
            deviation = 0.0
            is_in_beam = True
        else:
            deviation = angular_deviation(sector.azimuth, bearing_site_to_query)
            is_in_beam = is_within_sector(bearing_site_to_query, sector.azimuth, sector.beamwidth)

        is_inside = point_in_feature(feature, lng, lat)
        score, tier = score_candidate(
            deviation, is_inside, is_near_field, is_in_beam, has_attribute_azimuth, scoring
        )

        candidates.append(SectorCandidate(
            feature=feature,
            sector=sector,
            deviation=deviation,
            is_inside=is_inside,
            is_in_beam=is_in_beam,
            has_explicit_azimuth=has_attribute_azimuth,
            tier=tier,
            score=score,
        ))

    candidates.sort(key=lambda c: c.score)

    logger.debug(
        "Sector candidates scored",
        site=site.key,
        candidates=len(candidates),
        near_field=is_near_field,
        best_tier=candidates[0].tier if candidates else None,
    )
    return candidates
