"""
Tower center (anchor) inference.

Every feature gets one representative point its coverage radiates from.
Strategies are tried in priority order and the first that applies wins:

1. Explicit lat/lon attributes on the feature (authoritative)
2. Degenerate geometry (points, lines, rings under 3 vertices): first vertex
3. Regular polygon (circle-like omni cell): vertex centroid
4. Sector tip scoring: the vertex that is shared by many features, comes
   first in the ring and forms the sharpest angle

Inference never raises; a failing geometric step degrades to the first
ring vertex.
"""
import time
import uuid
from collections import Counter
from typing import List, Optional, Sequence, Tuple

import numpy as np

from sector_locator.core.frequency_index import CoordinateFrequencyIndex
from sector_locator.core.geometry import turning_angle
from sector_locator.core.properties import explicit_center
from sector_locator.data.features import (
    LngLat,
    SiteFeature,
    coord_all,
    feature_centroid,
    open_ring,
    outer_ring,
)
from sector_locator.utils.config import TowerCenterParams
from sector_locator.utils.error_handling import GEOMETRY_ERRORS, degrade_on_error
from sector_locator.utils.logging_config import get_logger

logger = get_logger(__name__)

STRATEGY_EXPLICIT = 'explicit'
STRATEGY_DEGENERATE = 'degenerate'
STRATEGY_REGULAR = 'regular'
STRATEGY_SCORED = 'scored'
STRATEGY_FALLBACK = 'fallback'
STRATEGY_NONE = 'none'


def ring_turning_angles(vertices: Sequence[LngLat]) -> List[float]:
    """Turning angle at every vertex of an open ring, neighbours wrapping."""
    n = len(vertices)
    return [
        turning_angle(vertices[j], vertices[j - 1], vertices[(j + 1) % n])
        for j in range(n)
    ]


def is_regular_ring(angles: Sequence[float], params: TowerCenterParams) -> bool:
    """
    Whether turning angles describe a regular, circle-like polygon.

    Needs more than ``regular_min_vertices`` vertices, a wide mean angle
    and a small population standard deviation.
    """
    if len(angles) <= params.regular_min_vertices:
        return False
    arr = np.asarray(angles, dtype=float)
    return bool(
        arr.mean() > params.regular_min_mean_angle
        and arr.std() < params.regular_max_std_angle
    )


def score_ring_vertices(vertices: Sequence[LngLat],
                        angles: Sequence[float],
                        index: CoordinateFrequencyIndex,
                        params: TowerCenterParams) -> List[float]:
    """
    Sector tip score of every ring vertex (higher is more tower-like).

    score = shared_count * shared_vertex_weight
            + first_vertex_bonus (first vertex only)
            + (180 - angle) * sharpness_weight
    """
    scores = []
    for k, (vertex, angle) in enumerate(zip(vertices, angles)):
        # A vertex the index never saw still belongs to this feature
        shared = index.count(vertex) or 1
        score = shared * params.shared_vertex_weight
        if k == 0:
            score += params.first_vertex_bonus
        score += (180.0 - angle) * params.sharpness_weight
        scores.append(score)
    return scores


def _first_ring_vertex(feature, ring, index, params) -> Tuple[LngLat, str]:
    return ring[0], STRATEGY_FALLBACK


@degrade_on_error(None)
def _first_position(feature: SiteFeature) -> Optional[LngLat]:
    coords = coord_all(feature.geometry)
    return coords[0] if coords else None


@degrade_on_error(_first_ring_vertex)
def _infer_from_ring(feature: SiteFeature,
                     ring: List[LngLat],
                     index: CoordinateFrequencyIndex,
                     params: TowerCenterParams) -> Tuple[LngLat, str]:
    vertices = open_ring(ring)
    angles = ring_turning_angles(vertices)

    if is_regular_ring(angles, params):
        try:
            return feature_centroid(feature), STRATEGY_REGULAR
        except GEOMETRY_ERRORS as e:
            logger.debug("Centroid failed, scoring vertices instead", error=str(e))

    scores = score_ring_vertices(vertices, angles, index, params)
    # argmax keeps the first maximum on ties
    best = int(np.argmax(scores))
    return vertices[best], STRATEGY_SCORED


def infer_tower_center_with_strategy(
    feature: SiteFeature,
    index: CoordinateFrequencyIndex,
    params: Optional[TowerCenterParams] = None,
) -> Tuple[Optional[LngLat], str]:
    """
    Infer a feature's anchor and report which strategy produced it.

    Args:
        feature: Feature to analyse
        index: Frequency index built over the feature's whole dataset
        params: Scoring weights and regularity thresholds

    Returns:
        Tuple of (anchor or None when the feature has no coordinates,
        strategy name)
    """
    params = params or TowerCenterParams()

    center = explicit_center(feature.properties)
    if center is not None:
        return center, STRATEGY_EXPLICIT

    if not feature.is_polygonal:
        first = _first_position(feature)
        return (first, STRATEGY_DEGENERATE) if first is not None else (None, STRATEGY_NONE)

    try:
        ring = outer_ring(feature.geometry)
    except GEOMETRY_ERRORS as e:
        logger.warning("Unreadable polygon ring", feature_id=feature.feature_id, error=str(e))
        first = _first_position(feature)
        return (first, STRATEGY_FALLBACK) if first is not None else (None, STRATEGY_NONE)

    if len(ring) < 3:
        if ring:
            return ring[0], STRATEGY_DEGENERATE
        return None, STRATEGY_NONE

    return _infer_from_ring(feature, ring, index, params)


def infer_tower_center(
    feature: SiteFeature,
    index: CoordinateFrequencyIndex,
    params: Optional[TowerCenterParams] = None,
) -> Optional[LngLat]:
    """
    Infer the tower center a feature's coverage radiates from.

    Example:
        >>> index = CoordinateFrequencyIndex.from_features(features)
        >>> infer_tower_center(features[0], index)
        LngLat(lng=-6.2603, lat=53.3498)
    """
    anchor, _ = infer_tower_center_with_strategy(feature, index, params)
    return anchor


def new_session_id() -> str:
    """Short random id keeping feature ids unique across loaded datasets."""
    return uuid.uuid4().hex[:6]


def annotate_features(
    features: Sequence[SiteFeature],
    index: Optional[CoordinateFrequencyIndex] = None,
    params: Optional[TowerCenterParams] = None,
    chunk_size: int = 500,
    session_id: Optional[str] = None,
) -> Counter:
    """
    Assign a stable id and an inferred anchor to every feature, in place.

    Features are processed in chunks with a progress entry after each one,
    so very large datasets report progress while they are annotated.

    Args:
        features: Features of one dataset
        index: Frequency index of the same dataset (built if omitted)
        params: Tower center parameters
        chunk_size: Features per progress chunk
        session_id: Id prefix shared by this annotation pass

    Returns:
        Counter of features per inference strategy
    """
    if index is None:
        index = CoordinateFrequencyIndex.from_features(features)
    params = params or TowerCenterParams()
    session_id = session_id or new_session_id()

    strategies = Counter()
    total = len(features)

    for start in range(0, total, chunk_size):
        for counter in range(start, min(start + chunk_size, total)):
            feature = features[counter]
            feature.feature_id = f"feat_{session_id}_{int(time.time() * 1000)}_{counter}"
            feature.anchor, strategy = infer_tower_center_with_strategy(feature, index, params)
            strategies[strategy] += 1

        logger.debug(
            "Annotation chunk complete",
            processed=min(start + chunk_size, total),
            total=total,
        )

    logger.info(
        "Tower centers inferred",
        features=total,
        **{f"strategy_{name}": count for name, count in sorted(strategies.items())},
    )
    return strategies

