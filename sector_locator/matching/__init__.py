"""
Site ranking and sector selection for a query point.

    - Sites: bounding-box prefilter, clustering by rounded anchor, ranking
    - Sector scoring: containment / near-field / in-beam tiers
    - Analyzer: the ``analyze`` query entrypoint
"""
from sector_locator.matching.sites import (
    Site,
    bounding_box_filter,
    cluster_sites,
    rank_sites,
    select_site,
)
from sector_locator.matching.sector_scoring import (
    SectorCandidate,
    score_sector_candidates,
)
from sector_locator.matching.analyzer import AnalysisResult, analyze

__all__ = [
    'Site',
    'bounding_box_filter',
    'cluster_sites',
    'rank_sites',
    'select_site',
    'SectorCandidate',
    'score_sector_candidates',
    'AnalysisResult',
    'analyze',
]
