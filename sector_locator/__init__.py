"""
Sector Locator.

Infers tower centers and sector wedges from cellular site geodata and
finds the site and sector most likely serving a given location.
"""
from sector_locator.matching.analyzer import AnalysisResult, analyze
from sector_locator.data.sources import DataSource, analyze_sources, step_rank
from sector_locator.utils.coordinates import LatLng, parse_coordinate_string

__version__ = "0.1.0"

__all__ = [
    'AnalysisResult',
    'analyze',
    'DataSource',
    'analyze_sources',
    'step_rank',
    'LatLng',
    'parse_coordinate_string',
]
