"""
Feature model, validation schemas and loaders.

DataSource lives in sector_locator.data.sources; it depends on the
matching layer and is imported from there directly.
"""
from sector_locator.data.features import LngLat, SiteFeature
from sector_locator.data.schemas import Coordinate, GeoJSONFeature, GeoJSONGeometry
from sector_locator.data.loaders import (
    features_from_geojson,
    features_from_geodataframe,
    load_geojson,
    load_sites_csv,
    deduplicate_features,
)

__all__ = [
    'LngLat',
    'SiteFeature',
    'Coordinate',
    'GeoJSONFeature',
    'GeoJSONGeometry',
    'features_from_geojson',
    'features_from_geodataframe',
    'load_geojson',
    'load_sites_csv',
    'deduplicate_features',
]
