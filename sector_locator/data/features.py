"""
In-memory feature model shared by inference and matching.

Features keep their geometry as a GeoJSON-style mapping rather than a
shapely object: real site exports contain rings that shapely refuses to
build, and the heuristics must still see those vertices.
"""
from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, List, NamedTuple, Optional

import numpy as np

POLYGON_TYPES = ('Polygon', 'MultiPolygon')


class LngLat(NamedTuple):
    """A position in GeoJSON axis order (longitude first)."""
    lng: float
    lat: float


def to_lnglat(position) -> LngLat:
    """Convert a GeoJSON position to a 2D LngLat, dropping any altitude."""
    return LngLat(float(position[0]), float(position[1]))


@dataclass
class SiteFeature:
    """
    One input geometry with its properties and derived annotations.

    Attributes:
        geometry: GeoJSON geometry mapping (``type`` and ``coordinates``)
        properties: Arbitrary attribute mapping from the source file
        anchor: Inferred tower center, set once by tower center inference
        feature_id: Stable identifier assigned at annotation time
        source_id: Id of the data source the feature belongs to
        source_name: Display name of that data source
    """
    geometry: Dict[str, Any]
    properties: Dict[str, Any] = field(default_factory=dict)
    anchor: Optional[LngLat] = None
    feature_id: Optional[str] = None
    source_id: str = 'unknown'
    source_name: str = 'unknown'

    @property
    def geometry_type(self) -> Optional[str]:
        if not self.geometry:
            return None
        return self.geometry.get('type')

    @property
    def is_polygonal(self) -> bool:
        return self.geometry_type in POLYGON_TYPES


def coord_all(geometry: Optional[Dict[str, Any]]) -> List[LngLat]:
    """
    Flatten every position of a geometry, ring closing vertices included.

    Args:
        geometry: GeoJSON geometry mapping

    Returns:
        List of LngLat in document order; empty for missing geometry
    """
    if not geometry:
        return []

    geom_type = geometry.get('type')
    coords = geometry.get('coordinates')

    if geom_type == 'GeometryCollection':
        result = []
        for part in geometry.get('geometries') or []:
            result.extend(coord_all(part))
        return result

    if coords is None:
        return []

    if geom_type == 'Point':
        return [to_lnglat(coords)] if len(coords) >= 2 else []
    if geom_type in ('MultiPoint', 'LineString'):
        return [to_lnglat(c) for c in coords]
    if geom_type in ('MultiLineString', 'Polygon'):
        return [to_lnglat(c) for ring in coords for c in ring]
    if geom_type == 'MultiPolygon':
        return [to_lnglat(c) for poly in coords for ring in poly for c in ring]

    return []


def outer_ring(geometry: Dict[str, Any]) -> List[LngLat]:
    """
    Representative ring of a polygonal geometry.

    The exterior ring of a Polygon, or of the first polygon of a
    MultiPolygon. Returns an empty list for any other geometry.
    """
    geom_type = geometry.get('type') if geometry else None
    coords = geometry.get('coordinates') if geometry else None
    if not coords:
        return []

    if geom_type == 'Polygon':
        return [to_lnglat(c) for c in coords[0]]
    if geom_type == 'MultiPolygon':
        return [to_lnglat(c) for c in coords[0][0]] if coords[0] else []
    return []


def is_closed_ring(ring: List[LngLat]) -> bool:
    return len(ring) > 1 and ring[0] == ring[-1]


def open_ring(ring: List[LngLat]) -> List[LngLat]:
    """Drop the duplicated closing vertex of a ring, if present."""
    return ring[:-1] if is_closed_ring(ring) else list(ring)


def feature_centroid(feature: SiteFeature) -> LngLat:
    """
    Vertex centroid of a feature.

    Mean of all vertices, skipping the closing vertex of each polygon ring.

    Raises:
        ValueError: If the feature has no coordinates
    """
    geometry = feature.geometry or {}
    geom_type = geometry.get('type')
    coords = geometry.get('coordinates')

    if geom_type == 'Polygon':
        vertices = [v for ring in coords for v in open_ring([to_lnglat(c) for c in ring])]
    elif geom_type == 'MultiPolygon':
        vertices = [
            v for poly in coords for ring in poly
            for v in open_ring([to_lnglat(c) for c in ring])
        ]
    else:
        vertices = coord_all(geometry)

    return vertex_centroid(vertices)


def vertex_centroid(coords: Iterable[LngLat]) -> LngLat:
    """
    Arithmetic mean of a set of vertices.

    Raises:
        ValueError: If no vertices are given
    """
    arr = np.asarray(list(coords), dtype=float)
    if arr.size == 0:
        raise ValueError("Cannot compute the centroid of an empty vertex set")
    lng, lat = arr[:, :2].mean(axis=0)
    return LngLat(float(lng), float(lat))
