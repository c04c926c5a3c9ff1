"""
Pydantic schemas for data validation.

Defines models for incoming GeoJSON features and for query coordinates,
with the coordinate range rules every position must satisfy.
"""
import math
from typing import Any, Dict, List, Literal, Optional

from pydantic import BaseModel, Field, field_validator, model_validator


def _check_position(position: Any) -> None:
    if not isinstance(position, (list, tuple)) or len(position) < 2:
        raise ValueError(f"Invalid position: {position!r}")
    try:
        lng, lat = float(position[0]), float(position[1])
    except (TypeError, ValueError):
        raise ValueError(f"Non-numeric position: {position!r}") from None
    if not (math.isfinite(lng) and math.isfinite(lat)):
        raise ValueError(f"Non-finite position: {position!r}")
    if abs(lat) > 90 or abs(lng) > 180:
        raise ValueError(f"Position out of range (lng={lng}, lat={lat})")


def _walk_positions(coords: Any, depth: int):
    if depth == 0:
        yield coords
        return
    if not isinstance(coords, (list, tuple)):
        raise ValueError(f"Expected nested coordinate list, got {type(coords).__name__}")
    for item in coords:
        yield from _walk_positions(item, depth - 1)


# Nesting depth of positions per geometry type
POSITION_DEPTH = {
    'Point': 0,
    'MultiPoint': 1,
    'LineString': 1,
    'MultiLineString': 2,
    'Polygon': 2,
    'MultiPolygon': 3,
}


class Coordinate(BaseModel):
    """
    A query coordinate in decimal degrees.

    Example:
        >>> Coordinate(lat=53.3498, lng=-6.2603)
        Coordinate(lat=53.3498, lng=-6.2603)
    """
    lat: float = Field(..., ge=-90, le=90, description="Latitude in decimal degrees")
    lng: float = Field(..., ge=-180, le=180, description="Longitude in decimal degrees")

    @field_validator('lat', 'lng')
    @classmethod
    def must_be_finite(cls, v: float) -> float:
        if not math.isfinite(v):
            raise ValueError("coordinate must be finite")
        return v

    model_config = {
        "frozen": True,
    }


class GeoJSONGeometry(BaseModel):
    """Schema for a GeoJSON geometry of a supported type."""
    type: Literal['Point', 'MultiPoint', 'LineString', 'MultiLineString', 'Polygon', 'MultiPolygon']
    coordinates: List[Any] = Field(..., description="Nested positions, longitude first")

    @model_validator(mode='after')
    def validate_positions(self):
        """Every position must be a finite, in-range (lng, lat) pair."""
        positions = list(_walk_positions(self.coordinates, POSITION_DEPTH[self.type]))
        if not positions:
            raise ValueError(f"{self.type} has no coordinates")
        for position in positions:
            _check_position(position)
        return self


class GeoJSONFeature(BaseModel):
    """
    Schema for one post-parse input feature.

    Example:
        >>> feature = GeoJSONFeature(
        ...     geometry={'type': 'Point', 'coordinates': [-6.2603, 53.3498]},
        ...     properties={'name': 'Site_1', 'azimuth': '120'},
        ... )
    """
    type: Literal['Feature'] = 'Feature'
    geometry: Optional[GeoJSONGeometry] = None
    properties: Dict[str, Any] = Field(default_factory=dict)

    @field_validator('properties', mode='before')
    @classmethod
    def default_properties(cls, v: Optional[Dict[str, Any]]) -> Dict[str, Any]:
        return v or {}
