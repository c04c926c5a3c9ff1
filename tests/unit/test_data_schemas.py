"""
Tests for Pydantic data schemas.
"""
import pytest
from pydantic import ValidationError

from sector_locator.data.schemas import Coordinate, GeoJSONFeature, GeoJSONGeometry


class TestCoordinate:
    """Tests for the query coordinate schema."""

    def test_valid(self):
        point = Coordinate(lat=53.3498, lng=-6.2603)
        assert point.lat == 53.3498
        assert point.lng == -6.2603

    def test_numeric_string_coerced(self):
        assert Coordinate(lat="53.5", lng="-6").lat == 53.5

    @pytest.mark.parametrize("lat,lng", [(91, 0), (-91, 0), (0, 181), (0, -181)])
    def test_out_of_range(self, lat, lng):
        with pytest.raises(ValidationError):
            Coordinate(lat=lat, lng=lng)

    def test_nan_rejected(self):
        with pytest.raises(ValidationError):
            Coordinate(lat=float('nan'), lng=0)

    def test_non_numeric(self):
        with pytest.raises(ValidationError):
            Coordinate(lat="north", lng=0)

    def test_frozen(self):
        point = Coordinate(lat=1, lng=2)
        with pytest.raises(ValidationError):
            point.lat = 5


class TestGeoJSONGeometry:
    """Tests for geometry validation."""

    def test_polygon(self):
        geometry = GeoJSONGeometry(
            type='Polygon',
            coordinates=[[[0, 0], [1, 0], [1, 1], [0, 0]]],
        )
        assert geometry.type == 'Polygon'

    def test_point_with_altitude(self):
        geometry = GeoJSONGeometry(type='Point', coordinates=[-6.26, 53.35, 30.0])
        assert geometry.coordinates[2] == 30.0

    def test_multipolygon(self):
        GeoJSONGeometry(
            type='MultiPolygon',
            coordinates=[[[[0, 0], [1, 0], [1, 1], [0, 0]]], [[[5, 5], [6, 5], [6, 6], [5, 5]]]],
        )

    def test_unsupported_type(self):
        with pytest.raises(ValidationError):
            GeoJSONGeometry(type='Circle', coordinates=[0, 0])

    def test_out_of_range_position(self):
        with pytest.raises(ValidationError):
            GeoJSONGeometry(type='LineString', coordinates=[[0, 0], [200, 0]])

    def test_non_numeric_position(self):
        with pytest.raises(ValidationError):
            GeoJSONGeometry(type='Point', coordinates=['a', 'b'])

    def test_wrong_nesting(self):
        with pytest.raises(ValidationError):
            GeoJSONGeometry(type='Polygon', coordinates=[[0, 0], [1, 1]])

    def test_empty_coordinates(self):
        with pytest.raises(ValidationError):
            GeoJSONGeometry(type='MultiPoint', coordinates=[])


class TestGeoJSONFeature:
    """Tests for the feature schema."""

    def test_valid(self):
        feature = GeoJSONFeature(
            geometry={'type': 'Point', 'coordinates': [-6.2603, 53.3498]},
            properties={'name': 'Site_1', 'azimuth': '120'},
        )
        assert feature.geometry.type == 'Point'
        assert feature.properties['azimuth'] == '120'

    def test_null_properties(self):
        feature = GeoJSONFeature.model_validate({
            'type': 'Feature',
            'geometry': {'type': 'Point', 'coordinates': [0, 0]},
            'properties': None,
        })
        assert feature.properties == {}

    def test_null_geometry(self):
        feature = GeoJSONFeature.model_validate({'type': 'Feature', 'geometry': None, 'properties': {}})
        assert feature.geometry is None

    def test_wrong_type(self):
        with pytest.raises(ValidationError):
            GeoJSONFeature.model_validate({'type': 'FeatureCollection', 'geometry': None})
