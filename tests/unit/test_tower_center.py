"""
Tests for tower center inference.
"""
import re

import pytest

from sector_locator.core import tower_center
from sector_locator.core.frequency_index import CoordinateFrequencyIndex
from sector_locator.core.tower_center import (
    STRATEGY_DEGENERATE,
    STRATEGY_EXPLICIT,
    STRATEGY_FALLBACK,
    STRATEGY_NONE,
    STRATEGY_REGULAR,
    STRATEGY_SCORED,
    annotate_features,
    infer_tower_center,
    infer_tower_center_with_strategy,
    is_regular_ring,
    score_ring_vertices,
)
from sector_locator.data.features import LngLat, SiteFeature
from sector_locator.utils.config import TowerCenterParams


def polygon_feature(ring, properties=None):
    return SiteFeature(
        geometry={'type': 'Polygon', 'coordinates': [ring]},
        properties=properties or {},
    )


# Wedge whose tip (0, 0) is the second vertex rather than the first
TIP_SECOND = [[0.01, 0.02], [0.0, 0.0], [-0.01, 0.02], [0.01, 0.02]]
EAST_WEDGE = [[0.0, 0.0], [0.02, -0.01], [0.02, 0.01], [0.0, 0.0]]
WEST_WEDGE = [[0.0, 0.0], [-0.02, -0.01], [-0.02, 0.01], [0.0, 0.0]]


class TestExplicitAndDegenerate:
    """Strategies that do not look at ring shape."""

    def test_explicit_attributes_used_verbatim(self):
        feature = polygon_feature(TIP_SECOND, properties={'lat': 53.0, 'lon': -6.0})
        anchor, strategy = infer_tower_center_with_strategy(feature, CoordinateFrequencyIndex())

        assert anchor == LngLat(-6.0, 53.0)
        assert strategy == STRATEGY_EXPLICIT

    def test_explicit_long_column(self):
        feature = polygon_feature(TIP_SECOND, properties={'Lat': 1.5, 'Long': 2.5})
        assert infer_tower_center(feature, CoordinateFrequencyIndex()) == LngLat(2.5, 1.5)

    def test_point(self):
        feature = SiteFeature(geometry={'type': 'Point', 'coordinates': [-6.26, 53.35]})
        anchor, strategy = infer_tower_center_with_strategy(feature, CoordinateFrequencyIndex())

        assert anchor == LngLat(-6.26, 53.35)
        assert strategy == STRATEGY_DEGENERATE

    def test_linestring_first_vertex(self):
        feature = SiteFeature(geometry={'type': 'LineString', 'coordinates': [[1, 2], [3, 4]]})
        assert infer_tower_center(feature, CoordinateFrequencyIndex()) == LngLat(1.0, 2.0)

    def test_short_ring(self):
        feature = polygon_feature([[5, 5], [6, 6]])
        anchor, strategy = infer_tower_center_with_strategy(feature, CoordinateFrequencyIndex())

        assert anchor == LngLat(5.0, 5.0)
        assert strategy == STRATEGY_DEGENERATE

    def test_no_coordinates(self):
        feature = SiteFeature(geometry={'type': 'Polygon', 'coordinates': []})
        anchor, strategy = infer_tower_center_with_strategy(feature, CoordinateFrequencyIndex())

        assert anchor is None
        assert strategy == STRATEGY_NONE

    def test_missing_geometry(self):
        anchor, strategy = infer_tower_center_with_strategy(SiteFeature(geometry=None), CoordinateFrequencyIndex())
        assert anchor is None
        assert strategy == STRATEGY_NONE


class TestRegularPolygon:
    """Circle-like polygons resolve to their vertex centroid."""

    def test_hexagon_centroid(self, make_hexagon):
        feature = make_hexagon(0.0, 0.0, radius=0.002)
        index = CoordinateFrequencyIndex.from_features([feature])
        anchor, strategy = infer_tower_center_with_strategy(feature, index)

        assert strategy == STRATEGY_REGULAR
        assert anchor.lng == pytest.approx(0.0, abs=1e-9)
        assert anchor.lat == pytest.approx(0.0, abs=1e-9)

    def test_hexagon_at_high_latitude(self, make_hexagon):
        feature = make_hexagon(53.36, -6.25)
        anchor, strategy = infer_tower_center_with_strategy(feature, CoordinateFrequencyIndex())

        assert strategy == STRATEGY_REGULAR
        assert anchor.lat == pytest.approx(53.36, abs=1e-6)
        assert anchor.lng == pytest.approx(-6.25, abs=1e-6)

    def test_triangle_is_never_regular(self):
        """Rings need more than three vertices to be regular."""
        params = TowerCenterParams()
        assert not is_regular_ring([60.0, 60.0, 60.0], params)
        assert is_regular_ring([120.0] * 6, params)

    def test_irregular_angles(self):
        params = TowerCenterParams()
        assert not is_regular_ring([30.0, 150.0, 150.0, 150.0, 150.0], params)
        assert not is_regular_ring([80.0] * 6, params)


class TestVertexScoring:
    """Sector tip scoring."""

    def test_wedge_tip_first(self):
        feature = polygon_feature([[0.0, 0.0], [0.01, 0.02], [-0.01, 0.02], [0.0, 0.0]])
        index = CoordinateFrequencyIndex.from_features([feature])
        anchor, strategy = infer_tower_center_with_strategy(feature, index)

        assert anchor == LngLat(0.0, 0.0)
        assert strategy == STRATEGY_SCORED

    def test_first_vertex_bonus_without_sharing(self):
        """On its own, the first vertex outranks a slightly sharper later tip."""
        feature = polygon_feature(TIP_SECOND)
        index = CoordinateFrequencyIndex.from_features([feature])

        assert infer_tower_center(feature, index) == LngLat(0.01, 0.02)

    def test_shared_vertex_wins(self):
        """A tip shared by three sectors beats the first vertex bonus."""
        features = [polygon_feature(TIP_SECOND), polygon_feature(EAST_WEDGE), polygon_feature(WEST_WEDGE)]
        index = CoordinateFrequencyIndex.from_features(features)

        assert infer_tower_center(features[0], index) == LngLat(0.0, 0.0)

    def test_score_formula(self):
        params = TowerCenterParams()
        vertices = [LngLat(0.0, 0.0), LngLat(1.0, 0.0), LngLat(2.0, 0.0)]
        index = CoordinateFrequencyIndex.from_features([
            SiteFeature(geometry={'type': 'MultiPoint', 'coordinates': [[1.0, 0.0]]}),
            SiteFeature(geometry={'type': 'MultiPoint', 'coordinates': [[1.0, 0.0]]}),
        ])
        scores = score_ring_vertices(vertices, [90.0, 90.0, 180.0], index, params)

        # Vertices missing from the index count as 1
        assert scores[0] == pytest.approx(50 + 80 + 180)
        assert scores[1] == pytest.approx(100 + 180)
        assert scores[2] == pytest.approx(50)

    def test_tie_keeps_first_vertex(self):
        """Identical scores resolve to the earliest vertex."""
        # Square with regularity disabled: every vertex scores the same
        params = TowerCenterParams(first_vertex_bonus=0.0, sharpness_weight=0.0, regular_min_vertices=10)
        square = [[0.0, 0.0], [0.01, 0.0], [0.01, 0.01], [0.0, 0.01], [0.0, 0.0]]
        feature = polygon_feature(square)
        index = CoordinateFrequencyIndex.from_features([feature])

        anchor, strategy = infer_tower_center_with_strategy(feature, index, params)

        assert strategy == STRATEGY_SCORED
        assert anchor == LngLat(0.0, 0.0)

    def test_multipolygon_uses_first_polygon(self):
        feature = SiteFeature(geometry={
            'type': 'MultiPolygon',
            'coordinates': [
                [[[0.0, 0.0], [0.01, 0.02], [-0.01, 0.02], [0.0, 0.0]]],
                [[[5.0, 5.0], [5.01, 5.02], [4.99, 5.02], [5.0, 5.0]]],
            ],
        })
        index = CoordinateFrequencyIndex.from_features([feature])
        assert infer_tower_center(feature, index) == LngLat(0.0, 0.0)


class TestFallback:
    """Failures inside ring analysis degrade to the first ring vertex."""

    def test_geometric_failure(self, monkeypatch):
        def broken(vertices):
            raise ValueError("degenerate ring")

        monkeypatch.setattr(tower_center, 'ring_turning_angles', broken)
        feature = polygon_feature(TIP_SECOND)
        anchor, strategy = infer_tower_center_with_strategy(feature, CoordinateFrequencyIndex())

        assert anchor == LngLat(0.01, 0.02)
        assert strategy == STRATEGY_FALLBACK

    def test_malformed_ring_does_not_raise(self):
        feature = polygon_feature([['a', 'b'], [1, 1], [2, 2], ['a', 'b']])
        anchor, strategy = infer_tower_center_with_strategy(feature, CoordinateFrequencyIndex())

        assert anchor is None
        assert strategy == STRATEGY_NONE


class TestAnnotateFeatures:
    """Tests for annotate_features."""

    def test_ids_and_anchors(self, three_sector_site):
        strategies = annotate_features(three_sector_site, session_id="abc123", chunk_size=2)

        for counter, feature in enumerate(three_sector_site):
            assert re.fullmatch(rf"feat_abc123_\d+_{counter}", feature.feature_id)
            assert feature.anchor == LngLat(-6.26, 53.35)
        assert strategies[STRATEGY_SCORED] == 3

    def test_generated_session_id(self, make_point):
        features = [make_point(53.0, -6.0), make_point(53.1, -6.1)]
        strategies = annotate_features(features)

        assert re.fullmatch(r"feat_[0-9a-f]{6}_\d+_0", features[0].feature_id)
        assert features[0].feature_id.split('_')[1] == features[1].feature_id.split('_')[1]
        assert strategies == {STRATEGY_DEGENERATE: 2}

    def test_empty(self):
        assert annotate_features([]) == {}
