"""
Dataset-wide vertex frequency index.

Sector polygons drawn for one tower all fan out from the tower position,
so a vertex referenced by many features is very likely a real tower.
"""
from collections import Counter
from typing import Iterable, Iterator, Tuple

from sector_locator.data.features import LngLat, SiteFeature, coord_all


class CoordinateFrequencyIndex:
    """
    Number of features referencing each exact vertex coordinate.

    A feature contributes at most one count per distinct vertex, so a
    closed ring does not count its first vertex twice. Coordinates are
    compared by exact value, never rounded.

    Example:
        >>> index = CoordinateFrequencyIndex.from_features(features)
        >>> index.count((-6.2603, 53.3498))
        3
    """

    def __init__(self, counts: Counter = None):
        self._counts = counts if counts is not None else Counter()

    @classmethod
    def from_features(cls, features: Iterable[SiteFeature]) -> 'CoordinateFrequencyIndex':
        counts = Counter()
        for feature in features:
            counts.update(set(coord_all(feature.geometry)))
        return cls(counts)

    def count(self, coord: Tuple[float, float]) -> int:
        """Occurrences of a coordinate; 0 when the index never saw it."""
        return self._counts.get(LngLat(float(coord[0]), float(coord[1])), 0)

    def __len__(self) -> int:
        return len(self._counts)

    def __contains__(self, coord) -> bool:
        return self.count(coord) > 0

    def __iter__(self) -> Iterator[LngLat]:
        return iter(self._counts)

    def most_common(self, n: int = None):
        return self._counts.most_common(n)
