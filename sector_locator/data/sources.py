"""
Data source lifecycle: preparation, readiness and querying.

A DataSource wraps the features of one loaded dataset. ``prepare`` runs
the one-time batch pass (de-duplication, vertex frequency index, tower
center inference) and then opens a ready barrier; queries are only served
once that barrier is open. After preparation the features are read-only,
so any number of threads can query the same source concurrently.
"""
import threading
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
from typing import Iterable, List, Optional

from sector_locator.core.frequency_index import CoordinateFrequencyIndex
from sector_locator.core.tower_center import annotate_features
from sector_locator.data.features import SiteFeature
from sector_locator.data.loaders import deduplicate_features
from sector_locator.matching.analyzer import AnalysisResult, analyze
from sector_locator.utils.config import LocatorConfig, get_default_config
from sector_locator.utils.exceptions import DatasetNotReadyError, SectorLocatorError
from sector_locator.utils.logging_config import get_logger

logger = get_logger(__name__)


@dataclass
class DataSource:
    """
    One dataset of site features.

    Attributes:
        source_id: Stable identifier of the dataset
        name: Display name (usually the file name)
        features: Features of the dataset
        is_active: Inactive sources are skipped by multi-source queries
        custom_result_field: Property copied into every result, if set
        visible_attributes: Property names a front end should display
    """
    source_id: str
    name: str
    features: List[SiteFeature] = field(default_factory=list)
    is_active: bool = True
    custom_result_field: Optional[str] = None
    visible_attributes: List[str] = field(default_factory=list)
    index: Optional[CoordinateFrequencyIndex] = field(default=None, init=False, repr=False)
    _ready: threading.Event = field(default_factory=threading.Event, init=False, repr=False)
    _prepare_lock: threading.Lock = field(default_factory=threading.Lock, init=False, repr=False)

    @property
    def is_ready(self) -> bool:
        return self._ready.is_set()

    def wait_until_ready(self, timeout: Optional[float] = None) -> bool:
        """Block until ``prepare`` has finished; False if the timeout expired."""
        return self._ready.wait(timeout)

    def prepare(self, config: Optional[LocatorConfig] = None) -> 'DataSource':
        """
        Run the one-time batch pass over the features.

        De-duplicates the features, builds the vertex frequency index,
        infers every tower center, stamps provenance and finally marks the
        source ready. Calling it again on a ready source is a no-op.
        """
        config = config or get_default_config()

        with self._prepare_lock:
            if self.is_ready:
                return self

            input_count = len(self.features)
            self.features = deduplicate_features(self.features, config.processing.dedup_precision)
            self.index = CoordinateFrequencyIndex.from_features(self.features)

            annotate_features(
                self.features,
                self.index,
                config.tower_center,
                chunk_size=config.processing.chunk_size,
            )
            for feature in self.features:
                feature.source_id = self.source_id
                feature.source_name = self.name

            self._ready.set()

        logger.info(
            "Data source prepared",
            source=self.name,
            input_features=input_count,
            features=len(self.features),
            distinct_vertices=len(self.index),
        )
        return self

    def analyze(self, lat: float, lng: float, rank: int = 1,
                config: Optional[LocatorConfig] = None) -> AnalysisResult:
        """
        Run a query against this source.

        Raises:
            DatasetNotReadyError: If ``prepare`` has not completed
            NoFeaturesError: If the source holds no features
            NoSuitableSiteError: If no site could be formed
        """
        if not self.is_ready:
            raise DatasetNotReadyError(f"Data source '{self.name}' has not been prepared.")

        config = config or get_default_config()
        if self.custom_result_field:
            config = config.model_copy(update={'custom_result_field': self.custom_result_field})

        result = analyze(lat, lng, self.features, rank=rank, config=config)
        result.source_id = self.source_id
        result.source_name = self.name
        return result


def analyze_sources(lat: float,
                    lng: float,
                    sources: Iterable[DataSource],
                    config: Optional[LocatorConfig] = None,
                    rank: int = 1) -> List[AnalysisResult]:
    """
    Query every active source and return the results nearest first.

    A source that cannot answer (empty, not prepared, no site) is logged
    and skipped; the other sources still return results.

    Args:
        lat: Query latitude
        lng: Query longitude
        sources: Candidate data sources
        config: Locator configuration; ``processing.n_workers`` > 1 queries
            sources in parallel threads
        rank: 1-based site rank requested from every source

    Returns:
        Results sorted by ascending site distance (may be empty)
    """
    config = config or get_default_config()
    active = [source for source in sources if source.is_active]

    def run(source: DataSource) -> Optional[AnalysisResult]:
        try:
            return source.analyze(lat, lng, rank=rank, config=config)
        except SectorLocatorError as e:
            logger.warning("Analysis failed for source", source=source.name, error=str(e))
            return None

    if config.processing.n_workers > 1 and len(active) > 1:
        with ThreadPoolExecutor(max_workers=config.processing.n_workers) as pool:
            outcomes = list(pool.map(run, active))
    else:
        outcomes = [run(source) for source in active]

    results = [result for result in outcomes if result is not None]
    results.sort(key=lambda result: result.distance_km)
    return results


def step_rank(result: AnalysisResult,
              source: DataSource,
              step: int = 1,
              config: Optional[LocatorConfig] = None) -> Optional[AnalysisResult]:
    """
    Re-run a previous query for the next (or previous) nearest site.

    Uses the stored search point and the source's existing annotations;
    tower centers are not re-derived.

    Args:
        result: Earlier result from ``source``
        source: Data source that produced it
        step: +1 for the next nearest site, -1 for the previous one
        config: Locator configuration

    Returns:
        New AnalysisResult, or None when the new rank is out of range
    """
    new_rank = result.rank + step
    if new_rank < 1 or new_rank > result.total_sites:
        return None

    point = result.search_point
    return source.analyze(point['lat'], point['lng'], rank=new_rank, config=config)
