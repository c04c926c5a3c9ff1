"""
Feature loading functions with validation.

Turns already-parsed vector data (GeoJSON documents, site CSV exports,
GeoDataFrames) into SiteFeature lists, with schema validation, data
quality reporting and duplicate removal.
"""
import json
from pathlib import Path
from typing import Any, Dict, List, Mapping, Optional, Tuple, Union

import geopandas as gpd
import pandas as pd
from pydantic import ValidationError

from sector_locator.data.features import SiteFeature, coord_all
from sector_locator.data.schemas import GeoJSONFeature
from sector_locator.utils.exceptions import DataLoadError, DataValidationError
from sector_locator.utils.logging_config import get_logger

logger = get_logger(__name__)

# Fail the whole load when more than this share of features is invalid
MAX_INVALID_RATIO = 0.10


def _validate_features(raw_features: List[Any]) -> Tuple[List[SiteFeature], List[Dict[str, Any]], int]:
    """
    Validate raw GeoJSON features against the GeoJSONFeature schema.

    Returns:
        Tuple of (valid features, error records, features without geometry)
    """
    valid = []
    errors = []
    empty = 0

    for idx, raw in enumerate(raw_features):
        try:
            model = GeoJSONFeature.model_validate(raw)
        except ValidationError as e:
            errors.append({'index': idx, 'errors': e.errors()})
            continue

        if model.geometry is None:
            empty += 1
            continue

        valid.append(SiteFeature(
            geometry=model.geometry.model_dump(),
            properties=dict(model.properties),
        ))

    return valid, errors, empty


def features_from_geojson(document: Mapping[str, Any]) -> List[SiteFeature]:
    """
    Build features from a parsed GeoJSON FeatureCollection.

    Features without geometry are dropped silently; features failing
    validation are dropped and reported.

    Args:
        document: FeatureCollection mapping (``{"type": ..., "features": [...]}``)

    Returns:
        List of validated SiteFeature objects (not yet annotated)

    Raises:
        DataValidationError: If the document has no feature list, or more
            than 10% of its features are invalid
    """
    raw_features = document.get('features') if isinstance(document, Mapping) else None
    if not isinstance(raw_features, list):
        raise DataValidationError("GeoJSON document has no 'features' list")

    features, errors, empty = _validate_features(raw_features)
    total = len(raw_features)

    if errors:
        error_rate = len(errors) / total
        logger.warning(
            "feature_validation_errors",
            total_features=total,
            invalid_features=len(errors),
            error_rate=f"{error_rate:.2%}",
        )
        if error_rate > MAX_INVALID_RATIO:
            raise DataValidationError(
                f"Feature validation failed: {len(errors)} invalid features",
                invalid_rows=len(errors),
                details={
                    'total_features': total,
                    'error_rate': error_rate,
                    'sample_errors': errors[:5],
                },
            )

    logger.info("features_loaded", features=len(features), dropped_empty=empty, dropped_invalid=len(errors))
    return features


def load_geojson(file_path: Union[str, Path]) -> List[SiteFeature]:
    """
    Load features from a GeoJSON file.

    Args:
        file_path: Path to a .geojson / .json FeatureCollection

    Returns:
        List of validated SiteFeature objects

    Raises:
        DataLoadError: If the file is missing, is not UTF-8 or is not valid JSON
        DataValidationError: If too many features are invalid
    """
    file_path = Path(file_path)
    if not file_path.exists():
        raise DataLoadError(f"GeoJSON file not found: {file_path}")

    logger.info("loading_geojson", file=str(file_path))

    try:
        with open(file_path, 'r', encoding='utf-8') as f:
            document = json.load(f)
    except (OSError, UnicodeDecodeError, json.JSONDecodeError) as e:
        raise DataLoadError(f"Failed to read GeoJSON file {file_path}: {e}") from e

    return features_from_geojson(document)


def load_sites_csv(file_path: Union[str, Path],
                   lat_col: str = 'latitude',
                   lng_col: str = 'longitude') -> List[SiteFeature]:
    """
    Load a site list CSV as Point features.

    Every column of a row becomes a feature property. Rows with missing
    or out-of-range coordinates are dropped.

    Args:
        file_path: Path to the CSV file
        lat_col: Latitude column name
        lng_col: Longitude column name

    Returns:
        List of Point SiteFeature objects

    Raises:
        DataLoadError: If the file is missing, unreadable or lacks the
            coordinate columns
    """
    file_path = Path(file_path)
    if not file_path.exists():
        raise DataLoadError(f"Site CSV not found: {file_path}")

    logger.info("loading_sites_csv", file=str(file_path))

    try:
        df = pd.read_csv(file_path)
    except (OSError, ValueError, pd.errors.ParserError) as e:
        raise DataLoadError(f"Failed to read site CSV: {e}") from e

    missing = {lat_col, lng_col} - set(df.columns)
    if missing:
        raise DataLoadError(
            f"Site CSV missing coordinate columns: {sorted(missing)}. "
            f"Available columns: {sorted(df.columns.tolist())}"
        )

    lat = pd.to_numeric(df[lat_col], errors='coerce')
    lng = pd.to_numeric(df[lng_col], errors='coerce')
    valid_mask = lat.between(-90, 90) & lng.between(-180, 180)

    dropped = int((~valid_mask).sum())
    if dropped:
        logger.warning("site_rows_dropped", reason="invalid coordinates", rows=dropped)

    # object dtype so NaN cells become None instead of float('nan')
    records = df[valid_mask].astype(object).where(df[valid_mask].notna(), None).to_dict('records')
    features = [
        SiteFeature(
            geometry={'type': 'Point', 'coordinates': [float(x), float(y)]},
            properties=record,
        )
        for record, x, y in zip(records, lng[valid_mask], lat[valid_mask])
    ]

    logger.info("sites_loaded", rows=len(df), features=len(features))
    return features


def features_from_geodataframe(gdf: gpd.GeoDataFrame) -> List[SiteFeature]:
    """
    Convert a GeoDataFrame (EPSG:4326) into features.

    Non-geometry columns become properties. Rows with empty geometry are
    skipped.
    """
    if not isinstance(gdf, gpd.GeoDataFrame):
        raise DataValidationError(f"Expected a GeoDataFrame, got {type(gdf).__name__}")

    if gdf.crs is not None and gdf.crs.to_epsg() != 4326:
        logger.info("reprojecting_geodataframe", source_crs=str(gdf.crs))
        gdf = gdf.to_crs(epsg=4326)

    return features_from_geojson(json.loads(gdf.to_json(drop_id=True)))


def feature_signature(feature: SiteFeature, precision: int = 5) -> Optional[str]:
    """
    Identity of a feature for de-duplication.

    Geometry type plus every vertex rounded to ``precision`` decimals
    (5 decimals is about 1.1 m). None for features without coordinates.
    """
    coords = coord_all(feature.geometry)
    if not coords:
        return None
    vertices = ';'.join(f"{c.lng:.{precision}f},{c.lat:.{precision}f}" for c in coords)
    return f"{feature.geometry_type}|{vertices}"


def deduplicate_features(features: List[SiteFeature], precision: int = 5) -> List[SiteFeature]:
    """
    Drop repeated and empty features, keeping the first occurrence.

    Site exports frequently contain the same placemark several times
    (one per folder or style); duplicates would otherwise inflate the
    vertex frequency index.
    """
    seen = set()
    unique = []
    empty = 0

    for feature in features:
        signature = feature_signature(feature, precision)
        if signature is None:
            empty += 1
            continue
        if signature not in seen:
            seen.add(signature)
            unique.append(feature)

    logger.info(
        "features_deduplicated",
        input=len(features),
        unique=len(unique),
        duplicates=len(features) - len(unique) - empty,
        empty=empty,
    )
    return unique
