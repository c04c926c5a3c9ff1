"""
Command line runner for site and sector lookups.

Loads one data source per input file, prepares them (tower center
inference) and answers a single coordinate query against all of them.

Usage:
    python -m sector_locator.runner --input sites.geojson --query "53.3498, -6.2603"

    # Third nearest site of one dataset
    python -m sector_locator.runner --input sectors.geojson --query "53.3498 -6.2603" --rank 3

    # Several datasets, custom result attribute, JSON logs
    python -m sector_locator.runner --input north.geojson south.csv \\
        --query "53.3498, -6.2603" --custom-field cell_name --json-logs
"""
import argparse
import json
import sys
from pathlib import Path
from typing import List, Optional

from sector_locator.data.features import SiteFeature
from sector_locator.data.loaders import load_geojson, load_sites_csv
from sector_locator.data.sources import DataSource, analyze_sources
from sector_locator.utils.config import LocatorConfig, get_default_config, load_config
from sector_locator.utils.coordinates import LatLng, parse_coordinate_string
from sector_locator.utils.exceptions import SectorLocatorError
from sector_locator.utils.logging_config import configure_logging, get_logger

logger = get_logger(__name__)

EXIT_OK = 0
EXIT_ERROR = 1
EXIT_UNPARSED_QUERY = 2


def load_input_file(path: Path) -> List[SiteFeature]:
    """Load features from a GeoJSON or site CSV file, by extension."""
    if path.suffix.lower() == '.csv':
        return load_sites_csv(path)
    return load_geojson(path)


def build_sources(paths: List[Path], config: LocatorConfig) -> List[DataSource]:
    """Load and prepare one data source per input file."""
    sources = []
    for idx, path in enumerate(paths):
        source = DataSource(
            source_id=f"src_{idx}",
            name=path.name,
            features=load_input_file(path),
            custom_result_field=config.custom_result_field,
        )
        sources.append(source.prepare(config))
    return sources


def parse_query(query: str) -> LatLng:
    """
    Parse the query text as a coordinate pair.

    Raises:
        ValueError: If the query text is not a coordinate pair
    """
    point = parse_coordinate_string(query, lenient=True)
    if point is None:
        raise ValueError(f"Could not parse coordinates from '{query}'. Enter them as 'lat, lng'.")
    return point


def run_query(paths: List[Path], point: LatLng, rank: int, config: LocatorConfig) -> dict:
    """
    Answer one query across the given input files.

    Returns:
        Dictionary with the query point and the results, nearest first

    Raises:
        SectorLocatorError: If an input file cannot be loaded or prepared
    """
    sources = build_sources(paths, config)
    results = analyze_sources(point.lat, point.lng, sources, config, rank=rank)

    return {
        'query': {'lat': point.lat, 'lng': point.lng},
        'results': [result.to_dict() for result in results],
    }


def main(argv: Optional[List[str]] = None) -> int:
    """Main entry point for CLI."""
    parser = argparse.ArgumentParser(
        description='Sector Locator - find the site and sector serving a location',
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  python -m sector_locator.runner --input sites.geojson --query "53.3498, -6.2603"
  python -m sector_locator.runner --input sites.geojson --query "53.3498 -6.2603" --rank 2
        """
    )

    parser.add_argument(
        '--input',
        nargs='+',
        type=Path,
        required=True,
        help='GeoJSON or CSV files, one data source each'
    )

    parser.add_argument(
        '--query',
        required=True,
        help='Query coordinate as "lat, lng" or "lat lng"'
    )

    parser.add_argument(
        '--rank',
        type=int,
        default=1,
        help='1-based site rank to report (default: 1, the nearest site)'
    )

    parser.add_argument(
        '--config',
        type=Path,
        default=None,
        help='YAML configuration file (default: built-in defaults)'
    )

    parser.add_argument(
        '--custom-field',
        default=None,
        help='Feature property to report alongside each result'
    )

    parser.add_argument(
        '--log-level',
        default=None,
        help='Logging level (default: from config, INFO)'
    )

    parser.add_argument(
        '--json-logs',
        action='store_true',
        help='Emit logs as JSON lines'
    )

    args = parser.parse_args(argv)

    try:
        config = load_config(args.config) if args.config else get_default_config()
    except (FileNotFoundError, SectorLocatorError) as e:
        print(f"Configuration error: {e}", file=sys.stderr)
        return EXIT_ERROR

    updates = {}
    if args.custom_field:
        updates['custom_result_field'] = args.custom_field
    if args.log_level:
        updates['log_level'] = args.log_level.upper()
    if args.json_logs:
        updates['json_logs'] = True
    config = config.model_copy(update=updates)

    try:
        configure_logging(log_level=config.log_level, json_output=config.json_logs)
    except SectorLocatorError as e:
        print(f"Configuration error: {e}", file=sys.stderr)
        return EXIT_ERROR

    try:
        point = parse_query(args.query)
    except ValueError as e:
        logger.error("Query not understood", query=args.query, error=str(e))
        return EXIT_UNPARSED_QUERY

    try:
        output = run_query(args.input, point, args.rank, config)
    except SectorLocatorError as e:
        logger.error("Execution failed", error=str(e), exc_info=True)
        return EXIT_ERROR

    print(json.dumps(output, indent=2, default=str))
    return EXIT_OK


if __name__ == '__main__':
    sys.exit(main())
