"""
Tests for configuration management.
"""
import tempfile
from pathlib import Path

import pytest
from pydantic import ValidationError

from sector_locator.utils.config import (
    LocatorConfig,
    ProcessingParams,
    ScoringParams,
    SectorGeometryParams,
    SiteSearchParams,
    TowerCenterParams,
    get_default_config,
    load_config,
)
from sector_locator.utils.exceptions import ConfigurationError

DEFAULT_CONFIG = Path(__file__).resolve().parents[2] / "config" / "default.yaml"


def write_yaml(text):
    with tempfile.NamedTemporaryFile(mode='w', suffix='.yaml', delete=False) as f:
        f.write(text)
        return Path(f.name)


def test_shipped_defaults_match_code_defaults():
    """config/default.yaml documents exactly the built-in defaults."""
    config = load_config(DEFAULT_CONFIG)
    assert config.model_dump() == get_default_config().model_dump()


def test_default_values():
    config = get_default_config()

    assert config.tower_center.shared_vertex_weight == 50.0
    assert config.tower_center.first_vertex_bonus == 80.0
    assert config.sector_geometry.omni_gap_threshold_deg == 60.0
    assert config.sector_geometry.synthetic_beamwidth_deg == 65.0
    assert config.site_search.cluster_precision == 4
    assert config.scoring.inside_bonus == 10000.0
    assert config.processing.dedup_precision == 5
    assert config.custom_result_field is None
    assert config.log_level == "INFO"


def test_config_file_not_found():
    with pytest.raises(FileNotFoundError):
        load_config(Path("config/nonexistent.yaml"))


def test_partial_override():
    path = write_yaml("scoring:\n  near_field_m: 50\ncustom_result_field: cell_name\n")
    try:
        config = load_config(path)
    finally:
        path.unlink()

    assert config.scoring.near_field_m == 50.0
    assert config.scoring.inside_bonus == 10000.0
    assert config.custom_result_field == "cell_name"


def test_empty_file_gives_defaults():
    path = write_yaml("")
    try:
        config = load_config(path)
    finally:
        path.unlink()

    assert config == LocatorConfig()


def test_invalid_values_raise_configuration_error():
    path = write_yaml("sector_geometry:\n  omni_gap_threshold_deg: 400\n")
    try:
        with pytest.raises(ConfigurationError, match="Invalid configuration"):
            load_config(path)
    finally:
        path.unlink()


def test_malformed_yaml():
    path = write_yaml("scoring: [unclosed\n")
    try:
        with pytest.raises(ConfigurationError, match="Malformed YAML"):
            load_config(path)
    finally:
        path.unlink()


def test_non_mapping_yaml():
    path = write_yaml("- a\n- b\n")
    try:
        with pytest.raises(ConfigurationError):
            load_config(path)
    finally:
        path.unlink()


def test_log_level_normalized():
    assert LocatorConfig(log_level="debug").log_level == "DEBUG"

    with pytest.raises(ValidationError):
        LocatorConfig(log_level="verbose")


def test_param_bounds():
    with pytest.raises(ValidationError):
        TowerCenterParams(shared_vertex_weight=-1)

    with pytest.raises(ValidationError):
        SectorGeometryParams(synthetic_beamwidth_deg=0)

    with pytest.raises(ValidationError):
        SiteSearchParams(min_lng_scale=2.0)

    with pytest.raises(ValidationError):
        ProcessingParams(chunk_size=0)


def test_scoring_tiers_validated():
    params = ScoringParams(inside_bonus=20000, near_field_bonus=8000, in_beam_bonus=3000)
    assert params.in_beam_bonus == 3000

    with pytest.raises(ValidationError):
        ScoringParams(inside_bonus=5100)
