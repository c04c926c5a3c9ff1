"""
Configuration management using Pydantic for validation.

Every tuned constant of the inference and ranking heuristics lives here as
a named, bounded field so deployments (and tests) can adjust them without
touching the algorithms.
"""
from pathlib import Path
from typing import Optional, Union

import yaml
from pydantic import BaseModel, Field, ValidationError, field_validator, model_validator

from sector_locator.utils.exceptions import ConfigurationError


class TowerCenterParams(BaseModel):
    """Parameters for tower center (anchor) inference."""
    shared_vertex_weight: float = Field(50.0, ge=0.0, description="Score per dataset feature sharing the vertex")
    first_vertex_bonus: float = Field(80.0, ge=0.0, description="Score bonus for the first ring vertex")
    sharpness_weight: float = Field(2.0, ge=0.0, description="Score per degree below 180 of the turning angle")
    regular_min_vertices: int = Field(3, ge=2, description="Ring must have more vertices than this to be regular")
    regular_min_mean_angle: float = Field(90.0, ge=0.0, le=180.0, description="Minimum mean turning angle (degrees)")
    regular_max_std_angle: float = Field(15.0, gt=0.0, description="Maximum turning angle std-dev (degrees)")


class SectorGeometryParams(BaseModel):
    """Parameters for sector wedge analysis."""
    collapse_tolerance_m: float = Field(2.0, ge=0.0, description="Vertices closer than this sit on the anchor (meters)")
    omni_gap_threshold_deg: float = Field(60.0, ge=0.0, le=360.0, description="Max angular gap below which a shape is omni")
    synthetic_beamwidth_deg: float = Field(65.0, gt=0.0, le=360.0, description="Beamwidth for azimuth-only features")


class SiteSearchParams(BaseModel):
    """Parameters for the bounding-box prefilter and site clustering."""
    lat_window_deg: float = Field(0.5, gt=0.0, le=90.0, description="Half-height of the prefilter window (degrees)")
    min_lng_scale: float = Field(0.1, gt=0.0, le=1.0, description="Floor for cos(latitude) when widening the window")
    cluster_precision: int = Field(4, ge=0, le=8, description="Decimal places of the site clustering key")


class ScoringParams(BaseModel):
    """Parameters for sector candidate scoring (lower score wins)."""
    near_field_m: float = Field(30.0, ge=0.0, description="Queries closer than this are near-field (meters)")
    inside_bonus: float = Field(10000.0, gt=0.0, description="Subtracted when the query lies inside the polygon")
    near_field_bonus: float = Field(5000.0, gt=0.0, description="Subtracted for near-field candidates")
    in_beam_bonus: float = Field(2000.0, gt=0.0, description="Subtracted when the query lies in the beam")
    explicit_azimuth_bonus: float = Field(10.0, ge=0.0, description="Tie-break for features with an azimuth attribute")

    @model_validator(mode='after')
    def tiers_outrank_deviation(self):
        """Each tier must beat the worst case of the tier below it."""
        spread = 180.0 + self.explicit_azimuth_bonus
        if self.in_beam_bonus <= spread:
            raise ValueError("in_beam_bonus must exceed the deviation range plus the azimuth tie-break")
        if self.near_field_bonus - self.in_beam_bonus <= spread:
            raise ValueError("near_field_bonus must outrank in_beam_bonus by more than the deviation range")
        if self.inside_bonus - self.near_field_bonus <= spread:
            raise ValueError("inside_bonus must outrank near_field_bonus by more than the deviation range")
        return self


class ProcessingParams(BaseModel):
    """Processing configuration."""
    chunk_size: int = Field(500, ge=1, description="Features annotated per progress chunk")
    dedup_precision: int = Field(5, ge=0, le=10, description="Decimal places of the dedup signature")
    n_workers: int = Field(1, ge=1, le=32, description="Parallel workers for multi-source queries")


class LocatorConfig(BaseModel):
    """Complete configuration for a locator deployment."""
    tower_center: TowerCenterParams = Field(default_factory=TowerCenterParams)
    sector_geometry: SectorGeometryParams = Field(default_factory=SectorGeometryParams)
    site_search: SiteSearchParams = Field(default_factory=SiteSearchParams)
    scoring: ScoringParams = Field(default_factory=ScoringParams)
    processing: ProcessingParams = Field(default_factory=ProcessingParams)
    custom_result_field: Optional[str] = Field(None, description="Property surfaced alongside every result")
    log_level: str = Field("INFO", description="Logging level")
    json_logs: bool = Field(False, description="Render logs as JSON")

    @field_validator('log_level')
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Normalize and validate the log level name."""
        level = v.upper()
        if level not in ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"):
            raise ValueError(f"Invalid log level: {v}")
        return level


def load_config(config_path: Union[str, Path]) -> LocatorConfig:
    """
    Load and validate configuration from a YAML file.

    Args:
        config_path: Path to YAML config file

    Returns:
        Validated LocatorConfig object

    Raises:
        FileNotFoundError: If config file doesn't exist
        ConfigurationError: If the YAML is malformed or fails validation

    Example:
        >>> config = load_config(Path("config/default.yaml"))
        >>> config.tower_center.shared_vertex_weight
        50.0
    """
    config_path = Path(config_path)
    if not config_path.exists():
        raise FileNotFoundError(f"Config file not found: {config_path}")

    try:
        with open(config_path, 'r') as f:
            config_dict = yaml.safe_load(f) or {}
    except yaml.YAMLError as e:
        raise ConfigurationError(f"Malformed YAML in {config_path}: {e}") from e

    if not isinstance(config_dict, dict):
        raise ConfigurationError(f"Config file {config_path} does not contain a mapping")

    try:
        return LocatorConfig(**config_dict)
    except ValidationError as e:
        raise ConfigurationError(f"Invalid configuration in {config_path}: {e}") from e


def get_default_config() -> LocatorConfig:
    """
    Get the default configuration.

    Returns:
        LocatorConfig with every heuristic at its tuned default
    """
    return LocatorConfig()
