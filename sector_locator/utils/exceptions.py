"""
Custom exception hierarchy for Sector Locator.

All custom exceptions inherit from SectorLocatorError for easy catching.
"""


class SectorLocatorError(Exception):
    """Base exception for all Sector Locator errors."""
    pass


class ConfigurationError(SectorLocatorError):
    """Configuration-related errors.

    Raised when configuration loading or validation fails.

    Example:
        >>> raise ConfigurationError("Invalid config: 'scoring' must be a mapping")
    """
    pass


class DataValidationError(SectorLocatorError):
    """Data validation errors.

    Raised when too many input features fail validation checks.

    Attributes:
        invalid_rows: Number of features that failed validation
        details: Dictionary with validation error details
    """

    def __init__(self, message: str, invalid_rows: int = 0, details: dict = None):
        super().__init__(message)
        self.invalid_rows = invalid_rows
        self.details = details or {}

    def __str__(self):
        base = super().__str__()
        if self.invalid_rows > 0:
            return f"{base} (invalid_rows={self.invalid_rows})"
        return base


class DataLoadError(SectorLocatorError):
    """Data loading errors.

    Raised when feature files cannot be loaded or parsed.

    Example:
        >>> raise DataLoadError("Failed to load sites.geojson: file not found")
    """
    pass


class GeometryError(SectorLocatorError):
    """Geometric input errors.

    Raised when a query coordinate is outside the valid lat/lng range.

    Example:
        >>> raise GeometryError("Invalid coordinates: latitude out of range")
    """
    pass


class AnalysisError(SectorLocatorError):
    """Dataset-level analysis errors.

    Raised when a query cannot be answered at all. Per-feature problems
    never surface as this error, they degrade to safe defaults instead.

    Attributes:
        stage: Name of the analysis stage that failed
    """

    def __init__(self, message: str, stage: str = None):
        super().__init__(message)
        self.stage = stage

    def __str__(self):
        base = super().__str__()
        if self.stage:
            return f"{base} (stage={self.stage})"
        return base


class NoFeaturesError(AnalysisError):
    """The dataset handed to a query contains no features."""

    def __init__(self, message: str = "No features found in dataset to analyze."):
        super().__init__(message, stage="input")


class NoSuitableSiteError(AnalysisError):
    """Site ranking produced no site to select."""

    def __init__(self, message: str = "No suitable site found."):
        super().__init__(message, stage="site_ranking")


class DatasetNotReadyError(AnalysisError):
    """A data source was queried before its tower centers were inferred."""

    def __init__(self, message: str = "Data source has not been prepared."):
        super().__init__(message, stage="preparation")
