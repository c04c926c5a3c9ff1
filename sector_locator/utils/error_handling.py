"""
Error handling utilities for the locator.

Per-feature geometry work must never abort a query, so the heuristics use
degrade_on_error to swap a failure for a safe default. Dataset-level
problems are raised through the helpers below instead.
"""
from functools import wraps
from typing import Any, Callable, Sequence, Tuple, Type

from shapely.errors import ShapelyError

from sector_locator.utils.exceptions import NoFeaturesError
from sector_locator.utils.logging_config import get_logger

logger = get_logger(__name__)

# Failures raised by malformed rings, empty coordinate lists and GEOS
GEOMETRY_ERRORS: Tuple[Type[BaseException], ...] = (
    ValueError,
    TypeError,
    IndexError,
    KeyError,
    ZeroDivisionError,
    AttributeError,
    ShapelyError,
)


def degrade_on_error(fallback: Any, errors: Tuple[Type[BaseException], ...] = GEOMETRY_ERRORS):
    """
    Decorator returning a fallback value when a geometric computation fails.

    Parameters
    ----------
    fallback : Any
        Value returned on failure. If callable, it is called with the
        decorated function's arguments and its result is returned.
    errors : tuple of exception types
        Exceptions treated as recoverable geometry failures

    Returns
    -------
    Callable
        Decorated function that never raises one of ``errors``
    """
    def decorator(func: Callable) -> Callable:
        @wraps(func)
        def wrapper(*args, **kwargs):
            try:
                return func(*args, **kwargs)
            except errors as e:
                logger.warning(
                    f"{func.__name__} failed, using fallback",
                    error=str(e),
                    error_type=type(e).__name__,
                )
                if callable(fallback):
                    return fallback(*args, **kwargs)
                return fallback
        return wrapper
    return decorator


def validate_features_not_empty(features: Sequence, name: str = "dataset") -> None:
    """
    Validate that a feature collection has at least one feature.

    Parameters
    ----------
    features : Sequence
        Features to check
    name : str
        Name of the collection for the log entry

    Raises
    ------
    NoFeaturesError
        If the collection is empty
    """
    if features is None or len(features) == 0:
        logger.warning("Empty feature collection", collection=name)
        raise NoFeaturesError()
