"""
Structured logging setup for the locator, built on structlog.

Logs go to stderr so command output on stdout stays machine readable.
Console rendering is human-readable; JSON rendering suits shipped batch logs.
"""
import sys
import logging
import structlog
from pathlib import Path
from typing import Optional

from sector_locator.utils.exceptions import ConfigurationError

VALID_LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


def _resolve_level(log_level: str) -> int:
    level_name = str(log_level).upper()
    if level_name not in VALID_LOG_LEVELS:
        raise ConfigurationError(
            f"Invalid log level '{log_level}'. Must be one of: {list(VALID_LOG_LEVELS)}"
        )
    return getattr(logging, level_name)


def configure_logging(
    log_level: str = "INFO",
    log_file: Optional[Path] = None,
    json_output: bool = False
):
    """
    Configure structured logging for the locator.

    Args:
        log_level: Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        log_file: Optional file that receives a copy of every log line
        json_output: If True, render JSON lines; else human-readable console

    Raises:
        ConfigurationError: If log_level is not a known level name

    Example:
        >>> from sector_locator.utils.logging_config import configure_logging, get_logger
        >>> configure_logging(log_level="INFO", json_output=False)
        >>> logger = get_logger(__name__)
        >>> logger.info("source_prepared", source="north_region", features=1200)
    """
    level = _resolve_level(log_level)

    # force=True so repeated calls (CLI re-entry, tests) replace old handlers
    logging.basicConfig(
        format="%(message)s",
        stream=sys.stderr,
        level=level,
        force=True,
    )

    processors = [
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
    ]

    if json_output:
        processors.append(structlog.processors.JSONRenderer())
    else:
        processors.append(structlog.dev.ConsoleRenderer(colors=False))

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=False,
    )

    if log_file:
        log_file = Path(log_file)
        log_file.parent.mkdir(parents=True, exist_ok=True)
        file_handler = logging.FileHandler(log_file)
        file_handler.setLevel(level)
        file_handler.setFormatter(logging.Formatter('%(message)s'))
        logging.getLogger().addHandler(file_handler)


def get_logger(name: str):
    """
    Get a structured logger instance.

    Args:
        name: Logger name (usually __name__)

    Returns:
        Structured logger

    Example:
        >>> logger = get_logger(__name__)
        >>> logger.info("site_selected", rank=1, total_sites=12, distance_km=0.84)
    """
    return structlog.get_logger(name)
