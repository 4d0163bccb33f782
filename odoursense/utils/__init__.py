"""
Utilities Package - Logging and Exception Handling
"""
from .logging import get_logger, setup_logging
from .exceptions import (
    OdourSenseError,
    InvalidReadingError,
    InvalidSymptomError,
    ConfigurationError,
    UpstreamUnavailableError,
)

__all__ = [
    "get_logger",
    "setup_logging",
    "OdourSenseError",
    "InvalidReadingError",
    "InvalidSymptomError",
    "ConfigurationError",
    "UpstreamUnavailableError",
]
