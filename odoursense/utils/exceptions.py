"""
Custom Exception Hierarchy

Provides specific exception types for the failure modes of a breath
analysis request, each carrying structured error information.
"""
from typing import Optional, Dict, Any


class OdourSenseError(Exception):
    """Base exception for all breath analysis errors."""

    def __init__(
        self,
        message: str,
        code: str = "UNKNOWN_ERROR",
        details: Optional[Dict[str, Any]] = None
    ):
        super().__init__(message)
        self.message = message
        self.code = code
        self.details = details or {}

    def to_dict(self) -> Dict[str, Any]:
        """Convert exception to dictionary for API responses."""
        return {
            "error": self.code,
            "message": self.message,
            "details": self.details
        }


class InvalidReadingError(OdourSenseError):
    """A sensor channel value is missing, NaN or negative."""

    def __init__(
        self,
        message: str,
        channel: str = "unknown",
        details: Optional[Dict[str, Any]] = None
    ):
        super().__init__(
            message=message,
            code="INVALID_READING",
            details={"channel": channel, **(details or {})}
        )
        self.channel = channel


class ConfigurationError(OdourSenseError):
    """Threshold configuration is missing or inconsistent for a channel."""

    def __init__(
        self,
        message: str,
        channel: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None
    ):
        super().__init__(
            message=message,
            code="CONFIGURATION_ERROR",
            details={"channel": channel, **(details or {})}
        )
        self.channel = channel


class InvalidSymptomError(OdourSenseError):
    """A symptom flag carries a value that is not a boolean."""

    def __init__(
        self,
        message: str,
        symptom: str = "unknown",
        details: Optional[Dict[str, Any]] = None
    ):
        super().__init__(
            message=message,
            code="INVALID_SYMPTOM",
            details={"symptom": symptom, **(details or {})}
        )
        self.symptom = symptom


class UpstreamUnavailableError(OdourSenseError):
    """The history or threshold store failed to answer."""

    def __init__(
        self,
        message: str,
        collaborator: str = "unknown",
        details: Optional[Dict[str, Any]] = None
    ):
        super().__init__(
            message=message,
            code="UPSTREAM_UNAVAILABLE",
            details={"collaborator": collaborator, **(details or {})}
        )
        self.collaborator = collaborator
