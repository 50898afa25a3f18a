"""
shiprates Exception Hierarchy

Structured exception classes for carrier rate shopping.
All exceptions include code, message, and details so callers can branch on
the code and log the details without parsing messages.

Exception Hierarchy:
    ShipRatesError
    ├── ConfigurationError
    └── CarrierError
        ├── ValidationError
        ├── AuthError
        ├── NetworkError
        └── RateError

The four CarrierError kinds are the complete failure surface of a carrier
call. Raw library failures (httpx, pydantic, json) are re-raised as one of
them with the original exception chained as __cause__.
"""
import logging
from typing import Optional, Dict, Any

logger = logging.getLogger(__name__)


class ShipRatesError(Exception):
    """
    Base exception for all shiprates errors.

    Attributes:
        message: Human-readable error description
        code: Machine-readable error code for programmatic handling
        details: Additional context for debugging/audit
        severity: P0-P3 severity level
    """

    default_code: str = "SHIPRATES_ERROR"
    default_severity: str = "P2"

    def __init__(
        self,
        message: str,
        code: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None,
        severity: Optional[str] = None,
    ):
        self.message = message
        self.code = code or self.default_code
        self.details = details or {}
        self.severity = severity or self.default_severity
        super().__init__(self.message)

    @property
    def original_error(self) -> Optional[BaseException]:
        """The wrapped underlying failure, if any."""
        return self.__cause__

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for logging/serialization."""
        data = {
            "error_type": self.__class__.__name__,
            "code": self.code,
            "message": self.message,
            "severity": self.severity,
            "details": self.details,
        }
        if self.original_error is not None:
            data["original_error"] = str(self.original_error)
        return data

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(code={self.code!r}, message={self.message!r})"


class ConfigurationError(ShipRatesError):
    """Missing or invalid configuration detected at startup/construction."""
    default_code = "CONFIGURATION_ERROR"
    default_severity = "P0"


# =============================================================================
# CARRIER ERRORS
# =============================================================================

class CarrierError(ShipRatesError):
    """Base exception for carrier integration errors."""
    default_code = "CARRIER_ERROR"
    default_severity = "P1"


class ValidationError(CarrierError):
    """Malformed input, unknown carrier, or address rejected by a carrier."""
    default_code = "VALIDATION_ERROR"
    default_severity = "P3"


class AuthError(CarrierError):
    """Token acquisition failed (non-2xx, timeout, malformed token body)."""
    default_code = "AUTH_ERROR"
    default_severity = "P0"  # Auth failures mean the carrier is unusable

    def __init__(
        self,
        message: str,
        status_code: Optional[int] = None,
        **kwargs
    ):
        self.status_code = status_code
        details = kwargs.pop("details", None) or {}
        if status_code is not None:
            details["status_code"] = status_code
        super().__init__(message, details=details, **kwargs)


class NetworkError(CarrierError):
    """Transport failure or timeout during a carrier API call."""
    default_code = "NETWORK_ERROR"
    default_severity = "P2"

    def __init__(
        self,
        message: str,
        status_code: Optional[int] = None,
        **kwargs
    ):
        self.status_code = status_code
        details = kwargs.pop("details", None) or {}
        details["status_code"] = status_code
        super().__init__(message, details=details, **kwargs)


class RateError(CarrierError):
    """Carrier API responded with an error status or an unparseable body."""
    default_code = "RATE_ERROR"

    def __init__(
        self,
        message: str,
        status_code: Optional[int] = None,
        response_body: Any = None,
        **kwargs
    ):
        self.status_code = status_code
        self.response_body = response_body
        details = kwargs.pop("details", None) or {}
        details.update({
            "status_code": status_code,
            "response_body": response_body,
        })
        super().__init__(message, details=details, **kwargs)


# =============================================================================
# EXCEPTION CATALOG
# =============================================================================

EXCEPTION_CATALOG = {
    "CONFIGURATION_ERROR": {"class": ConfigurationError, "severity": "P0"},
    "VALIDATION_ERROR": {"class": ValidationError, "severity": "P3"},
    "AUTH_ERROR": {"class": AuthError, "severity": "P0"},
    "NETWORK_ERROR": {"class": NetworkError, "severity": "P2"},
    "RATE_ERROR": {"class": RateError, "severity": "P1"},
}
