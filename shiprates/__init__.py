"""
shiprates - normalized shipping rate quotes across carriers.
"""
from shiprates.core.exceptions import (
    AuthError,
    CarrierError,
    ConfigurationError,
    NetworkError,
    RateError,
    ShipRatesError,
    ValidationError,
)
from shiprates.modules.shipping import BaseCarrier, CarrierFactory, UPSCarrier
from shiprates.schemas.shipping import (
    Address,
    DimensionUnit,
    Package,
    RateCost,
    RateQuote,
    RateRequest,
    RateResponse,
    WeightUnit,
)
from shiprates.schemas.validation import (
    validate_address,
    validate_package,
    validate_rate_request,
)
from shiprates.services.rate_service import RateService

__version__ = "1.0.0"

__all__ = [
    "Address",
    "AuthError",
    "BaseCarrier",
    "CarrierError",
    "CarrierFactory",
    "ConfigurationError",
    "DimensionUnit",
    "NetworkError",
    "Package",
    "RateCost",
    "RateError",
    "RateQuote",
    "RateRequest",
    "RateResponse",
    "RateService",
    "ShipRatesError",
    "UPSCarrier",
    "ValidationError",
    "WeightUnit",
    "validate_address",
    "validate_package",
    "validate_rate_request",
]
