"""
Request validation

Structural validation of inbound rate requests. Runs before any carrier
or network call. pydantic failures are flattened into a single
ValidationError message; the pydantic error object is only kept as the
exception cause.
"""
from typing import Any, Type, TypeVar

from pydantic import BaseModel
from pydantic import ValidationError as PydanticValidationError

from shiprates.core.exceptions import ValidationError
from shiprates.schemas.shipping import Address, Package, RateRequest

ModelT = TypeVar("ModelT", bound=BaseModel)


def format_validation_errors(exc: PydanticValidationError) -> str:
    """Render pydantic errors as 'location: message; location: message'."""
    parts = []
    for error in exc.errors():
        location = ".".join(str(part) for part in error.get("loc", ()))
        message = error.get("msg", "invalid value")
        parts.append(f"{location}: {message}" if location else message)
    return "; ".join(parts) or "invalid input"


def _validate(model: Type[ModelT], data: Any) -> ModelT:
    # Instances built with model_construct() skip validation, so re-check them
    if isinstance(data, BaseModel):
        data = data.model_dump()
    try:
        return model.model_validate(data)
    except PydanticValidationError as e:
        raise ValidationError(
            format_validation_errors(e),
            details={"fields": [".".join(str(p) for p in err.get("loc", ())) for err in e.errors()]},
        ) from e


def validate_address(data: Any) -> Address:
    """Parse and validate an address."""
    return _validate(Address, data)


def validate_package(data: Any) -> Package:
    """Parse and validate a package."""
    return _validate(Package, data)


def validate_rate_request(data: Any) -> RateRequest:
    """Parse and validate a rate request."""
    return _validate(RateRequest, data)
