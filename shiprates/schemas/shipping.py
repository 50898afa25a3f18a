"""
Shipping Schemas

Carrier-agnostic pydantic models for rate shopping. Field names are
snake_case in Python; camelCase aliases (postalCode, countryCode, ...) are
accepted on input and emitted by model_dump(by_alias=True).
"""
from datetime import datetime
from enum import Enum
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, EmailStr, Field, field_validator
from pydantic.alias_generators import to_camel

from shiprates.core.utils import utcnow


class DimensionUnit(str, Enum):
    INCH = "IN"
    CENTIMETER = "CM"


class WeightUnit(str, Enum):
    POUND = "LB"
    KILOGRAM = "KG"


# ISO 4217 code used when a carrier omits the currency
DEFAULT_CURRENCY = "USD"


class ShippingModel(BaseModel):
    """Base for all domain models: accepts snake_case names or camelCase aliases."""
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
    )


# ==================== Request Schemas ====================


class Address(ShippingModel):
    """Physical address (origin or destination)."""
    street1: str = Field(..., min_length=1)
    street2: Optional[str] = None
    city: str = Field(..., min_length=1)
    state: str = Field(..., min_length=2, max_length=3)  # e.g. "CA", "ON"
    postal_code: str = Field(..., min_length=1)
    country_code: str = Field(..., min_length=2, max_length=2)  # ISO 3166-1 alpha-2
    company_name: Optional[str] = None
    contact_name: Optional[str] = None
    contact_phone: Optional[str] = None
    contact_email: Optional[EmailStr] = None

    @field_validator("country_code")
    @classmethod
    def validate_country_code(cls, v):
        return v.upper()


class Package(ShippingModel):
    """Package dimensions and weight."""
    length: float = Field(..., gt=0, strict=True)
    width: float = Field(..., gt=0, strict=True)
    height: float = Field(..., gt=0, strict=True)
    dimension_unit: DimensionUnit
    weight: float = Field(..., gt=0, strict=True)
    weight_unit: WeightUnit


class RateRequest(ShippingModel):
    """Rate quote request."""
    origin: Address
    destination: Address
    packages: List[Package] = Field(..., min_length=1)
    service_code: Optional[str] = None  # filter to a single carrier service


# ==================== Response Schemas ====================


class RateCost(ShippingModel):
    """
    Cost breakdown for a single service option.

    surcharges and taxes are omitted (None) when the carrier reports no
    nonzero amount, never defaulted to zero.
    """
    base_charge: float
    surcharges: Optional[float] = None
    taxes: Optional[float] = None
    total: float
    currency: str = Field(DEFAULT_CURRENCY, pattern=r"^[A-Z]{3}$")

    @field_validator("currency", mode="before")
    @classmethod
    def normalize_currency(cls, v):
        if isinstance(v, str):
            return v.strip().upper()
        return v


class RateQuote(ShippingModel):
    """Single service quote."""
    service_code: str
    service_name: str
    cost: RateCost
    estimated_days: Optional[int] = None
    warnings: Optional[List[str]] = None


class RateResponse(ShippingModel):
    """Rate response from one carrier."""
    carrier: str
    quotes: List[RateQuote] = Field(default_factory=list)
    requested_at: datetime = Field(default_factory=utcnow)
    expires_at: Optional[datetime] = None

    def to_json_dict(self) -> dict:
        """camelCase JSON-ready dict without unset optional fields."""
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)
