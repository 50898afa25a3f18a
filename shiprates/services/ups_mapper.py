"""
UPS Rating schema mapping

Pure translation between shiprates models and the UPS Rating API JSON.
No I/O happens here.

Request side:
- street1/street2 are joined into the single UPS AddressLine with ", "
- dimensions and weight are sent as strings, formatted like JSON numbers
  (10.0 -> "10", 2.5 -> "2.5")
- one UPS Package entry per domain package, order preserved

Response side:
- one RateQuote per RatedShipment entry, order preserved
- base charge falls back to the total when UPS omits BaseServiceCharge
- SurchargesAndTaxes is a single UPS number; it fills both surcharges and
  taxes, and only when nonzero
- estimated_days only when GuaranteedDaysToDelivery is present
"""
import logging
from datetime import datetime, timedelta
from typing import Any, Dict, List, Optional

from shiprates.core.exceptions import RateError
from shiprates.core.utils import utcnow
from shiprates.schemas.shipping import (
    DEFAULT_CURRENCY,
    Address,
    Package,
    RateCost,
    RateQuote,
    RateRequest,
    RateResponse,
)

logger = logging.getLogger(__name__)

UPS_CARRIER_NAME = "UPS"

ADDRESS_LINE_SEPARATOR = ", "

# UPS rate quotes are honoured for 30 minutes
UPS_RATE_TTL_SECONDS = 1800


def format_number(value: float) -> str:
    """Render a number the way it prints in JSON: no trailing '.0'."""
    value = float(value)
    if value.is_integer():
        return str(int(value))
    return repr(value)


def map_address_to_ups(address: Address) -> Dict[str, str]:
    """Convert a domain Address to a UPS Address block."""
    address_line = address.street1
    if address.street2:
        address_line = f"{address.street1}{ADDRESS_LINE_SEPARATOR}{address.street2}"

    return {
        "AddressLine": address_line,
        "City": address.city,
        "StateProvinceCode": address.state,
        "PostalCode": address.postal_code,
        "CountryCode": address.country_code,
    }


def map_package_to_ups(package: Package) -> Dict[str, Any]:
    """Convert a domain Package to a UPS Package block."""
    return {
        "Dimensions": {
            "Length": format_number(package.length),
            "Width": format_number(package.width),
            "Height": format_number(package.height),
            "UnitOfMeasurement": {"Code": package.dimension_unit.value},
        },
        "PackageWeight": {
            "UnitOfMeasurement": {"Code": package.weight_unit.value},
            "Weight": format_number(package.weight),
        },
    }


def map_rate_request_to_ups(request: RateRequest) -> Dict[str, Any]:
    """Convert a domain RateRequest to a UPS rating request body."""
    shipment: Dict[str, Any] = {
        "Shipper": {"Address": map_address_to_ups(request.origin)},
        "ShipTo": {"Address": map_address_to_ups(request.destination)},
        "Package": [map_package_to_ups(pkg) for pkg in request.packages],
    }

    if request.service_code:
        shipment["Service"] = {"Code": request.service_code}

    return {
        "RatingOption": "Rate",
        "Shipment": shipment,
    }


def _money(block: Any) -> Optional[float]:
    """MonetaryValue of a UPS charge block, or None when the block is absent."""
    if block is None:
        return None
    return float(block["MonetaryValue"])


def _delivery_days(value: Any) -> Optional[int]:
    """Whole days to delivery; blank or non-integer values are omitted."""
    if value is None:
        return None
    text = str(value).strip()
    if not text:
        return None
    try:
        return int(text)
    except ValueError:
        logger.debug(f"Ignoring unparseable GuaranteedDaysToDelivery: {text!r}")
        return None


def _warnings(rated_shipment: Dict[str, Any]) -> Optional[List[str]]:
    alerts = rated_shipment.get("RatedShipmentAlert")
    if not alerts:
        return None
    if isinstance(alerts, dict):
        alerts = [alerts]
    messages = [str(alert.get("Description") or alert.get("Code")) for alert in alerts]
    return messages or None


def map_ups_rate_to_quote(rated_shipment: Dict[str, Any]) -> RateQuote:
    """Parse one UPS RatedShipment entry into a RateQuote."""
    total_charges = rated_shipment["TotalCharges"]
    total = float(total_charges["MonetaryValue"])

    base_charge = _money(rated_shipment.get("BaseServiceCharge"))
    if base_charge is None:
        base_charge = total

    surcharges = _money(rated_shipment.get("SurchargesAndTaxes"))
    if surcharges is not None and surcharges <= 0:
        surcharges = None

    estimated_days = _delivery_days(rated_shipment.get("GuaranteedDaysToDelivery"))

    return RateQuote(
        service_code=str(rated_shipment["ServiceTypeCode"]),
        service_name=str(rated_shipment["ServiceType"]),
        cost=RateCost(
            base_charge=base_charge,
            surcharges=surcharges,
            # UPS reports one combined figure for surcharges and taxes
            taxes=surcharges,
            total=total,
            currency=total_charges.get("CurrencyCode") or DEFAULT_CURRENCY,
        ),
        estimated_days=estimated_days,
        warnings=_warnings(rated_shipment),
    )


def map_ups_response_to_rate_response(
    payload: Any,
    carrier_name: str = UPS_CARRIER_NAME,
    requested_at: Optional[datetime] = None,
) -> RateResponse:
    """
    Convert a UPS rating response body to a RateResponse.

    Raises:
        RateError: if the payload does not have the expected structure
    """
    try:
        rated_shipments = payload["RateResponse"].get("RatedShipment") or []
        if isinstance(rated_shipments, dict):
            rated_shipments = [rated_shipments]
        quotes = [map_ups_rate_to_quote(rs) for rs in rated_shipments]
    except (KeyError, TypeError, ValueError, AttributeError) as e:
        logger.error(f"Could not parse UPS rating response: {e!r}")
        raise RateError(
            "Failed to parse rate response",
            response_body=payload if isinstance(payload, (dict, list, str)) else None,
        ) from e

    requested_at = requested_at or utcnow()
    return RateResponse(
        carrier=carrier_name,
        quotes=quotes,
        requested_at=requested_at,
        expires_at=requested_at + timedelta(seconds=UPS_RATE_TTL_SECONDS),
    )
