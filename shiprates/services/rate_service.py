"""
Rate Service

Caller-facing orchestrator:
- Validates the request before any carrier is touched
- Selects one named carrier or every registered carrier
- Runs carriers concurrently; within a carrier, both address checks
  complete before its rate call
- Returns responses in registration order, never completion order
- Relays the first carrier failure unchanged; no partial results, no retry
"""
import asyncio
import logging
from typing import Any, Dict, List, Mapping, Optional

from shiprates.core.exceptions import ConfigurationError, ValidationError
from shiprates.modules.shipping.carriers.base import BaseCarrier
from shiprates.schemas.shipping import RateRequest, RateResponse
from shiprates.schemas.validation import validate_rate_request

logger = logging.getLogger(__name__)


class RateService:
    """
    Rate shopping across registered carriers.
    """

    def __init__(self, carriers: Mapping[str, BaseCarrier]):
        if not carriers:
            raise ConfigurationError("RateService requires at least one carrier")
        self._carriers: Dict[str, BaseCarrier] = dict(carriers)

    def list_carriers(self) -> List[str]:
        """Registered carrier names, in registration order."""
        return list(self._carriers.keys())

    async def get_rate(
        self,
        request: Any,
        carrier_name: Optional[str] = None,
    ) -> List[RateResponse]:
        """
        Get shipping rates from one or more carriers.

        Args:
            request: RateRequest or raw mapping with the same fields
            carrier_name: Only quote this carrier; all carriers when empty or None

        Returns:
            One RateResponse per selected carrier, in registration order

        Raises:
            ValidationError: invalid request, unknown carrier, or an address
                rejected by a carrier
            AuthError / NetworkError / RateError: first carrier failure
        """
        try:
            validated = validate_rate_request(request)
        except ValidationError as e:
            raise ValidationError(
                f"Invalid rate request: {e.message}",
                details=e.details,
            ) from e

        if carrier_name:
            carrier = self._carriers.get(carrier_name)
            if carrier is None:
                raise ValidationError(
                    f"Carrier not found: {carrier_name}",
                    details={"available": self.list_carriers()},
                )
            selected = [carrier]
        else:
            selected = list(self._carriers.values())

        logger.info(f"Requesting rates from {[c.name for c in selected]}")

        tasks = [asyncio.ensure_future(self._quote(carrier, validated)) for carrier in selected]
        try:
            results = await asyncio.gather(*tasks)
        except Exception:
            for task in tasks:
                task.cancel()
            raise

        return list(results)

    async def _quote(self, carrier: BaseCarrier, request: RateRequest) -> RateResponse:
        await carrier.validate_address(request.origin)
        await carrier.validate_address(request.destination)
        return await carrier.get_rate(request)

    async def close(self) -> None:
        """Release every carrier's network resources."""
        for carrier in self._carriers.values():
            await carrier.close()
