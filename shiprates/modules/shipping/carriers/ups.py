"""
UPS Carrier Implementation

- Implements BaseCarrier interface
- Owns one httpx.AsyncClient, one UPSAuth token cache and one UPSClient
- Registered via @register_carrier decorator
"""
import logging
from datetime import datetime
from typing import Any, Callable, Mapping, Optional

import httpx

from shiprates.core.exceptions import ValidationError
from shiprates.core.utils import utcnow
from shiprates.modules.shipping.carriers import register_carrier
from shiprates.modules.shipping.carriers.base import BaseCarrier
from shiprates.schemas.shipping import Address, RateRequest, RateResponse
from shiprates.services.ups_auth import DEFAULT_REFRESH_BUFFER_SECONDS, UPSAuth
from shiprates.services.ups_client import RATING_PATH, UPSClient, UPSCredentials
from shiprates.services.ups_mapper import (
    UPS_CARRIER_NAME,
    map_rate_request_to_ups,
    map_ups_response_to_rate_response,
)

logger = logging.getLogger(__name__)

# Countries UPS rating is enabled for
UPS_SUPPORTED_COUNTRIES = frozenset({
    "US",
    "CA",
    "MX",
    "GB",
    "DE",
    "FR",
    "JP",
    "CN",
    "AU",
})


@register_carrier("ups")
class UPSCarrier(BaseCarrier):
    """
    UPS shipping carrier implementation.

    A caller-supplied http_client is shared, not closed by close().
    """

    def __init__(
        self,
        credentials: UPSCredentials,
        http_client: Optional[httpx.AsyncClient] = None,
        token_refresh_buffer: float = DEFAULT_REFRESH_BUFFER_SECONDS,
        clock: Callable[[], datetime] = utcnow,
    ):
        self.credentials = credentials
        self._owns_http_client = http_client is None
        self._http_client = http_client or httpx.AsyncClient(
            timeout=credentials.timeout_seconds,
        )
        self.auth = UPSAuth(
            client_id=credentials.client_id,
            client_secret=credentials.client_secret,
            api_base_url=credentials.api_base_url,
            http_client=self._http_client,
            timeout_seconds=credentials.timeout_seconds,
            refresh_buffer_seconds=token_refresh_buffer,
            clock=clock,
        )
        self.client = UPSClient(credentials, self.auth, self._http_client)
        self._clock = clock

    @classmethod
    def from_config(cls, carrier_config: Mapping[str, Any]) -> "UPSCarrier":
        buffer = carrier_config.get("token_refresh_buffer", carrier_config.get("tokenRefreshBuffer"))
        return cls(
            UPSCredentials.from_config(carrier_config),
            token_refresh_buffer=DEFAULT_REFRESH_BUFFER_SECONDS if buffer is None else float(buffer),
        )

    @property
    def name(self) -> str:
        return UPS_CARRIER_NAME

    async def get_rate(self, request: RateRequest) -> RateResponse:
        """Get shipping rates from UPS."""
        await self.validate_address(request.origin)
        await self.validate_address(request.destination)

        ups_request = map_rate_request_to_ups(request)
        payload = await self.client.post(RATING_PATH, ups_request)
        response = map_ups_response_to_rate_response(
            payload,
            carrier_name=self.name,
            requested_at=self._clock(),
        )

        if request.service_code:
            quotes = [q for q in response.quotes if q.service_code == request.service_code]
            response = response.model_copy(update={"quotes": quotes})

        logger.info(f"UPS returned {len(response.quotes)} quote(s) for {len(request.packages)} package(s)")
        return response

    async def validate_address(self, address: Address) -> None:
        """UPS-specific checks: supported country and complete address."""
        country_code = (address.country_code or "").upper()
        if country_code not in UPS_SUPPORTED_COUNTRIES:
            raise ValidationError(
                f"UPS does not support addresses in {address.country_code}",
                details={"country_code": address.country_code},
            )

        if not (address.street1 and address.city and address.state and address.postal_code):
            raise ValidationError(
                "Address must include street1, city, state, and postalCode",
            )

    async def close(self) -> None:
        """Close HTTP client."""
        if self._owns_http_client:
            await self._http_client.aclose()
