"""
UPS API Client

Authenticated JSON POSTs against the UPS REST API, with every outcome
classified into the shiprates error taxonomy:

- token step failure            -> AuthError (raised by UPSAuth, rate call never made)
- timeout                       -> NetworkError("Request timed out")
- other transport failure       -> NetworkError
- non-2xx response              -> RateError(status, parsed JSON or raw text)
- 2xx with unparseable body     -> RateError("Failed to parse response JSON")
"""
import asyncio
import logging
import uuid
from dataclasses import dataclass
from typing import Any, Dict, Mapping, Optional

import httpx

from shiprates.core.exceptions import ConfigurationError, NetworkError, RateError
from shiprates.core.utils import sanitize_for_logging
from shiprates.services.ups_auth import UPSAuth

logger = logging.getLogger(__name__)

# UPS API URL
UPS_PRODUCTION_URL = "https://onlinetools.ups.com"

# API endpoints
RATING_PATH = "/rating/v2/Shop/Rates"

DEFAULT_HTTP_TIMEOUT_MS = 10000

TRANSACTION_SRC = "shiprates"


def _first(config: Mapping[str, Any], *keys: str) -> Any:
    for key in keys:
        if config.get(key) not in (None, ""):
            return config[key]
    return None


@dataclass
class UPSCredentials:
    """UPS API credentials and transport settings."""
    client_id: str
    client_secret: str
    api_base_url: str = UPS_PRODUCTION_URL
    http_timeout_ms: int = DEFAULT_HTTP_TIMEOUT_MS

    def __post_init__(self):
        self.api_base_url = self.api_base_url.rstrip("/")

    @property
    def timeout_seconds(self) -> float:
        return self.http_timeout_ms / 1000.0

    @classmethod
    def from_config(cls, config: Mapping[str, Any]) -> "UPSCredentials":
        """
        Build credentials from a CarrierFactory config block.

        Accepts snake_case keys or the camelCase names used in JSON config
        (clientId, clientSecret, apiBaseUrl, httpTimeout/httpTimeoutMillis).
        """
        client_id = _first(config, "client_id", "clientId")
        client_secret = _first(config, "client_secret", "clientSecret")
        api_base_url = _first(config, "api_base_url", "apiBaseUrl")
        timeout = _first(config, "http_timeout_ms", "httpTimeoutMillis", "httpTimeout")

        missing = [
            name for name, value in (
                ("client_id", client_id),
                ("client_secret", client_secret),
                ("api_base_url", api_base_url),
            ) if not value
        ]
        if missing:
            raise ConfigurationError(
                f"UPS configuration is missing: {', '.join(missing)}",
                details={"missing": missing},
            )

        try:
            http_timeout_ms = int(timeout) if timeout is not None else DEFAULT_HTTP_TIMEOUT_MS
        except (TypeError, ValueError) as e:
            raise ConfigurationError(f"Invalid UPS HTTP timeout: {timeout!r}") from e
        if http_timeout_ms <= 0:
            raise ConfigurationError(f"UPS HTTP timeout must be positive, got {http_timeout_ms}")

        return cls(
            client_id=str(client_id),
            client_secret=str(client_secret),
            api_base_url=str(api_base_url),
            http_timeout_ms=http_timeout_ms,
        )


class UPSClient:
    """
    UPS API client.

    Attaches the bearer token from UPSAuth to every request and enforces
    the configured timeout on each call.
    """

    def __init__(
        self,
        credentials: UPSCredentials,
        auth: UPSAuth,
        http_client: httpx.AsyncClient,
    ):
        self.credentials = credentials
        self.auth = auth
        self._http_client = http_client

    async def post(self, path: str, body: Dict[str, Any]) -> Any:
        """
        Make an authenticated JSON POST.

        Returns:
            Decoded JSON body of a 2xx response
        """
        # AuthError from the token step propagates untouched
        token = await self.auth.get_access_token()
        url = f"{self.credentials.api_base_url}{path}"

        headers = {
            "Authorization": f"Bearer {token}",
            "Content-Type": "application/json",
            "transId": uuid.uuid4().hex,
            "transactionSrc": TRANSACTION_SRC,
        }

        try:
            # httpx limits each phase; wait_for bounds the whole call
            response = await asyncio.wait_for(
                self._http_client.post(
                    url,
                    headers=headers,
                    json=body,
                    timeout=self.credentials.timeout_seconds,
                ),
                timeout=self.credentials.timeout_seconds,
            )
        except (httpx.TimeoutException, asyncio.TimeoutError) as e:
            logger.error(f"UPS API POST {path} timed out after {self.credentials.timeout_seconds}s")
            raise NetworkError("Request timed out") from e
        except httpx.RequestError as e:
            logger.error(f"UPS API request failed: {e}")
            raise NetworkError(f"Network error: {e}") from e

        logger.debug(f"UPS API POST {path} -> {response.status_code}")

        if not response.is_success:
            error_data = self._parse_error_body(response)
            message = f"API request failed: {response.status_code}"
            ups_message = self._extract_error_message(error_data)
            if ups_message:
                message = f"{message} - {ups_message}"

            logger.error(f"UPS API error: {sanitize_for_logging(message)}")
            raise RateError(
                message,
                status_code=response.status_code,
                response_body=error_data,
            )

        try:
            return response.json()
        except ValueError as e:
            logger.error(
                f"UPS API returned unparseable body: {sanitize_for_logging(response.text)}"
            )
            raise RateError(
                "Failed to parse response JSON",
                status_code=response.status_code,
            ) from e

    @staticmethod
    def _parse_error_body(response: httpx.Response) -> Any:
        """Structured error body when possible, raw text otherwise."""
        try:
            return response.json()
        except ValueError:
            return response.text[:500]

    @staticmethod
    def _extract_error_message(error_data: Any) -> Optional[str]:
        """Pull the first message out of a UPS {"response": {"errors": [...]}} body."""
        if not isinstance(error_data, dict):
            return None
        errors = error_data.get("response", {})
        if isinstance(errors, dict):
            errors = errors.get("errors", [])
        if isinstance(errors, list) and errors and isinstance(errors[0], dict):
            return errors[0].get("message")
        return None
