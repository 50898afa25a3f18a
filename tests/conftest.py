"""
Pytest configuration and fixtures for shiprates tests.

UPS HTTP traffic is served by httpx.MockTransport; every request the code
under test makes is recorded so tests can assert on call counts, order,
headers and bodies.
"""
import os
from datetime import datetime, timedelta, timezone
from typing import Callable, List, Union

import httpx
import pytest

# Keep a developer's .env / shell from leaking into config tests
for _var in ("UPS_CLIENT_ID", "UPS_CLIENT_SECRET", "UPS_API_BASE_URL", "HTTP_TIMEOUT", "TOKEN_REFRESH_BUFFER", "LOG_LEVEL"):
    os.environ.pop(_var, None)

from shiprates.modules.shipping.carriers.ups import UPSCarrier
from shiprates.services.ups_client import UPSCredentials

TEST_API_BASE_URL = "https://onlinetools-sandbox.ups.com"
TOKEN_URL = f"{TEST_API_BASE_URL}/security/v1/oauth/token"
RATING_URL = f"{TEST_API_BASE_URL}/rating/v2/Shop/Rates"


class RecordingTransport:
    """
    Serves queued responses in order and records every request.

    Queue an httpx.Response, a callable taking the request, or an exception
    instance to raise (e.g. httpx.ReadTimeout).
    """

    def __init__(self):
        self.requests: List[httpx.Request] = []
        self._queue: List[Union[httpx.Response, Exception, Callable]] = []

    def queue(self, *items) -> "RecordingTransport":
        self._queue.extend(items)
        return self

    def queue_json(self, payload, status_code: int = 200) -> "RecordingTransport":
        return self.queue(httpx.Response(status_code, json=payload))

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if not self._queue:
            raise AssertionError(f"Unexpected request: {request.method} {request.url}")
        item = self._queue.pop(0)
        if isinstance(item, Exception):
            raise item
        if callable(item):
            return item(request)
        return item

    def urls(self) -> List[str]:
        return [str(r.url) for r in self.requests]

    @property
    def token_calls(self) -> List[httpx.Request]:
        return [r for r in self.requests if str(r.url) == TOKEN_URL]

    @property
    def rating_calls(self) -> List[httpx.Request]:
        return [r for r in self.requests if str(r.url) == RATING_URL]


class ManualClock:
    """Controllable UTC clock for token expiry tests."""

    def __init__(self, start: datetime = datetime(2024, 6, 1, 12, 0, tzinfo=timezone.utc)):
        self.now = start

    def __call__(self) -> datetime:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now = self.now + timedelta(seconds=seconds)


# ==================== HTTP / carrier fixtures ====================


@pytest.fixture
def transport() -> RecordingTransport:
    """Recording transport with an empty response queue."""
    return RecordingTransport()


@pytest.fixture
def http_client(transport) -> httpx.AsyncClient:
    """AsyncClient routed through the recording transport."""
    return httpx.AsyncClient(transport=httpx.MockTransport(transport.handler))


@pytest.fixture
def clock() -> ManualClock:
    return ManualClock()


@pytest.fixture
def ups_credentials() -> UPSCredentials:
    return UPSCredentials(
        client_id="test_client_id",
        client_secret="test_client_secret",
        api_base_url=TEST_API_BASE_URL,
        http_timeout_ms=5000,
    )


@pytest.fixture
def ups_carrier(ups_credentials, http_client, clock) -> UPSCarrier:
    """UPS carrier wired to the mock transport and manual clock."""
    return UPSCarrier(ups_credentials, http_client=http_client, clock=clock)


# ==================== Domain data ====================


@pytest.fixture
def sample_address_data() -> dict:
    """Sample origin address for tests."""
    return {
        "street1": "123 Main Street",
        "city": "New York",
        "state": "NY",
        "postalCode": "10001",
        "countryCode": "US",
    }


@pytest.fixture
def sample_package_data() -> dict:
    """Sample package data for tests."""
    return {
        "length": 10,
        "width": 8,
        "height": 5,
        "dimensionUnit": "IN",
        "weight": 5,
        "weightUnit": "LB",
    }


@pytest.fixture
def sample_rate_request_data(sample_address_data, sample_package_data) -> dict:
    """Rate request from New York to Boston with one package."""
    return {
        "origin": sample_address_data,
        "destination": {
            **sample_address_data,
            "city": "Boston",
            "state": "MA",
            "postalCode": "02101",
        },
        "packages": [sample_package_data],
    }


# ==================== UPS payloads ====================


@pytest.fixture
def ups_oauth_token_response() -> dict:
    return {
        "access_token": "test_token_abc123xyz789",
        "token_type": "Bearer",
        "expires_in": 3600,
    }


@pytest.fixture
def ups_rating_success_response() -> dict:
    """UPS rating response with three service options."""
    return {
        "RateResponse": {
            "Response": {
                "ResponseStatus": {"Code": "1", "Description": "Success"},
            },
            "RatedShipment": [
                {
                    "ServiceType": "UPS Ground",
                    "ServiceTypeCode": "03",
                    "TotalCharges": {"CurrencyCode": "USD", "MonetaryValue": "25.50"},
                    "BaseServiceCharge": {"CurrencyCode": "USD", "MonetaryValue": "23.00"},
                    "SurchargesAndTaxes": {"CurrencyCode": "USD", "MonetaryValue": "2.50"},
                    "GuaranteedDaysToDelivery": "5",
                },
                {
                    "ServiceType": "UPS 2nd Day Air",
                    "ServiceTypeCode": "02",
                    "TotalCharges": {"CurrencyCode": "USD", "MonetaryValue": "42.75"},
                    "BaseServiceCharge": {"CurrencyCode": "USD", "MonetaryValue": "40.00"},
                    "SurchargesAndTaxes": {"CurrencyCode": "USD", "MonetaryValue": "2.75"},
                    "GuaranteedDaysToDelivery": "2",
                },
                {
                    "ServiceType": "UPS Next Day Air",
                    "ServiceTypeCode": "01",
                    "TotalCharges": {"CurrencyCode": "USD", "MonetaryValue": "65.00"},
                    "BaseServiceCharge": {"CurrencyCode": "USD", "MonetaryValue": "62.00"},
                    "SurchargesAndTaxes": {"CurrencyCode": "USD", "MonetaryValue": "3.00"},
                    "GuaranteedDaysToDelivery": "1",
                },
            ],
        },
    }


@pytest.fixture
def ups_server_error() -> dict:
    return {
        "response": {
            "errors": [{"code": "5000", "message": "Internal server error"}],
        },
    }


@pytest.fixture
def ups_invalid_address_error() -> dict:
    return {
        "response": {
            "errors": [
                {"code": "1001", "message": "Invalid address", "detail": "Postal code is invalid"},
            ],
        },
    }
