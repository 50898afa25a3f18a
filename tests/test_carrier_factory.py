"""
Tests for the carrier registry and factory.
"""
import logging

import pytest

from shiprates.core.exceptions import ConfigurationError
from shiprates.modules.shipping.carriers import (
    _CARRIER_REGISTRY,
    CarrierFactory,
    register_carrier,
)
from shiprates.modules.shipping.carriers.base import BaseCarrier
from shiprates.modules.shipping.carriers.ups import UPSCarrier

UPS_BLOCK = {
    "client_id": "id",
    "client_secret": "secret",
    "api_base_url": "https://wwwcie.ups.com",
    "http_timeout_ms": 4000,
}


class TestRegistry:

    def test_ups_registered(self):
        assert "ups" in CarrierFactory.get_registered_carriers()
        assert _CARRIER_REGISTRY["ups"] is UPSCarrier

    def test_register_carrier_decorator(self, monkeypatch):
        monkeypatch.setattr(
            "shiprates.modules.shipping.carriers._CARRIER_REGISTRY",
            dict(_CARRIER_REGISTRY),
        )

        @register_carrier("Acme")
        class AcmeCarrier(BaseCarrier):
            @classmethod
            def from_config(cls, carrier_config):
                return cls()

            @property
            def name(self):
                return "Acme"

            async def get_rate(self, request):
                raise NotImplementedError

            async def validate_address(self, address):
                return None

        carriers = CarrierFactory.create_carriers({"ups": UPS_BLOCK, "acme": {"enabled": True}})

        assert CarrierFactory.get_registered_carriers() == ["ups", "acme"]
        assert list(carriers) == ["UPS", "Acme"]
        assert isinstance(carriers["Acme"], AcmeCarrier)


class TestCreateCarriers:

    def test_creates_ups(self):
        carriers = CarrierFactory.create_carriers({"ups": UPS_BLOCK})

        assert list(carriers) == ["UPS"]
        carrier = carriers["UPS"]
        assert isinstance(carrier, UPSCarrier)
        assert carrier.credentials.api_base_url == "https://wwwcie.ups.com"
        assert carrier.credentials.http_timeout_ms == 4000

    def test_camel_case_block(self):
        carriers = CarrierFactory.create_carriers({
            "UPS": {
                "clientId": "id",
                "clientSecret": "secret",
                "apiBaseUrl": "https://wwwcie.ups.com",
                "httpTimeout": 2000,
                "tokenRefreshBuffer": 30,
            },
        })

        assert carriers["UPS"].credentials.http_timeout_ms == 2000
        assert carriers["UPS"].auth.refresh_buffer_seconds == 30

    @pytest.mark.parametrize("config", [None, {}, {"ups": None}, {"ups": {}}])
    def test_absent_block_skipped(self, config):
        assert CarrierFactory.create_carriers(config) == {}

    def test_unknown_key_ignored(self, caplog):
        with caplog.at_level(logging.WARNING):
            carriers = CarrierFactory.create_carriers({"ups": UPS_BLOCK, "dhl": {"api_key": "x"}})

        assert list(carriers) == ["UPS"]
        assert "dhl" in caplog.text

    def test_incomplete_block_raises(self):
        with pytest.raises(ConfigurationError) as exc_info:
            CarrierFactory.create_carriers({"ups": {"client_id": "id"}})

        assert exc_info.value.details["missing"] == ["client_secret", "api_base_url"]

    def test_create_unregistered_carrier(self):
        with pytest.raises(KeyError):
            CarrierFactory.create_carrier("dhl", {"api_key": "x"})
