"""
Shipping Module

- BaseCarrier interface for all carrier implementations
- CarrierFactory builds configured carriers
- UPS is the bundled carrier
"""
from shiprates.modules.shipping.carriers import CarrierFactory, register_carrier
from shiprates.modules.shipping.carriers.base import BaseCarrier
from shiprates.modules.shipping.carriers.ups import UPSCarrier

__all__ = [
    "CarrierFactory",
    "register_carrier",
    "BaseCarrier",
    "UPSCarrier",
]
