"""
Base Carrier Interface

- All carriers implement this interface
- Each carrier provides its own:
  - Carrier-specific address acceptability check
  - Rate quoting (request mapping, auth, HTTP call, response mapping)
- Carriers never leak their wire format; everything crossing this boundary
  is a shiprates.schemas.shipping model or a CarrierError subclass
"""
from abc import ABC, abstractmethod
from typing import Any, Mapping

from shiprates.schemas.shipping import Address, RateRequest, RateResponse


class BaseCarrier(ABC):
    """
    Abstract base class for all shipping carriers.

    All carriers must implement these methods.
    """

    @classmethod
    def from_config(cls, carrier_config: Mapping[str, Any]) -> "BaseCarrier":
        """Build the carrier from its CarrierFactory config block."""
        raise NotImplementedError(f"{cls.__name__} cannot be built from config")

    @property
    @abstractmethod
    def name(self) -> str:
        """
        Stable carrier identifier.

        Used as the registry key in RateService and as RateResponse.carrier.
        """
        pass

    @abstractmethod
    async def get_rate(self, request: RateRequest) -> RateResponse:
        """
        Get shipping rates from the carrier.

        Implementations must run validate_address() on origin and
        destination before any network call, and must never return a
        partially-populated response.

        Args:
            request: Validated rate request

        Returns:
            RateResponse with this carrier's quotes, in carrier order

        Raises:
            ValidationError: address rejected by this carrier
            AuthError: token acquisition failed
            NetworkError: transport failure or timeout on the rate call
            RateError: carrier responded with an error or unparseable body
        """
        pass

    @abstractmethod
    async def validate_address(self, address: Address) -> None:
        """
        Check that an address is acceptable to this carrier.

        This is in addition to the generic structural validation.

        Raises:
            ValidationError: if the carrier cannot ship to/from the address
        """
        pass

    async def close(self) -> None:
        """Release network resources held by the carrier."""
        return None

    def __repr__(self) -> str:
        return f"<{self.__class__.__name__} name={self.name!r}>"
