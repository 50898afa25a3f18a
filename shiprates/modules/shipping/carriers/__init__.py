"""
Carrier Registry and Factory

- Carrier implementations register themselves with @register_carrier
- CarrierFactory builds exactly the carriers whose config block is present
- Absent config blocks are skipped, so partial carrier configuration works
"""
from typing import Any, Callable, Dict, List, Mapping, Optional, Type
import logging

from shiprates.modules.shipping.carriers.base import BaseCarrier

logger = logging.getLogger(__name__)

# Registry of carrier implementations, keyed by config block name ("ups")
_CARRIER_REGISTRY: Dict[str, Type[BaseCarrier]] = {}


def register_carrier(config_key: str) -> Callable[[Type[BaseCarrier]], Type[BaseCarrier]]:
    """
    Decorator to register a carrier implementation.

    Usage:
        @register_carrier("ups")
        class UPSCarrier(BaseCarrier):
            ...

    The carrier class builds itself from its config block via from_config().
    """
    def decorator(cls: Type[BaseCarrier]) -> Type[BaseCarrier]:
        _CARRIER_REGISTRY[config_key.lower()] = cls
        logger.debug(f"Registered carrier: {config_key} -> {cls.__name__}")
        return cls
    return decorator


class CarrierFactory:
    """
    Factory for creating carrier instances from configuration.

    Pure construction: no network calls happen here.
    """

    @classmethod
    def create_carrier(cls, config_key: str, carrier_config: Mapping[str, Any]) -> BaseCarrier:
        """
        Create a single carrier instance.

        Args:
            config_key: Registry key, e.g. "ups"
            carrier_config: Credentials/endpoint/timeout block for the carrier

        Raises:
            KeyError: if no implementation is registered for config_key
        """
        carrier_cls = _CARRIER_REGISTRY.get(config_key.lower())
        if carrier_cls is None:
            raise KeyError(f"No implementation registered for carrier: {config_key}")
        return carrier_cls.from_config(carrier_config)

    @classmethod
    def create_carriers(cls, config: Optional[Mapping[str, Any]]) -> Dict[str, BaseCarrier]:
        """
        Create every configured carrier.

        Args:
            config: Mapping of config key -> carrier config block. Keys with
                no registered implementation and empty blocks are skipped.

        Returns:
            Dict of carrier name -> carrier, in registry order
        """
        config = config or {}
        normalized = {str(key).lower(): value for key, value in config.items()}
        carriers: Dict[str, BaseCarrier] = {}

        for key in _CARRIER_REGISTRY:
            block = normalized.get(key)
            if not block:
                continue
            carrier = cls.create_carrier(key, block)
            carriers[carrier.name] = carrier
            logger.info(f"Configured carrier: {carrier.name}")

        unknown = set(normalized) - set(_CARRIER_REGISTRY)
        if unknown:
            logger.warning(f"Ignoring config for unregistered carriers: {sorted(unknown)}")

        return carriers

    @classmethod
    def get_registered_carriers(cls) -> List[str]:
        """Get list of all registered carrier config keys."""
        return list(_CARRIER_REGISTRY.keys())


# Import carriers to trigger registration
# These imports must be at the bottom to avoid circular imports
from shiprates.modules.shipping.carriers.ups import UPSCarrier  # noqa: E402, F401
