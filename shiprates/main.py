#!/usr/bin/env python3
"""
shiprates - demo runner

Builds carriers from the environment, prints the registered carriers and
the rate quotes for a request read from a JSON file (or a built-in sample).

Usage:
    python -m shiprates.main [--carrier UPS] [--request request.json]

Requires UPS_CLIENT_ID, UPS_CLIENT_SECRET and UPS_API_BASE_URL.
"""
import argparse
import asyncio
import json
import logging
import sys
from pathlib import Path
from typing import Any, Dict, List, Optional

from shiprates.core.config import Settings, get_settings
from shiprates.core.exceptions import ShipRatesError
from shiprates.core.utils import setup_logging
from shiprates.modules.shipping.carriers import CarrierFactory
from shiprates.services.rate_service import RateService

logger = logging.getLogger(__name__)

SAMPLE_REQUEST: Dict[str, Any] = {
    "origin": {
        "street1": "100 Summit Lake Drive",
        "city": "Woburn",
        "state": "MA",
        "postalCode": "01801",
        "countryCode": "US",
    },
    "destination": {
        "street1": "123 Main Street",
        "city": "New York",
        "state": "NY",
        "postalCode": "10001",
        "countryCode": "US",
    },
    "packages": [
        {
            "length": 10,
            "width": 8,
            "height": 5,
            "dimensionUnit": "IN",
            "weight": 5,
            "weightUnit": "LB",
        },
    ],
}


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Quote shipping rates across configured carriers")
    parser.add_argument("--carrier", help="Only quote this carrier (e.g. UPS)")
    parser.add_argument("--request", type=Path, help="Path to a JSON rate request")
    return parser.parse_args(argv)


def load_request(path: Optional[Path]) -> Dict[str, Any]:
    if path is None:
        return SAMPLE_REQUEST
    with path.open(encoding="utf-8") as f:
        return json.load(f)


async def run(settings: Settings, request: Dict[str, Any], carrier_name: Optional[str] = None) -> List[Dict[str, Any]]:
    """Quote rates and return JSON-ready responses."""
    settings.require_ups()
    carriers = CarrierFactory.create_carriers(settings.carrier_config())
    service = RateService(carriers)
    try:
        print(f"Available carriers: {service.list_carriers()}")
        responses = await service.get_rate(request, carrier_name)
        return [response.to_json_dict() for response in responses]
    finally:
        await service.close()


def main(argv: Optional[List[str]] = None) -> int:
    args = parse_args(argv)
    settings = get_settings()
    setup_logging(settings.LOG_LEVEL)

    try:
        request = load_request(args.request)
        logger.info("Requesting rates...")
        responses = asyncio.run(run(settings, request, args.carrier))
    except ShipRatesError as e:
        logger.error(f"Rate request failed: {e.message}")
        print(json.dumps(e.to_dict(), indent=2, default=str), file=sys.stderr)
        return 1
    except (OSError, json.JSONDecodeError) as e:
        logger.error(f"Could not read request file: {e}")
        return 1

    print(json.dumps(responses, indent=2))
    return 0


if __name__ == "__main__":
    sys.exit(main())
