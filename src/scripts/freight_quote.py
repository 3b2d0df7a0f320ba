#!/usr/bin/env python3
"""
Run one live freight quote from the command line and print the outcome.

Uses the configured factory address as origin and a single pallet to New York
unless a JSON QuoteRequest file is given:

    python -m scripts.freight_quote [request.json]
"""

import asyncio
import sys
from pathlib import Path

from common.config import config
from models.freight import Address, PackageSpec, QuoteRequest
from services.freight_quote.engine import FreightQuoteEngine
from services.freight_quote.extractor import average_price


def sample_request() -> QuoteRequest:
    return QuoteRequest(
        source_address=config.freight_source_address,
        destination_address=Address(
            company="Test Customer",
            street="123 Main St",
            city="New York",
            state="NY",
            postal_code="10001",
            country_code="US",
        ),
        packages=[
            PackageSpec(
                name="Test Pallet",
                type="pallet",
                quantity=1,
                weight_kg=570,
                length_cm=231,
                width_cm=119,
                height_cm=117,
                insurance_value_usd=1000,
            )
        ],
    )


async def run(request: QuoteRequest) -> int:
    outcome = await FreightQuoteEngine().get_quote(request)
    print(outcome.model_dump_json(indent=2, exclude_none=True))

    mean = average_price(outcome.carrier_quotes)
    print("-" * 50)
    print(f"Success: {outcome.success}")
    print(f"States: {' -> '.join(s.value for s in outcome.states)}")
    print(f"Average price: {mean if mean is not None else 'n/a'}")
    print(f"Quote URL: {outcome.quote_url}")
    return 0 if outcome.success else 1


def main() -> int:
    if len(sys.argv) > 1:
        request = QuoteRequest.model_validate_json(Path(sys.argv[1]).read_text(encoding="utf-8"))
    else:
        request = sample_request()
    return asyncio.run(run(request))


if __name__ == "__main__":
    sys.exit(main())
