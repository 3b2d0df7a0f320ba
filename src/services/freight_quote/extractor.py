"""
Result extraction and aggregation for the freight results page.

Rows are read into RawQuoteRow first and parsed in plain Python, so a row whose
layout drifted is dropped on its own without losing the rows that still parse.
"""

import re
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation

from playwright.async_api import ElementHandle, Page

from common.errors import ErrorKind
from common.logging import get_logger
from models.freight import CarrierQuote
from services.freight_quote.schemas import RawQuoteRow
from services.freight_quote.selectors import (
    QUOTE_ARRIVAL,
    QUOTE_DEPARTURE,
    QUOTE_PRICE,
    QUOTE_PRICE_DECIMALS,
    QUOTE_ROW,
    QUOTE_TRANSIT_TIME,
    QUOTE_VENDOR,
)

logger = get_logger(__name__)

DEFAULT_SERVICE_TYPE = "Ocean Freight"
UNKNOWN_CARRIER = "Unknown"
CENTS = Decimal("0.01")

_PRICE_NOISE = re.compile(r"[,\s$]|USD", re.IGNORECASE)


def _clean_number(text: str) -> str:
    return _PRICE_NOISE.sub("", text)


def parse_price(row: RawQuoteRow) -> Decimal | None:
    """
    Parse a row's price, preferring the title attribute over the split text nodes.

    "1,460.22" in the title gives 1460.22; without a title, whole "1,460" and
    decimals "22" are joined into "1460.22". Returns None unless the result is a
    positive finite number.
    """
    if row.price_title and row.price_title.strip():
        text = _clean_number(row.price_title)
    elif row.price_whole and row.price_whole.strip():
        text = _clean_number(row.price_whole)
        if row.price_decimals and row.price_decimals.strip():
            text = f"{text}.{_clean_number(row.price_decimals)}"
    else:
        return None

    try:
        price = Decimal(text)
    except InvalidOperation:
        return None

    if not price.is_finite() or price <= 0:
        return None
    return price


def parse_quote_row(row: RawQuoteRow) -> CarrierQuote | None:
    price = parse_price(row)
    if price is None:
        return None

    departure = (row.departure or "").strip()
    arrival = (row.arrival or "").strip()
    schedule = f"{departure} - {arrival}".strip(" -") if departure or arrival else ""

    return CarrierQuote(
        carrier_name=(row.vendor or "").strip() or UNKNOWN_CARRIER,
        service_type=DEFAULT_SERVICE_TYPE,
        price=price,
        transit_time_description=(row.transit_time or "").strip() or "N/A",
        schedule_details=schedule,
    )


async def _text(row: ElementHandle, selector: str) -> str | None:
    element = await row.query_selector(selector)
    if element is None:
        return None
    return await element.text_content()


async def read_row(row: ElementHandle) -> RawQuoteRow:
    price_el = await row.query_selector(QUOTE_PRICE)
    price_title = await price_el.get_attribute("title") if price_el else None
    price_whole = await price_el.text_content() if price_el else None

    return RawQuoteRow(
        vendor=await _text(row, QUOTE_VENDOR),
        price_title=price_title,
        price_whole=price_whole,
        price_decimals=await _text(row, QUOTE_PRICE_DECIMALS),
        transit_time=await _text(row, QUOTE_TRANSIT_TIME),
        departure=await _text(row, QUOTE_DEPARTURE),
        arrival=await _text(row, QUOTE_ARRIVAL),
    )


async def extract_results(page: Page) -> list[CarrierQuote]:
    """Read every quote row on the results page, skipping rows without a usable price."""
    rows = await page.query_selector_all(QUOTE_ROW)
    quotes: list[CarrierQuote] = []

    for index, row in enumerate(rows):
        raw = await read_row(row)
        quote = parse_quote_row(raw)
        if quote is None:
            logger.warning(
                f"[{ErrorKind.EXTRACTION_MISMATCH.value}] Skipping result row {index + 1}: "
                f"no positive price in {raw.model_dump(exclude_none=True)}"
            )
            continue
        quotes.append(quote)

    logger.info(f"Extracted {len(quotes)} of {len(rows)} result rows")
    for i, quote in enumerate(quotes, start=1):
        logger.debug(f"Quote {i}: {quote.carrier_name} - ${quote.price} - {quote.transit_time_description}")
    return quotes


def extract_quote_url(current_url: str, pattern: str) -> str:
    """Durable results link from the current URL, or the raw URL when the shape is unknown."""
    match = re.search(pattern, current_url)
    return match.group(0) if match else current_url


def average_price(quotes: list[CarrierQuote]) -> Decimal | None:
    """Mean carrier price rounded to cents; None for an empty list."""
    if not quotes:
        return None
    total = sum((q.price for q in quotes), Decimal("0"))
    return (total / len(quotes)).quantize(CENTS, rounding=ROUND_HALF_UP)
