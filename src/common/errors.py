"""
Freight quote error taxonomy.

Every failure the quote pipeline can report is tagged with an ErrorKind so the
shipping facade and its logs can tell configuration problems from site drift.
"""

from collections.abc import Generator
from contextlib import contextmanager
from enum import Enum

from playwright.async_api import Error as PlaywrightError
from playwright.async_api import TimeoutError as PlaywrightTimeoutError

from common.logging import get_logger

logger = get_logger(__name__)


class ErrorKind(str, Enum):
    CONFIGURATION_MISSING = "configuration_missing"
    SESSION_INVALID = "session_invalid"
    STAGE_TIMEOUT = "stage_timeout"
    NAVIGATION_FAILURE = "navigation_failure"
    TRANSPORT_ERROR = "transport_error"
    EXTRACTION_MISMATCH = "extraction_mismatch"
    NO_SUBMIT_AVAILABLE = "no_submit_available"
    TIMEOUT = "timeout"


# Kinds that stop a run outright
FATAL_KINDS = {
    ErrorKind.CONFIGURATION_MISSING,
    ErrorKind.SESSION_INVALID,
    ErrorKind.NAVIGATION_FAILURE,
    ErrorKind.TRANSPORT_ERROR,
    ErrorKind.NO_SUBMIT_AVAILABLE,
    ErrorKind.TIMEOUT,
}


class FreightQuoteError(Exception):
    """Base error for the freight quote pipeline."""

    kind: ErrorKind = ErrorKind.TRANSPORT_ERROR

    def __init__(self, message: str, kind: ErrorKind | None = None):
        super().__init__(message)
        if kind is not None:
            self.kind = kind


class ConfigurationMissingError(FreightQuoteError):
    kind = ErrorKind.CONFIGURATION_MISSING


class SessionInvalidError(FreightQuoteError):
    kind = ErrorKind.SESSION_INVALID


class ShippingInputError(ValueError):
    """Raised when a static shipping calculation request cannot be resolved."""


def classify_automation_error(error: BaseException) -> ErrorKind:
    """Map an exception raised while driving the browser onto the taxonomy."""
    if isinstance(error, FreightQuoteError):
        return error.kind
    if isinstance(error, PlaywrightTimeoutError):
        return ErrorKind.STAGE_TIMEOUT
    if isinstance(error, PlaywrightError):
        return ErrorKind.NAVIGATION_FAILURE
    return ErrorKind.TRANSPORT_ERROR


@contextmanager
def log_stage_errors(stage_name: str) -> Generator[None, None, None]:
    """
    Log browser errors for a stage with their classified kind, then re-raise.

    Usage:
        with log_stage_errors("origin"):
            await page.click(selector)
    """
    try:
        yield
    except PlaywrightTimeoutError as e:
        logger.warning(f"[{stage_name}] Timed out: {e}")
        raise
    except Exception as e:
        kind = classify_automation_error(e)
        logger.error(f"[{stage_name}] {kind.value}: {type(e).__name__}: {e!r}")
        raise
