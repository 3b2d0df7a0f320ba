"""Health check and service info endpoints."""

from pathlib import Path

from fastapi import APIRouter

from common.config import config
from common.errors import FreightQuoteError
from common.logging import get_logger
from services.freight_quote.session import SessionProvider

logger = get_logger(__name__)
router = APIRouter(tags=["health"])


@router.get("/")
async def root():
    """Root endpoint with basic info."""
    return {
        "service": "Booth Quote Shipping API",
        "version": "0.1.0",
        "status": "running",
        "description": "Shipping cost calculation with live freight quotes and static fallback",
        "endpoints": {
            "health": "/health",
            "docs": "/docs",
            "calculate": "/api/shipping/calculate",
            "freight_quote": "/api/shipping/freight-quote",
        },
        "example_request": {
            "input": {"product_dimension_id": 1, "shipping_method": "Ocean Freight"},
            "customer_address": {"street": "123 Main St", "city": "New York", "state": "NY", "zip": "10001", "country": "US"},
            "use_live_quote": True,
        },
    }


@router.get("/health")
async def health_check():
    """Liveness probe."""
    return {"status": "healthy", "service": "booth-quote-shipping"}


@router.get("/health/debug")
async def debug_check():
    """Report whether live freight quoting is configured (presence only, never values)."""
    checks = {
        "status": "checking",
        "freight_session": {},
        "config": {},
    }

    checks["config"]["freight_base_url"] = config.freight_base_url
    checks["config"]["headless"] = config.freight_headless
    checks["config"]["seller_filter"] = config.freight_seller_filter
    checks["config"]["screenshots"] = bool(config.freight_screenshot_dir)
    checks["config"]["dimensions_file_set"] = bool(config.product_dimensions_file) and Path(
        config.product_dimensions_file
    ).exists()

    try:
        session = SessionProvider().obtain_session()
        checks["freight_session"] = {
            "available": True,
            "mode": "password" if session.uses_password else "cookies",
            "cookie_count": len(session.cookies),
            "expired_cookies": session.expired_cookie_count,
        }
    except FreightQuoteError as e:
        checks["freight_session"] = {"available": False, "error_kind": e.kind.value, "error": str(e)}

    checks["status"] = "healthy" if checks["freight_session"]["available"] else "degraded"

    logger.info(f"Debug check result: {checks}")
    return checks
