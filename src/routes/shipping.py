"""Shipping cost and freight quote endpoints."""

from functools import lru_cache

from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel

from common.errors import ShippingInputError
from common.logging import get_logger
from models.freight import Address, QuoteOutcome, QuoteRequest
from models.shipping import ProductDimension, ShippingCalculationInput, ShippingCalculationResult
from services.shipping.service import ShippingCostService

logger = get_logger(__name__)
router = APIRouter(prefix="/api/shipping", tags=["shipping"])


class ShippingCalculationRequest(BaseModel):
    input: ShippingCalculationInput
    customer_address: Address | None = None
    use_live_quote: bool = False


@lru_cache
def get_shipping_service() -> ShippingCostService:
    return ShippingCostService()


@router.post("/calculate", response_model=ShippingCalculationResult)
async def calculate_shipping_cost(
    body: ShippingCalculationRequest,
    service: ShippingCostService = Depends(get_shipping_service),
):
    """
    Calculate the shipping cost for a product dimension or custom dimensions.

    With use_live_quote and a customer_address, carrier prices are fetched from the
    freight site and averaged; otherwise, or if that fails, the stored static price
    is used. Live-quote failures never fail this request.
    """
    try:
        result = await service.compute_shipping_cost(body.input, body.customer_address, body.use_live_quote)
    except ShippingInputError as e:
        logger.warning(f"Shipping calculation rejected: {e}")
        raise HTTPException(status_code=404, detail=str(e)) from e

    logger.info(f"Shipping cost {result.total_cost} ({result.pricing_source.value})")
    return result


@router.post("/freight-quote", response_model=QuoteOutcome)
async def freight_quote(
    request: QuoteRequest,
    service: ShippingCostService = Depends(get_shipping_service),
):
    """Run the freight quote engine directly, for manual checks of the live path."""
    try:
        logger.debug(f"Freight quote request\n: {request.model_dump_json(indent=2, exclude_none=True)}")
        return await service.engine.get_quote(request)
    except Exception as e:
        logger.exception(f"Freight quote request failed: {e}")
        raise HTTPException(status_code=500, detail=f"Freight quote failed: {str(e)}") from e


@router.get("/options")
async def shipping_options(service: ShippingCostService = Depends(get_shipping_service)):
    return service.available_options()


@router.get("/products/{product_id}/dimensions", response_model=list[ProductDimension])
async def product_dimensions(product_id: int, service: ShippingCostService = Depends(get_shipping_service)):
    return service.catalog.for_product(product_id)
