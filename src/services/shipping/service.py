"""
Shipping cost facade.

Resolves a shipping cost for a quote line. With live quoting enabled and a
destination known, the freight quote engine is asked for carrier prices and
their mean is used; any failure on that path falls back to the stored static
price. The facade never raises for live-quote problems.
"""

import asyncio
from decimal import ROUND_HALF_UP, Decimal

from common.config import Config, config
from common.errors import ErrorKind, ShippingInputError
from common.logging import get_logger
from models.freight import Address, PackageSpec, QuoteOutcome, QuoteRequest
from models.shipping import (
    FreightQuoteData,
    PackageTypeOption,
    PricingSource,
    ServiceLevel,
    ShippingBreakdown,
    ShippingCalculationInput,
    ShippingCalculationResult,
    ShippingMethod,
    TransitTime,
)
from services.freight_quote.engine import FreightQuoteEngine
from services.freight_quote.extractor import average_price
from services.shipping.catalog import DimensionCatalog

logger = get_logger(__name__)

TRANSIT_TIMES: dict[ShippingMethod, TransitTime] = {
    ShippingMethod.OCEAN_FREIGHT: TransitTime(min=25, max=35),
    ShippingMethod.AIR_FREIGHT: TransitTime(min=3, max=7),
    ShippingMethod.EXPRESS_AIR: TransitTime(min=1, max=3),
}

CENTS = Decimal("0.01")


def _round(value: Decimal) -> Decimal:
    return value.quantize(CENTS, rounding=ROUND_HALF_UP)


class ShippingCostService:
    """
    Shipping cost facade over static prices and live freight quotes.

    Example:
        service = ShippingCostService()
        result = await service.compute_shipping_cost(calc_input, destination, use_live_quote=True)
    """

    def __init__(
        self,
        catalog: DimensionCatalog | None = None,
        engine: FreightQuoteEngine | None = None,
        settings: Config | None = None,
    ):
        self.settings = settings or config
        self.catalog = catalog if catalog is not None else DimensionCatalog.from_config()
        self._engine = engine

    @property
    def engine(self) -> FreightQuoteEngine:
        if self._engine is None:
            self._engine = FreightQuoteEngine(self.settings)
        return self._engine

    def resolve_package(self, calc_input: ShippingCalculationInput) -> tuple[PackageSpec, Decimal | None]:
        """The package to ship and its stored static price."""
        if calc_input.product_dimension_id is not None:
            dimension = self.catalog.get(calc_input.product_dimension_id)
            if dimension is None:
                raise ShippingInputError(f"Product dimension with ID {calc_input.product_dimension_id} not found")
            return dimension, dimension.price

        if calc_input.custom_dimensions is not None:
            return calc_input.custom_dimensions, calc_input.custom_dimensions.price

        raise ShippingInputError("Either product_dimension_id or custom_dimensions must be provided")

    def static_cost(self, calc_input: ShippingCalculationInput) -> ShippingCalculationResult:
        """Cost from the stored price of the dimension record; no browser involved."""
        package, price = self.resolve_package(calc_input)

        transit_time = TRANSIT_TIMES.get(calc_input.shipping_method)
        if transit_time is None:
            raise ShippingInputError(f"Unknown shipping method: {calc_input.shipping_method}")

        total_cost = _round(Decimal(price)) if price is not None else Decimal("0.00")
        return ShippingCalculationResult(
            base_cost=total_cost,
            total_cost=total_cost,
            transit_time=transit_time,
            breakdown=ShippingBreakdown(
                volume=round(package.volume_cbm * package.quantity, 4),
                weight=round(package.weight_kg * package.quantity, 2),
                method=calc_input.shipping_method,
                package_type=calc_input.package_type,
                service_level=calc_input.service_level,
            ),
        )

    async def compute_shipping_cost(
        self,
        calc_input: ShippingCalculationInput,
        destination: Address | None = None,
        use_live_quote: bool = False,
    ) -> ShippingCalculationResult:
        """
        Compute the shipping cost for one package, live or static.

        Args:
            calc_input: Dimension record or custom dimensions plus shipping options.
            destination: Customer's shipping address; live quoting needs it.
            use_live_quote: Ask the freight site for carrier prices.

        Returns:
            ShippingCalculationResult. On the live path, freight_data holds the carrier
            quotes and results URL; on fallback, live_quote_error says why.

        Raises:
            ShippingInputError: The static price cannot be resolved (unknown dimension).
        """
        static = self.static_cost(calc_input)
        if not use_live_quote or destination is None:
            return static

        package, _ = self.resolve_package(calc_input)
        request = QuoteRequest(
            source_address=self.settings.freight_source_address,
            destination_address=destination,
            packages=[PackageSpec.model_validate(package.model_dump(include=set(PackageSpec.model_fields)))],
            insurance_required=bool(package.insurance_value_usd),
        )

        outcome = await self._live_quote(request)
        if outcome.success:
            mean = average_price(outcome.carrier_quotes)
            if mean is not None:
                logger.info(f"Live freight quote: mean ${mean} over {len(outcome.carrier_quotes)} carrier(s)")
                return static.model_copy(
                    update={
                        "base_cost": mean,
                        "total_cost": mean,
                        "pricing_source": PricingSource.LIVE,
                        "freight_data": FreightQuoteData(
                            quote_url=outcome.quote_url,
                            average_price=mean,
                            carrier_quotes=outcome.carrier_quotes,
                            captured_at=outcome.captured_at,
                        ),
                    }
                )
            error_kind, error = ErrorKind.EXTRACTION_MISMATCH, "Freight site returned no carrier quotes"
        else:
            error_kind = outcome.error_reason or ErrorKind.TRANSPORT_ERROR
            error = outcome.error_message or error_kind.value

        logger.warning(f"Live freight quote unavailable ({error_kind.value}): {error}. Using static price")
        return static.model_copy(update={"live_quote_error": error, "live_quote_error_kind": error_kind})

    async def _live_quote(self, request: QuoteRequest) -> QuoteOutcome:
        """Run the engine under the configured ceiling; timeouts and stray errors become failed outcomes."""
        try:
            return await asyncio.wait_for(
                self.engine.get_quote(request),
                timeout=self.settings.freight_quote_timeout_s,
            )
        except asyncio.TimeoutError:
            return QuoteOutcome.failure(
                ErrorKind.TIMEOUT, f"Freight quote exceeded {self.settings.freight_quote_timeout_s}s"
            )
        except Exception as e:
            logger.opt(exception=e).error(f"Freight quote engine raised: {type(e).__name__}: {e}")
            return QuoteOutcome.failure(ErrorKind.TRANSPORT_ERROR, f"{type(e).__name__}: {e}")

    def available_options(self) -> dict[str, list[str]]:
        return {
            "methods": [m.value for m in TRANSIT_TIMES],
            "package_types": [p.value for p in PackageTypeOption],
            "service_levels": [s.value for s in ServiceLevel],
        }
