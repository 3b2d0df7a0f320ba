"""Shipping cost models used by the quote backend."""

from datetime import datetime
from decimal import Decimal
from enum import Enum

from pydantic import BaseModel, Field, model_validator

from common.errors import ErrorKind
from models.freight import CarrierQuote, PackageSpec


class ShippingMethod(str, Enum):
    OCEAN_FREIGHT = "Ocean Freight"
    AIR_FREIGHT = "Air Freight"
    EXPRESS_AIR = "Express Air"


class ServiceLevel(str, Enum):
    STANDARD = "Standard"
    PREMIUM = "Premium"
    EXPRESS = "Express"


class PackageTypeOption(str, Enum):
    PALLET_ONLY = "Pallet Only"
    BOX_ONLY = "Box Only"
    MIXED = "Mixed (Pallets + Boxes)"


class PricingSource(str, Enum):
    LIVE = "live"
    STATIC = "static"


class TransitTime(BaseModel):
    min: int
    max: int

    def describe(self) -> str:
        return f"{self.min}-{self.max} days"


class ProductDimension(PackageSpec):
    """A stored shipping dimension record of a product, with its static shipping price."""

    id: int
    product_id: int | None = None
    price: Decimal | None = None


class CustomDimensions(PackageSpec):
    """Ad-hoc dimensions entered for a single calculation."""

    price: Decimal | None = None


class ShippingCalculationInput(BaseModel):
    product_dimension_id: int | None = None
    custom_dimensions: CustomDimensions | None = None
    shipping_method: ShippingMethod = ShippingMethod.OCEAN_FREIGHT
    service_level: ServiceLevel = ServiceLevel.STANDARD
    package_type: PackageTypeOption = PackageTypeOption.PALLET_ONLY

    @model_validator(mode="after")
    def _one_dimension_source(self) -> "ShippingCalculationInput":
        if self.product_dimension_id is None and self.custom_dimensions is None:
            raise ValueError("Either product_dimension_id or custom_dimensions must be provided")
        return self


class ShippingBreakdown(BaseModel):
    volume: float = Field(..., description="Total volume in m3")
    weight: float = Field(..., description="Total weight in kg")
    method: ShippingMethod
    package_type: PackageTypeOption
    service_level: ServiceLevel


class FreightQuoteData(BaseModel):
    """Live quote evidence kept with a calculation for audit."""

    quote_url: str | None = None
    average_price: Decimal
    carrier_quotes: list[CarrierQuote]
    captured_at: datetime


class ShippingCalculationResult(BaseModel):
    base_cost: Decimal
    volume_cost: Decimal = Decimal("0")
    weight_cost: Decimal = Decimal("0")
    service_premium: Decimal = Decimal("0")
    package_multiplier: float = 1.0
    total_cost: Decimal
    transit_time: TransitTime
    breakdown: ShippingBreakdown
    pricing_source: PricingSource = PricingSource.STATIC
    freight_data: FreightQuoteData | None = None
    live_quote_error: str | None = None
    live_quote_error_kind: ErrorKind | None = None
