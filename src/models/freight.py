"""Freight quote models: requests into the quote engine and the outcomes it returns."""

from datetime import datetime, timezone
from decimal import Decimal
from enum import Enum

from pydantic import BaseModel, ConfigDict, Field, model_validator

from common.errors import ErrorKind


class PackageType(str, Enum):
    PALLET = "pallet"
    BOX = "box"


class Address(BaseModel):
    """A postal address as entered into the freight wizard."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    company: str | None = None
    street: str = ""
    city: str = ""
    state: str = ""
    postal_code: str = Field("", alias="zip")
    country_code: str = Field("", alias="country")


class PackageSpec(BaseModel):
    """One line of cargo. Dimensions in cm, weight in kg."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    name: str
    type: PackageType = PackageType.PALLET
    quantity: int = Field(1, ge=1)
    weight_kg: float = Field(..., gt=0)
    length_cm: float = Field(..., gt=0)
    width_cm: float = Field(..., gt=0)
    height_cm: float = Field(..., gt=0)
    insurance_value_usd: float | None = Field(None, ge=0, alias="insurance_value")

    @property
    def volume_cbm(self) -> float:
        return (self.length_cm * self.width_cm * self.height_cm) / 1_000_000


class QuoteRequest(BaseModel):
    """Input to one run of the quote engine."""

    source_address: Address
    destination_address: Address
    packages: list[PackageSpec] = Field(..., min_length=1)
    insurance_required: bool = False

    @property
    def declared_goods_value(self) -> float:
        return sum(pkg.insurance_value_usd or 0 for pkg in self.packages)


class CarrierQuote(BaseModel):
    """One carrier offer scraped from the results page. Prices are USD."""

    model_config = ConfigDict(frozen=True)

    carrier_name: str
    service_type: str = "Ocean Freight"
    price: Decimal = Field(..., gt=0)
    transit_time_description: str = ""
    schedule_details: str = ""


class EngineState(str, Enum):
    IDLE = "idle"
    LOGGING_IN = "logging_in"
    FILLING_ORIGIN = "filling_origin"
    FILLING_DESTINATION = "filling_destination"
    FILLING_CARGO = "filling_cargo"
    FILLING_GOODS = "filling_goods"
    SUBMITTING = "submitting"
    AWAITING_RESULTS = "awaiting_results"
    FILTERING_RESULTS = "filtering_results"
    EXTRACTING_RESULTS = "extracting_results"
    DONE = "done"
    ABORTED = "aborted"


class StageStatus(str, Enum):
    COMPLETED = "completed"
    SKIPPED = "skipped"
    FAILED_RECOVERABLE = "failed_recoverable"
    FAILED_FATAL = "failed_fatal"


class StageReport(BaseModel):
    """How one stage of a run ended, kept on the outcome for diagnostics."""

    state: EngineState
    status: StageStatus
    diagnostic: str = ""
    attempts: int = 1


class QuoteOutcome(BaseModel):
    """What the quote engine returns for one request."""

    success: bool
    quote_url: str | None = None
    carrier_quotes: list[CarrierQuote] = []
    error_reason: ErrorKind | None = None
    error_message: str | None = None
    captured_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
    states: list[EngineState] = []
    stage_reports: list[StageReport] = []

    @model_validator(mode="after")
    def _check_consistency(self) -> "QuoteOutcome":
        if self.success and self.error_reason is not None:
            raise ValueError("A successful outcome cannot carry an error reason")
        if not self.success:
            if self.error_reason is None:
                raise ValueError("A failed outcome must carry an error reason")
            if self.carrier_quotes:
                raise ValueError("A failed outcome cannot carry carrier quotes")
        return self

    @classmethod
    def failure(cls, kind: ErrorKind, message: str, **kwargs) -> "QuoteOutcome":
        return cls(success=False, error_reason=kind, error_message=message, **kwargs)
