"""Tests for freight quote model validation."""

from decimal import Decimal

import pytest
from pydantic import ValidationError

from common.errors import ErrorKind
from models.freight import Address, CarrierQuote, PackageSpec, QuoteOutcome, QuoteRequest
from services.freight_quote.schemas import BrowserCookie, SessionCredentials, StageResult


def pallet(**overrides) -> PackageSpec:
    values = {"name": "Pallet", "weight_kg": 570, "length_cm": 231, "width_cm": 119, "height_cm": 117}
    values.update(overrides)
    return PackageSpec(**values)


def test_address_accepts_form_field_names():
    address = Address.model_validate({"city": "New York", "zip": "10001", "country": "US"})

    assert address.postal_code == "10001"
    assert address.country_code == "US"


@pytest.mark.parametrize("field, value", [("weight_kg", 0), ("length_cm", -1), ("quantity", 0)])
def test_package_rejects_non_positive_values(field, value):
    with pytest.raises(ValidationError):
        pallet(**{field: value})


def test_package_volume():
    assert pallet().volume_cbm == pytest.approx(3.216213)


def test_request_needs_a_package():
    with pytest.raises(ValidationError):
        QuoteRequest(source_address=Address(city="A"), destination_address=Address(city="B"), packages=[])


def test_declared_goods_value_sums_insured_packages():
    request = QuoteRequest(
        source_address=Address(city="A"),
        destination_address=Address(city="B"),
        packages=[pallet(insurance_value=1000), pallet(), pallet(insurance_value_usd=250.5)],
    )
    assert request.declared_goods_value == 1250.5


def test_carrier_quote_price_must_be_positive():
    with pytest.raises(ValidationError):
        CarrierQuote(carrier_name="Seabay", price=Decimal("0"))


def test_successful_outcome_cannot_carry_error():
    with pytest.raises(ValidationError):
        QuoteOutcome(success=True, error_reason=ErrorKind.TIMEOUT)


def test_failed_outcome_needs_reason_and_no_quotes():
    with pytest.raises(ValidationError):
        QuoteOutcome(success=False)

    with pytest.raises(ValidationError):
        QuoteOutcome(
            success=False,
            error_reason=ErrorKind.TRANSPORT_ERROR,
            carrier_quotes=[CarrierQuote(carrier_name="Seabay", price=Decimal("1"))],
        )


def test_failure_factory():
    outcome = QuoteOutcome.failure(ErrorKind.TIMEOUT, "took too long")

    assert not outcome.success
    assert outcome.error_reason == ErrorKind.TIMEOUT
    assert outcome.error_message == "took too long"
    assert outcome.captured_at.tzinfo is not None


def test_credentials_are_a_pair():
    with pytest.raises(ValidationError):
        SessionCredentials(email="ops@example.com")


def test_credentials_and_cookies_are_exclusive():
    with pytest.raises(ValidationError):
        SessionCredentials(
            email="ops@example.com",
            password="x",
            cookies=[BrowserCookie(name="session", value="v", domain=".freightos.com")],
        )


def test_fatal_stage_result_needs_kind():
    with pytest.raises(ValidationError):
        StageResult(status="failed_fatal")

    assert StageResult.fatal("no button", ErrorKind.NO_SUBMIT_AVAILABLE).is_fatal


def test_fatal_stage_result_rejects_recoverable_kind():
    with pytest.raises(ValidationError):
        StageResult.fatal("results slow", ErrorKind.STAGE_TIMEOUT)

    with pytest.raises(ValidationError):
        StageResult.fatal("row drifted", ErrorKind.EXTRACTION_MISMATCH)
