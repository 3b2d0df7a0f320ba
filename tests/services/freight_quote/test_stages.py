"""Tests for the individual wizard stages against a fake page."""

import pytest

from common.errors import ErrorKind
from fakes import (
    SELLERS,
    FakeContext,
    FakeElement,
    FakePage,
    build_quote_site,
    button,
    make_settings,
    sample_request,
    seller_option,
)
from models.freight import Address, PackageSpec, PackageType, StageStatus
from services.freight_quote import selectors as sel
from services.freight_quote.schemas import BrowserCookie, SessionCredentials
from services.freight_quote.stages import (
    CargoStage,
    FilterResultsStage,
    GoodsStage,
    LoginStage,
    OriginStage,
    RunContext,
    SubmitStage,
    search_terms,
    select_seller,
)


def make_context(page: FakePage, request=None, credentials: SessionCredentials | None = None) -> RunContext:
    return RunContext(
        page=page,
        browser_context=FakeContext(),
        request=request or sample_request(),
        credentials=credentials or SessionCredentials(),
    )


@pytest.fixture
def settings():
    return make_settings()


def test_search_terms_degrade_from_alias_to_state():
    address = Address(
        city="SHILOU TOWN, PANYU DISTRICT, GUANGZHOU",
        state="GUANGDONG",
        postal_code="511447",
        country_code="CN",
    )

    terms = search_terms(address, {"guangzhou": "SHILOU TOWN"})

    assert terms == ["SHILOU TOWN", "SHILOU TOWN, PANYU DISTRICT, GUANGZHOU", "511447", "GUANGDONG"]


def test_search_terms_without_alias():
    address = Address(city="New York", state="NY", postal_code="10001", country_code="US")
    assert search_terms(address, {"guangzhou": "SHILOU TOWN"}) == ["New York", "10001", "NY"]


def test_search_terms_empty_address():
    assert search_terms(Address()) == []


# Login


@pytest.mark.asyncio
async def test_login_applies_cookies_and_verifies(settings):
    page = FakePage()
    page.add(".user-menu", FakeElement())
    credentials = SessionCredentials(cookies=[BrowserCookie(name="session", value="abc", domain=".freightos.com")])
    ctx = make_context(page, credentials=credentials)

    result = await LoginStage(settings).run(ctx)

    assert result.status == StageStatus.COMPLETED
    assert ctx.browser_context.cookies == [credentials.cookies[0].to_playwright()]
    assert page.reloads == 1


@pytest.mark.asyncio
async def test_login_with_unverified_cookies_is_recoverable(settings):
    page = FakePage()
    credentials = SessionCredentials(cookies=[BrowserCookie(name="session", value="old", domain=".freightos.com")])

    result = await LoginStage(settings).run(make_context(page, credentials=credentials))

    assert result.status == StageStatus.FAILED_RECOVERABLE


@pytest.mark.asyncio
async def test_login_without_session_material_is_skipped(settings):
    result = await LoginStage(settings).run(make_context(FakePage()))
    assert result.status == StageStatus.SKIPPED


@pytest.mark.asyncio
async def test_login_with_password(settings):
    page = FakePage()
    open_login = button("Login")
    submit_login = button("Log in")
    page.add(sel.TEXT_CLICKABLE, open_login, submit_login)
    page.add(sel.LOGIN_EMAIL_INPUT, FakeElement(name="email"))
    page.add(sel.LOGIN_PASSWORD_INPUT, FakeElement(name="password"))
    page.add(".user-menu", FakeElement())
    credentials = SessionCredentials(email="ops@example.com", password="hunter2")

    result = await LoginStage(settings).run(make_context(page, credentials=credentials))

    assert result.status == StageStatus.COMPLETED
    assert ("email", "ops@example.com") in page.filled
    assert ("password", "hunter2") in page.filled
    assert open_login.clicks == 1
    assert submit_login.clicks == 1


@pytest.mark.asyncio
async def test_login_without_login_button_proceeds_as_guest(settings):
    credentials = SessionCredentials(email="ops@example.com", password="hunter2")

    result = await LoginStage(settings).run(make_context(FakePage(), credentials=credentials))

    assert result.status == StageStatus.FAILED_RECOVERABLE
    assert "guest" in result.diagnostic


# Addresses


@pytest.mark.asyncio
async def test_origin_types_alias_into_displayed_search_field(settings):
    page = build_quote_site(FakePage())

    result = await OriginStage(settings).run(make_context(page))

    assert result.status == StageStatus.COMPLETED
    visible, hidden = page.elements[sel.SEARCH_INPUT][1], page.elements[sel.SEARCH_INPUT][0]
    assert visible.typed == "SHILOU TOWN"
    assert hidden.typed == ""
    assert page.elements[sel.SUGGESTION_ITEM][1].clicks == 1
    assert page.elements[sel.SECTION_DONE_BUTTON][0].clicks == 1


@pytest.mark.asyncio
async def test_origin_tries_every_term_before_giving_up(settings):
    page = build_quote_site(FakePage())
    del page.elements[sel.SUGGESTION_ITEM]

    result = await OriginStage(settings).run(make_context(page))

    assert result.status == StageStatus.FAILED_RECOVERABLE
    assert page.elements[sel.SEARCH_INPUT][1].typed == (
        "SHILOU TOWN" "SHILOU TOWN, PANYU DISTRICT, GUANGZHOU" "511447" "GUANGDONG"
    )


@pytest.mark.asyncio
async def test_origin_opens_collapsed_section(settings):
    page = build_quote_site(FakePage())
    origin_select = page.elements[sel.address_select(sel.ORIGIN_CATEGORY)][0]
    origin_select.visible = False
    category = page.elements[sel.category(sel.ORIGIN_CATEGORY)][0]

    def expand():
        origin_select.visible = True

    category.on_click = expand

    result = await OriginStage(settings).run(make_context(page))

    assert result.status == StageStatus.COMPLETED
    assert category.clicks == 1


# Cargo and goods


@pytest.mark.asyncio
async def test_cargo_fills_each_load_in_its_slots(settings):
    page = FakePage()
    page.add(sel.category(sel.LOAD_CATEGORY), FakeElement())
    add_load = button("Add another load")
    page.add(
        sel.TEXT_CLICKABLE,
        button("Loose Cargo"),
        button("Pallets"),
        button("Boxes/Crates"),
        add_load,
        button("Confirm"),
    )
    inputs = [FakeElement(name=f"numeric-{i}") for i in range(10)]
    page.add(sel.NUMERIC_INPUT, *inputs)
    request = sample_request(
        packages=[
            PackageSpec(name="Pallet", weight_kg=570, length_cm=231, width_cm=119, height_cm=117),
            PackageSpec(
                name="Brochures", type=PackageType.BOX, quantity=2, weight_kg=12.5, length_cm=50, width_cm=40, height_cm=30
            ),
        ]
    )

    result = await CargoStage(settings).run(make_context(page, request=request))

    assert result.status == StageStatus.COMPLETED
    assert [i.value for i in inputs] == ["1", "231", "119", "117", "570", "2", "50", "40", "30", "12.5"]
    assert add_load.clicks == 1


@pytest.mark.asyncio
async def test_cargo_without_package_type_button_is_recoverable(settings):
    page = FakePage()
    page.add(sel.category(sel.LOAD_CATEGORY), FakeElement())
    page.add(sel.TEXT_CLICKABLE, button("Loose Cargo"), button("Confirm"))
    page.add(sel.NUMERIC_INPUT, *(FakeElement() for _ in range(5)))

    result = await CargoStage(settings).run(make_context(page))

    assert result.status == StageStatus.FAILED_RECOVERABLE
    assert "pallet" in result.diagnostic


@pytest.mark.asyncio
async def test_goods_uses_default_value_without_insurance(settings):
    page = build_quote_site(FakePage())
    request = sample_request(
        packages=[PackageSpec(name="Pallet", weight_kg=570, length_cm=231, width_cm=119, height_cm=117)]
    )

    result = await GoodsStage(settings).run(make_context(page, request=request))

    assert result.status == StageStatus.COMPLETED
    assert page.elements[sel.GOODS_VALUE_INPUT][0].value == "8000"


@pytest.mark.asyncio
async def test_goods_declares_insured_value(settings):
    page = build_quote_site(FakePage())

    await GoodsStage(settings).run(make_context(page))

    assert page.elements[sel.GOODS_VALUE_INPUT][0].value == "1000"


# Submission and results


@pytest.mark.asyncio
async def test_submit_never_clicks_disabled_control(settings):
    page = FakePage()
    disabled = page.add(sel.SUBMIT_CANDIDATES[0], FakeElement(attrs={"disabled": "disabled"}))

    result = await SubmitStage(settings).run(make_context(page))

    assert result.status == StageStatus.FAILED_FATAL
    assert result.error_kind == ErrorKind.NO_SUBMIT_AVAILABLE
    assert disabled.clicks == 0


@pytest.mark.asyncio
async def test_submit_falls_through_to_next_candidate(settings):
    page = FakePage()
    page.add(sel.SUBMIT_CANDIDATES[0], FakeElement(attrs={"disabled": ""}))
    fallback = page.add(sel.SUBMIT_CANDIDATES[1], FakeElement())

    result = await SubmitStage(settings).run(make_context(page))

    assert result.status == StageStatus.COMPLETED
    assert fallback.clicks == 1


@pytest.mark.asyncio
async def test_select_seller_leaves_checked_box_alone():
    page = FakePage()
    wrapper = page.add(sel.SELLER_CHECKBOX_WRAPPER, seller_option(SELLERS[0], checked=True))

    assert await select_seller(page, SELLERS[0]) == "already_checked"
    assert wrapper.clicks == 0
    assert wrapper.children[sel.CHECKBOX_INPUT].checked is True


@pytest.mark.asyncio
async def test_select_seller_ticks_unchecked_box():
    page = FakePage()
    page.add(sel.SELLER_CHECKBOX_WRAPPER, seller_option("Other Forwarder"), seller_option(SELLERS[1]))

    assert await select_seller(page, SELLERS[1]) == "selected"
    wrappers = page.elements[sel.SELLER_CHECKBOX_WRAPPER]
    assert wrappers[0].clicks == 0
    assert wrappers[1].children[sel.CHECKBOX_INPUT].checked is True


@pytest.mark.asyncio
async def test_select_seller_requires_exact_label():
    page = FakePage()
    page.add(sel.SELLER_CHECKBOX_WRAPPER, seller_option("Seabay"))

    assert await select_seller(page, SELLERS[0]) is None


@pytest.mark.asyncio
async def test_filter_reports_missing_sellers(settings):
    page = FakePage()
    page.add(sel.SELLER_CHECKBOX_WRAPPER, seller_option(SELLERS[0]))

    result = await FilterResultsStage(settings).run(make_context(page))

    assert result.status == StageStatus.FAILED_RECOVERABLE
    assert SELLERS[1] in result.diagnostic


@pytest.mark.asyncio
async def test_filter_skipped_without_sellers():
    result = await FilterResultsStage(make_settings(freight_seller_filter=[])).run(make_context(FakePage()))
    assert result.status == StageStatus.SKIPPED
