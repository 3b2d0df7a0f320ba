"""
Stage handlers for the freight site's quote wizard.

Each stage drives one logical step of the wizard against the live page and
reports a StageResult. Timeouts inside a stage are recoverable and surface as
FailedRecoverable (the engine converts stray Playwright timeouts the same way);
any other browser error propagates and aborts the run.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field

from playwright.async_api import BrowserContext, Page
from playwright.async_api import TimeoutError as PlaywrightTimeoutError

from common.config import Config
from common.errors import ErrorKind
from common.logging import get_logger
from models.freight import Address, CarrierQuote, EngineState, PackageSpec, QuoteRequest
from services.freight_quote import selectors as sel
from services.freight_quote.diagnostics import Checkpoint
from services.freight_quote.extractor import extract_quote_url, extract_results
from services.freight_quote.page_actions import (
    click_by_text,
    click_when_enabled,
    first_visible_with_size,
    fill_cargo_field,
    format_number,
    is_disabled,
    settle,
    type_into_visible,
)
from services.freight_quote.polling import poll_until
from services.freight_quote.schemas import SessionCredentials, StageResult
from services.freight_quote.selectors import CargoField, UiAction

logger = get_logger(__name__)


@dataclass
class RunContext:
    """Everything a stage may read or write during one quote run."""

    page: Page
    browser_context: BrowserContext
    request: QuoteRequest
    credentials: SessionCredentials
    quote_url: str | None = None
    carrier_quotes: list[CarrierQuote] = field(default_factory=list)


class Stage(ABC):
    state: EngineState
    max_attempts: int = 1
    # Screenshots taken around this stage
    checkpoint_before: str | None = None
    checkpoint_after: str | None = None

    def __init__(self, settings: Config):
        self.settings = settings
        self.timings = settings.freight_timings

    @property
    def name(self) -> str:
        return self.state.value

    @abstractmethod
    async def run(self, ctx: RunContext) -> StageResult: ...


# Login


class LoginStage(Stage):
    state = EngineState.LOGGING_IN
    checkpoint_after = Checkpoint.POST_LOGIN

    async def run(self, ctx: RunContext) -> StageResult:
        if ctx.credentials.uses_password:
            if not await self._login_with_password(ctx):
                return StageResult.recoverable("Login modal not usable, proceeding as guest")
        elif ctx.credentials.cookies:
            await ctx.browser_context.add_cookies([c.to_playwright() for c in ctx.credentials.cookies])
            await ctx.page.reload(wait_until="domcontentloaded")
            logger.info(f"Applied {len(ctx.credentials.cookies)} session cookies")
        else:
            return StageResult.skipped("No session material, proceeding as guest")

        if await self._verify_login(ctx.page):
            return StageResult.completed("Logged in")
        return StageResult.recoverable("Could not verify login status, cookies may be expired")

    async def _login_with_password(self, ctx: RunContext) -> bool:
        page = ctx.page
        if not await click_by_text(page, UiAction.OPEN_LOGIN, self.timings, attempts=3):
            logger.warning("Login button not found")
            return False

        await page.wait_for_selector(sel.LOGIN_EMAIL_INPUT, timeout=self.timings.selector_timeout_ms)
        await page.fill(sel.LOGIN_EMAIL_INPUT, ctx.credentials.email or "")
        password = ctx.credentials.password.get_secret_value() if ctx.credentials.password else ""
        await page.fill(sel.LOGIN_PASSWORD_INPUT, password)

        if not await click_by_text(page, UiAction.SUBMIT_LOGIN, self.timings, attempts=3):
            logger.warning("Log in button not found in login modal")
            return False

        await settle(page, self.timings.login_settle_ms)
        return True

    async def _verify_login(self, page: Page) -> bool:
        for indicator in sel.LOGIN_INDICATORS:
            try:
                await page.wait_for_selector(indicator, timeout=self.timings.login_indicator_timeout_ms)
                logger.info(f"Login verified via {indicator}")
                return True
            except PlaywrightTimeoutError:
                continue
        logger.warning("Could not verify login status, proceeding with guest quote")
        return False


# Address


def search_terms(address: Address, aliases: dict[str, str] | None = None) -> list[str]:
    """
    Ordered autocomplete search terms for an address, most likely to resolve first.

    The site's autocomplete does not reliably resolve full street addresses, so
    terms degrade from a configured locality alias to the city, its first segment,
    the postal code and finally the state.
    """
    city = (address.city or "").strip()
    candidates: list[str] = []

    for needle, term in (aliases or {}).items():
        if needle.lower() in city.lower():
            candidates.append(term)

    candidates.append(city)
    candidates.append(city.split(",")[0].strip())
    candidates.append((address.postal_code or "").strip())
    candidates.append((address.state or "").strip())

    terms: list[str] = []
    for term in candidates:
        if term and term.lower() not in (t.lower() for t in terms):
            terms.append(term)
    return terms


class AddressStage(Stage):
    max_attempts = 2
    category_name: str

    def address(self, request: QuoteRequest) -> Address:
        raise NotImplementedError

    async def run(self, ctx: RunContext) -> StageResult:
        page = ctx.page
        address = self.address(ctx.request)
        terms = search_terms(address, self.settings.freight_search_aliases)
        if not terms:
            return StageResult.recoverable(f"No usable search term for {self.category_name} address")

        if not await self._open_address_select(page):
            return StageResult.recoverable(f"{self.category_name} address select not reachable")

        selected_term = await self._search_and_select(page, terms)
        if selected_term is None:
            return StageResult.recoverable(f"No suggestion appeared for {self.category_name} terms {terms}")

        await settle(page, self.timings.settle_ms)
        if not await click_when_enabled(page, sel.SECTION_DONE_BUTTON, self.timings):
            return StageResult.recoverable(f"{self.category_name} section not confirmed")

        await settle(page, self.timings.settle_ms)
        return StageResult.completed(f"{self.category_name} set from '{selected_term}'")

    async def _open_address_select(self, page: Page) -> bool:
        address_select = sel.address_select(self.category_name)

        existing = await page.query_selector(address_select)
        if existing is None or not await existing.is_visible():
            try:
                await page.click(sel.category(self.category_name), timeout=self.timings.click_timeout_ms)
                await settle(page, self.timings.settle_ms)
            except PlaywrightTimeoutError as e:
                logger.warning(f"Could not click {self.category_name} category: {e}")

        try:
            await page.wait_for_selector(address_select, state="visible", timeout=self.timings.selector_timeout_ms)
        except PlaywrightTimeoutError:
            return False

        await page.click(address_select, timeout=self.timings.click_timeout_ms)
        await settle(page, self.timings.settle_ms)
        return True

    async def _search_and_select(self, page: Page, terms: list[str]) -> str | None:
        for term in terms:
            typed_into = await type_into_visible(page, sel.SEARCH_INPUT, term, self.timings.typing_delay_ms)
            if typed_into is None:
                logger.warning(f"No visible search input for {self.category_name}")
                return None

            logger.info(f"Typed {self.category_name} search term: {term}")
            await settle(page, self.timings.search_response_ms)

            option = await poll_until(
                lambda: first_visible_with_size(page, sel.SUGGESTION_ITEM),
                self.timings.suggestion_attempts,
                self.timings.suggestion_interval_ms,
                f"{self.category_name} suggestions for '{term}'",
            )
            if option is not None:
                await option.click(timeout=self.timings.click_timeout_ms)
                logger.info(f"Selected first {self.category_name} suggestion for '{term}'")
                return term

            logger.warning(f"No {self.category_name} suggestions for '{term}', trying a shorter term")
        return None


class OriginStage(AddressStage):
    state = EngineState.FILLING_ORIGIN
    category_name = sel.ORIGIN_CATEGORY

    def address(self, request: QuoteRequest) -> Address:
        return request.source_address


class DestinationStage(AddressStage):
    state = EngineState.FILLING_DESTINATION
    category_name = sel.DESTINATION_CATEGORY

    def address(self, request: QuoteRequest) -> Address:
        return request.destination_address


# Cargo


class CargoStage(Stage):
    state = EngineState.FILLING_CARGO

    async def run(self, ctx: RunContext) -> StageResult:
        page = ctx.page
        problems: list[str] = []

        for index, package in enumerate(ctx.request.packages):
            if index == 0:
                try:
                    await page.click(sel.category(sel.LOAD_CATEGORY), timeout=self.timings.click_timeout_ms)
                    await settle(page, self.timings.settle_ms)
                except PlaywrightTimeoutError as e:
                    logger.warning(f"Could not click load category: {e}")
            elif not await click_by_text(page, UiAction.ADD_LOAD, self.timings, attempts=3):
                problems.append(f"could not add load {index + 1}, remaining packages skipped")
                break
            else:
                await settle(page, self.timings.short_settle_ms)

            problems.extend(await self._fill_package(page, package, index))

        await settle(page, self.timings.short_settle_ms)
        if await click_by_text(page, UiAction.CONFIRM_LOAD, self.timings, attempts=3):
            await settle(page, self.timings.settle_ms)
        else:
            problems.append("load confirm button not found")

        if problems:
            return StageResult.recoverable("; ".join(problems))
        return StageResult.completed(f"{len(ctx.request.packages)} load(s) entered")

    async def _fill_package(self, page: Page, package: PackageSpec, index: int) -> list[str]:
        logger.info(f"Adding package {index + 1}: {package.name}")
        problems: list[str] = []

        if await click_by_text(page, UiAction.LOOSE_CARGO_TAB, self.timings):
            await settle(page, self.timings.short_settle_ms)
        else:
            logger.warning("Loose Cargo tab not found, continuing")

        if await click_by_text(page, sel.PACKAGE_TYPE_ACTION[package.type], self.timings):
            await settle(page, self.timings.short_settle_ms)
        else:
            problems.append(f"package type {package.type.value} not selectable")

        needed = sel.cargo_slot(CargoField.WEIGHT, index) + 1

        async def inputs_rendered() -> bool:
            return len(await page.query_selector_all(sel.NUMERIC_INPUT)) >= needed

        if not await poll_until(
            inputs_rendered, self.timings.button_attempts, self.timings.button_interval_ms, "cargo inputs"
        ):
            problems.append(f"cargo inputs for load {index + 1} not rendered")
            return problems

        values = {
            CargoField.QUANTITY: package.quantity,
            CargoField.LENGTH: package.length_cm,
            CargoField.WIDTH: package.width_cm,
            CargoField.HEIGHT: package.height_cm,
            CargoField.WEIGHT: package.weight_kg,
        }
        for cargo_field, value in values.items():
            if not await fill_cargo_field(page, cargo_field, value, index):
                problems.append(f"{cargo_field.value} not filled for load {index + 1}")

        logger.info(
            f"Filled load {index + 1}: qty {package.quantity}, "
            f"{format_number(package.length_cm)} x {format_number(package.width_cm)} x "
            f"{format_number(package.height_cm)} cm, {format_number(package.weight_kg)} kg"
        )
        return problems


# Goods


class GoodsStage(Stage):
    state = EngineState.FILLING_GOODS

    async def run(self, ctx: RunContext) -> StageResult:
        page = ctx.page
        problems: list[str] = []

        try:
            await page.click(sel.category(sel.GOODS_CATEGORY), timeout=self.timings.click_timeout_ms)
            await settle(page, self.timings.settle_ms)
        except PlaywrightTimeoutError:
            return StageResult.recoverable("Goods category not reachable")

        value = ctx.request.declared_goods_value or self.settings.freight_default_goods_value_usd
        value_input = await page.query_selector(sel.GOODS_VALUE_INPUT)
        if value_input is not None:
            await value_input.fill(format_number(value))
            logger.info(f"Filled goods value: ${format_number(value)}")
            await settle(page, self.timings.short_settle_ms)
        else:
            problems.append("goods value input missing")

        try:
            await page.click(sel.GOODS_TIMEFRAME, timeout=self.timings.click_timeout_ms)
            await settle(page, self.timings.settle_ms)
            await page.click(sel.GOODS_TIMEFRAME_READY_NOW, timeout=self.timings.click_timeout_ms)
            await settle(page, self.timings.short_settle_ms)
        except PlaywrightTimeoutError as e:
            logger.warning(f"Could not select goods timeframe: {e}")
            problems.append("timeframe not selected")

        if not await click_when_enabled(page, sel.SECTION_DONE_BUTTON, self.timings):
            problems.append("goods section not confirmed")
        else:
            await settle(page, self.timings.settle_ms)

        if problems:
            return StageResult.recoverable("; ".join(problems))
        return StageResult.completed(f"Goods declared at ${format_number(value)}")


# Submission and results


class SubmitStage(Stage):
    state = EngineState.SUBMITTING
    checkpoint_before = Checkpoint.PRE_SUBMIT

    async def run(self, ctx: RunContext) -> StageResult:
        page = ctx.page
        for candidate in sel.SUBMIT_CANDIDATES:
            button = await page.query_selector(candidate)
            if button is None:
                continue
            if await is_disabled(button):
                logger.warning(f"Submit control found but disabled: {candidate}")
                continue

            await button.click(timeout=self.timings.click_timeout_ms)
            logger.info(f"Clicked submit control: {candidate}")
            await settle(page, self.timings.post_submit_ms)
            return StageResult.completed(f"Submitted via {candidate}")

        return StageResult.fatal("No enabled submit control found", ErrorKind.NO_SUBMIT_AVAILABLE)


class AwaitResultsStage(Stage):
    state = EngineState.AWAITING_RESULTS

    async def run(self, ctx: RunContext) -> StageResult:
        page = ctx.page
        notes: list[str] = []

        if await click_by_text(page, UiAction.CONFIRM_SERVICES, self.timings, attempts=3):
            notes.append("services confirmed")
            await settle(page, self.timings.services_confirm_ms)
        else:
            notes.append("no services confirmation shown")

        await settle(page, self.timings.modal_wait_ms)
        close = await page.query_selector(sel.MODAL_CLOSE)
        if close is not None and await close.is_visible():
            await close.click(timeout=self.timings.click_timeout_ms)
            notes.append("modal dismissed")
            await settle(page, self.timings.settle_ms)

        return StageResult.completed(", ".join(notes))


async def select_seller(page: Page, seller: str) -> str | None:
    """
    Tick the filter checkbox labelled exactly with the seller name.

    Returns "selected", "already_checked", or None when the label is not rendered yet.
    Clicking an already-checked box would deselect it, so it is left alone.
    """
    for wrapper in await page.query_selector_all(sel.SELLER_CHECKBOX_WRAPPER):
        label = await wrapper.query_selector(sel.SELLER_NAME)
        if label is None:
            continue
        if ((await label.text_content()) or "").strip() != seller:
            continue

        checkbox = await wrapper.query_selector(sel.CHECKBOX_INPUT)
        if checkbox is not None and await checkbox.is_checked():
            return "already_checked"
        await wrapper.click()
        return "selected"
    return None


class FilterResultsStage(Stage):
    state = EngineState.FILTERING_RESULTS
    checkpoint_after = Checkpoint.POST_RESULTS

    async def run(self, ctx: RunContext) -> StageResult:
        sellers = self.settings.freight_seller_filter
        if not sellers:
            return StageResult.skipped("No seller filter configured")

        page = ctx.page
        logger.info("Waiting for seller filters to load")
        await settle(page, self.timings.seller_panel_wait_ms)

        missing: list[str] = []
        for seller in sellers:
            status = await poll_until(
                lambda: select_seller(page, seller),
                self.timings.seller_attempts,
                self.timings.seller_interval_ms,
                f"seller '{seller}'",
            )
            if status is None:
                logger.warning(f"Could not find seller: {seller}")
                missing.append(seller)
                continue

            logger.info(f"Seller {seller}: {status}")
            if status == "selected":
                await settle(page, self.timings.settle_ms * 2)

        await settle(page, self.timings.settle_ms * 2)
        if missing:
            return StageResult.recoverable(f"Sellers not found: {', '.join(missing)}")
        return StageResult.completed(f"Filtered to {len(sellers)} seller(s)")


class ExtractResultsStage(Stage):
    state = EngineState.EXTRACTING_RESULTS

    async def run(self, ctx: RunContext) -> StageResult:
        ctx.carrier_quotes = await extract_results(ctx.page)
        ctx.quote_url = extract_quote_url(ctx.page.url, self.settings.freight_results_url_pattern)
        logger.info(f"Quote URL: {ctx.quote_url}")
        return StageResult.completed(f"{len(ctx.carrier_quotes)} carrier quote(s)")


PIPELINE: list[type[Stage]] = [
    LoginStage,
    OriginStage,
    DestinationStage,
    CargoStage,
    GoodsStage,
    SubmitStage,
    AwaitResultsStage,
    FilterResultsStage,
    ExtractResultsStage,
]
