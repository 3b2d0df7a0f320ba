"""
Generic page interactions shared by all wizard stages.

Stages never click or type by themselves; they go through these helpers so
visibility filtering, disabled-state guards and polling behave the same everywhere.
"""

from playwright.async_api import ElementHandle, Page
from playwright.async_api import TimeoutError as PlaywrightTimeoutError

from common.config import WizardTimings
from common.logging import get_logger
from services.freight_quote.polling import poll_until
from services.freight_quote.selectors import (
    BUTTON_TEXT,
    NUMERIC_INPUT,
    TEXT_CLICKABLE,
    CargoField,
    UiAction,
    cargo_slot,
)

logger = get_logger(__name__)

# True when neither the element nor its container is display:none
IS_DISPLAYED_JS = """el => {
    const container = el.parentElement || el;
    return window.getComputedStyle(container).display !== 'none'
        && window.getComputedStyle(el).display !== 'none';
}"""


async def settle(page: Page, ms: int) -> None:
    """Give the page time to react to the last interaction."""
    if ms > 0:
        await page.wait_for_timeout(ms)


async def is_displayed(handle: ElementHandle) -> bool:
    return bool(await handle.evaluate(IS_DISPLAYED_JS))


async def is_disabled(handle: ElementHandle) -> bool:
    # The site clears the attribute once a section validates; its value is irrelevant
    return await handle.get_attribute("disabled") is not None


async def first_displayed(page: Page, selector: str) -> ElementHandle | None:
    """First element matching the selector whose computed display is not none."""
    for handle in await page.query_selector_all(selector):
        if await is_displayed(handle):
            return handle
    return None


async def first_visible_with_size(page: Page, selector: str) -> ElementHandle | None:
    """First element matching the selector that is visible and has a non-zero box."""
    for handle in await page.query_selector_all(selector):
        box = await handle.bounding_box()
        if not box or box["width"] <= 0 or box["height"] <= 0:
            continue
        if await handle.is_visible():
            return handle
    return None


async def type_into_visible(page: Page, selector: str, text: str, delay_ms: int) -> ElementHandle | None:
    """
    Focus the displayed instance of an input and type into it key by key.

    Per-key typing matters: the site's autocomplete only queries its backend on
    keyboard events, so fill() would leave the suggestion list empty.

    Returns:
        The element that received the keystrokes, or None if no instance is displayed.
    """
    handle = await first_displayed(page, selector)
    if handle is None:
        return None

    await handle.fill("")
    await handle.focus()
    await page.keyboard.type(text, delay=delay_ms)
    return handle


async def click_by_text(
    page: Page,
    action: UiAction,
    timings: WizardTimings,
    attempts: int = 1,
) -> bool:
    """
    Click the visible, enabled control whose text matches the literal for an action.

    Exact text matches win over substring matches, so "Confirm" does not hit
    "Confirm Services & Get Results" when both are on screen.
    """
    text = BUTTON_TEXT[action]

    async def find() -> ElementHandle | None:
        partial = None
        for handle in await page.query_selector_all(TEXT_CLICKABLE):
            label = " ".join((await handle.inner_text()).split())
            if text.lower() not in label.lower():
                continue
            if not await handle.is_visible() or not await handle.is_enabled():
                continue
            if label.lower() == text.lower():
                return handle
            partial = partial or handle
        return partial

    handle = await poll_until(find, attempts, timings.button_interval_ms, f"control '{text}'")
    if handle is None:
        logger.debug(f"No visible control with text '{text}'")
        return False

    await handle.click(timeout=timings.click_timeout_ms)
    logger.debug(f"Clicked '{text}'")
    return True


async def click_when_enabled(page: Page, selector: str, timings: WizardTimings) -> bool:
    """
    Wait for a control to lose its disabled attribute, then click it.

    Falls back to a forced click when the poll runs out, because the site sometimes
    leaves the attribute on a control that does accept clicks.
    """

    async def enabled_handle() -> ElementHandle | None:
        handle = await page.query_selector(selector)
        if handle is not None and not await is_disabled(handle):
            return handle
        return None

    handle = await poll_until(enabled_handle, timings.button_attempts, timings.button_interval_ms, selector)
    if handle is not None:
        await handle.click(timeout=timings.click_timeout_ms)
        return True

    logger.warning(f"{selector} never became enabled, trying force click")
    try:
        await page.click(selector, force=True, timeout=timings.force_click_timeout_ms)
        return True
    except PlaywrightTimeoutError:
        logger.warning(f"Could not click {selector} at all")
        return False


async def fill_cargo_field(page: Page, field: CargoField, value: float | int, load_index: int = 0) -> bool:
    """Fill one cargo field through its positional slot among the editable numeric inputs."""
    slot = cargo_slot(field, load_index)
    inputs = await page.query_selector_all(NUMERIC_INPUT)
    if len(inputs) <= slot:
        logger.warning(f"Cargo field {field.value} (slot {slot}) missing, only {len(inputs)} numeric inputs")
        return False

    await inputs[slot].fill(format_number(value))
    return True


def format_number(value: float | int) -> str:
    """Render 231.0 as '231' and 4.5 as '4.5' for numeric inputs."""
    if float(value).is_integer():
        return str(int(value))
    return str(value)
