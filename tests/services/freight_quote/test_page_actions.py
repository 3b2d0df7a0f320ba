"""Tests for the shared page interactions."""

import pytest

from fakes import FAST_TIMINGS, FakeElement, FakePage, button
from services.freight_quote import selectors as sel
from services.freight_quote.page_actions import (
    click_by_text,
    click_when_enabled,
    fill_cargo_field,
    first_visible_with_size,
    format_number,
    type_into_visible,
)
from services.freight_quote.selectors import CargoField, UiAction


@pytest.mark.asyncio
async def test_type_into_visible_skips_hidden_instance():
    page = FakePage()
    hidden = FakeElement(name="hidden", displayed=False)
    shown = FakeElement(name="shown")
    page.add(sel.SEARCH_INPUT, hidden, shown)

    target = await type_into_visible(page, sel.SEARCH_INPUT, "New York", delay_ms=0)

    assert target is shown
    assert shown.typed == "New York"
    assert hidden.typed == ""


@pytest.mark.asyncio
async def test_type_into_visible_clears_previous_term():
    page = FakePage()
    field = page.add(sel.SEARCH_INPUT, FakeElement())

    await type_into_visible(page, sel.SEARCH_INPUT, "SHILOU TOWN", delay_ms=0)
    await type_into_visible(page, sel.SEARCH_INPUT, "511447", delay_ms=0)

    assert field.value == "511447"


@pytest.mark.asyncio
async def test_type_into_visible_without_displayed_input():
    page = FakePage()
    page.add(sel.SEARCH_INPUT, FakeElement(displayed=False))

    assert await type_into_visible(page, sel.SEARCH_INPUT, "x", delay_ms=0) is None


@pytest.mark.asyncio
async def test_first_visible_with_size_ignores_collapsed_elements():
    page = FakePage()
    page.add(
        sel.SUGGESTION_ITEM,
        FakeElement(name="collapsed", box=(0, 0)),
        FakeElement(name="detached", box=None),
        FakeElement(name="invisible", visible=False),
        FakeElement(name="real"),
    )

    found = await first_visible_with_size(page, sel.SUGGESTION_ITEM)
    assert found.name == "real"


@pytest.mark.asyncio
async def test_click_by_text_prefers_exact_match():
    page = FakePage()
    services = button("Confirm Services & Get Results")
    confirm = button("Confirm")
    page.add(sel.TEXT_CLICKABLE, services, confirm)

    assert await click_by_text(page, UiAction.CONFIRM_LOAD, FAST_TIMINGS)
    assert confirm.clicks == 1
    assert services.clicks == 0


@pytest.mark.asyncio
async def test_click_by_text_normalises_whitespace():
    page = FakePage()
    tab = page.add(sel.TEXT_CLICKABLE, button("  Loose\n  Cargo "))

    assert await click_by_text(page, UiAction.LOOSE_CARGO_TAB, FAST_TIMINGS)
    assert tab.clicks == 1


@pytest.mark.asyncio
async def test_click_by_text_skips_hidden_and_disabled():
    page = FakePage()
    hidden = button("Pallets", displayed=False)
    disabled = button("Pallets", enabled=False)
    page.add(sel.TEXT_CLICKABLE, hidden, disabled)

    assert not await click_by_text(page, UiAction.PALLETS, FAST_TIMINGS, attempts=2)
    assert hidden.clicks == 0
    assert disabled.clicks == 0


@pytest.mark.asyncio
async def test_click_when_enabled_clicks_enabled_control():
    page = FakePage()
    done = page.add(sel.SECTION_DONE_BUTTON, FakeElement())

    assert await click_when_enabled(page, sel.SECTION_DONE_BUTTON, FAST_TIMINGS)
    assert done.clicks == 1


@pytest.mark.asyncio
async def test_click_when_enabled_forces_click_on_stuck_control():
    page = FakePage()
    done = page.add(sel.SECTION_DONE_BUTTON, FakeElement(attrs={"disabled": ""}))

    assert await click_when_enabled(page, sel.SECTION_DONE_BUTTON, FAST_TIMINGS)
    assert done.clicks == 1


@pytest.mark.asyncio
async def test_click_when_enabled_missing_control():
    assert not await click_when_enabled(FakePage(), sel.SECTION_DONE_BUTTON, FAST_TIMINGS)


@pytest.mark.asyncio
async def test_fill_cargo_field_uses_slot_of_load():
    page = FakePage()
    inputs = [FakeElement(name=f"n{i}") for i in range(10)]
    page.add(sel.NUMERIC_INPUT, *inputs)

    assert await fill_cargo_field(page, CargoField.WEIGHT, 12.5, load_index=1)
    assert await fill_cargo_field(page, CargoField.QUANTITY, 2, load_index=1)

    assert inputs[9].value == "12.5"
    assert inputs[5].value == "2"
    assert all(i.value == "" for i in inputs[:5])


@pytest.mark.asyncio
async def test_fill_cargo_field_missing_slot():
    page = FakePage()
    page.add(sel.NUMERIC_INPUT, *(FakeElement() for _ in range(4)))

    assert not await fill_cargo_field(page, CargoField.WEIGHT, 570)


@pytest.mark.parametrize("value, expected", [(231.0, "231"), (4.5, "4.5"), (8000, "8000")])
def test_format_number(value, expected):
    assert format_number(value) == expected
