"""
Everything the quote engine knows about the freight site's markup.

The site exposes few stable identifiers, so three kinds of coupling live here
and only here: CSS/data-test-id selectors, literal visible texts used to find
buttons and tabs, and positional slots for the unlabeled numeric cargo inputs.
A wording or layout change on the site should be a one-line edit in this file.
"""

from enum import Enum

from models.freight import PackageType

# Wizard sections

CATEGORY_WRAPPER = '[data-test-id="CategoryWrapper-{category}"]'
ADDRESS_SELECT = '[data-test-id="{category}-address-select"]'
SECTION_DONE_BUTTON = '[data-test-id="section-footer-done-btn"]'

ORIGIN_CATEGORY = "origin"
DESTINATION_CATEGORY = "destination"
LOAD_CATEGORY = "load"
GOODS_CATEGORY = "goods"

# Address autocomplete. Several search inputs can exist at once; only one is displayed.
SEARCH_INPUT = ".ant-select-search__field"
SUGGESTION_ITEM = ".ant-select-dropdown-menu-item"

# Cargo
NUMERIC_INPUT = 'input[type="number"]:not([readonly])'

# Goods
GOODS_VALUE_INPUT = '[data-test-id="goods-section-value"]'
GOODS_TIMEFRAME = '[data-test-id="goods-section-timeframe"]'
GOODS_TIMEFRAME_READY_NOW = '[data-test-id="goods-section-timeframe-ready-now"]'

# Login
LOGIN_EMAIL_INPUT = 'input[type="email"], input[placeholder*="email" i]'
LOGIN_PASSWORD_INPUT = 'input[type="password"], input[placeholder*="password" i]'
LOGIN_INDICATORS = [
    ".user-menu",
    '[data-testid="user-menu"]',
    ".navbar .dropdown",
    ".header-user",
    'button:has-text("Profile")',
    'a:has-text("Dashboard")',
]

# Submission, in order of preference
SUBMIT_CANDIDATES = [
    '[data-test-id="search-button"]',
    'button[type="submit"]',
    'button:has-text("Get Quote")',
    'button:has-text("Submit")',
    'button:has-text("Calculate")',
    ".submit-quote-btn",
]

# Results page
MODAL_CLOSE = ".ant-modal-close"
SELLER_CHECKBOX_WRAPPER = ".ant-checkbox-wrapper"
SELLER_NAME = ".filter-name span"
CHECKBOX_INPUT = 'input[type="checkbox"]'

QUOTE_ROW = "[data-quote-id]"
QUOTE_VENDOR = '[data-test-id="vendor-label"]'
QUOTE_PRICE = '[data-test-id="price"] .price'
QUOTE_PRICE_DECIMALS = '[data-test-id="price"] .decimals'
QUOTE_TRANSIT_TIME = '[data-test-id="transit-time"]'
QUOTE_DEPARTURE = '[data-test-id="est-departure"]'
QUOTE_ARRIVAL = '[data-test-id="est-arrival"]'

# Elements matched by visible text are looked up among these
TEXT_CLICKABLE = 'button, a, [role="tab"]'


class UiAction(str, Enum):
    OPEN_LOGIN = "open_login"
    SUBMIT_LOGIN = "submit_login"
    LOOSE_CARGO_TAB = "loose_cargo_tab"
    PALLETS = "pallets"
    BOXES = "boxes"
    ADD_LOAD = "add_load"
    CONFIRM_LOAD = "confirm_load"
    CONFIRM_SERVICES = "confirm_services"


BUTTON_TEXT: dict[UiAction, str] = {
    UiAction.OPEN_LOGIN: "Login",
    UiAction.SUBMIT_LOGIN: "Log in",
    UiAction.LOOSE_CARGO_TAB: "Loose Cargo",
    UiAction.PALLETS: "Pallets",
    UiAction.BOXES: "Boxes/Crates",
    UiAction.ADD_LOAD: "Add another load",
    UiAction.CONFIRM_LOAD: "Confirm",
    UiAction.CONFIRM_SERVICES: "Confirm Services & Get Results",
}

PACKAGE_TYPE_ACTION: dict[PackageType, UiAction] = {
    PackageType.PALLET: UiAction.PALLETS,
    PackageType.BOX: UiAction.BOXES,
}


class CargoField(str, Enum):
    QUANTITY = "quantity"
    LENGTH = "length"
    WIDTH = "width"
    HEIGHT = "height"
    WEIGHT = "weight"


# Position of each field among the editable numeric inputs of one load row
CARGO_FIELD_SLOTS: dict[CargoField, int] = {
    CargoField.QUANTITY: 0,
    CargoField.LENGTH: 1,
    CargoField.WIDTH: 2,
    CargoField.HEIGHT: 3,
    CargoField.WEIGHT: 4,
}
CARGO_SLOTS_PER_LOAD = len(CARGO_FIELD_SLOTS)


def cargo_slot(field: CargoField, load_index: int = 0) -> int:
    """Index of a cargo field among all editable numeric inputs on the page."""
    return load_index * CARGO_SLOTS_PER_LOAD + CARGO_FIELD_SLOTS[field]


def category(name: str) -> str:
    return CATEGORY_WRAPPER.format(category=name)


def address_select(name: str) -> str:
    return ADDRESS_SELECT.format(category=name)
