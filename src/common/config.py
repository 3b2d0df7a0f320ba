from pydantic import BaseModel, SecretStr
from pydantic_settings import BaseSettings, SettingsConfigDict


class WizardTimings(BaseModel):
    """Pauses and poll budgets for the quote wizard. All values in milliseconds."""

    typing_delay_ms: int = 150
    settle_ms: int = 1000
    short_settle_ms: int = 500
    search_response_ms: int = 2500
    click_timeout_ms: int = 3000
    selector_timeout_ms: int = 5000

    # Autocomplete suggestions
    suggestion_attempts: int = 10
    suggestion_interval_ms: int = 500

    # Section "done" button becoming enabled
    button_attempts: int = 16
    button_interval_ms: int = 500
    force_click_timeout_ms: int = 2000

    # Seller filter checkboxes
    seller_attempts: int = 5
    seller_interval_ms: int = 1000
    seller_panel_wait_ms: int = 5000

    # Results page
    post_submit_ms: int = 3000
    services_confirm_ms: int = 5000
    modal_wait_ms: int = 3000
    login_settle_ms: int = 3000
    login_indicator_timeout_ms: int = 2000


class Config(BaseSettings):
    # Freight site
    freight_base_url: str = "https://ship.freightos.com/"
    freight_results_url_pattern: str = r"https://ship\.freightos\.com/results/[a-zA-Z0-9]+"

    # Credentials (email/password win over the cookie store)
    freight_email: str = ""
    freight_password: SecretStr = SecretStr("")
    freight_cookie_file: str = "cookie.json"
    freight_reject_expired_cookies: bool = False

    # Browser
    freight_headless: bool = True
    freight_user_agent: str = (
        "Mozilla/5.0 (Macintosh; Intel Mac OS X 10_15_7) AppleWebKit/537.36 "
        "(KHTML, like Gecko) Chrome/140.0.0.0 Safari/537.36"
    )
    freight_viewport_width: int = 1920
    freight_viewport_height: int = 1080
    freight_browser_args: list[str] = ["--no-sandbox", "--disable-setuid-sandbox"]

    # Manufacturer's fixed pickup address
    freight_source_company: str = "Factory"
    freight_source_street: str = "NO.12 HUASHAN RD"
    freight_source_city: str = "SHILOU TOWN, PANYU DISTRICT, GUANGZHOU"
    freight_source_state: str = "GUANGDONG"
    freight_source_postal_code: str = "511447"
    freight_source_country_code: str = "CN"

    # Results filtering and search behaviour
    freight_seller_filter: list[str] = [
        "Seabay International Freight Forwarding Ltd",
        "UniPower Logistics Co., Ltd.",
    ]
    freight_search_aliases: dict[str, str] = {"guangzhou": "SHILOU TOWN"}
    freight_default_goods_value_usd: int = 8000

    # Timing
    freight_quote_timeout_s: float = 180.0
    freight_timings: WizardTimings = WizardTimings()

    # Diagnostics
    freight_screenshot_dir: str = ""

    # Static pricing
    product_dimensions_file: str = ""

    # Logging
    log_level: str = "INFO"
    log_format: str = "<green>{time:HH:mm:ss}</green> | <level>{level: <8}</level> | <cyan>{name}</cyan>:<cyan>{line}</cyan> - <level>{message}</level>"
    model_config = SettingsConfigDict(env_file=".env", case_sensitive=False, extra="ignore", env_nested_delimiter="__")

    @property
    def freight_source_address(self):
        from models.freight import Address

        return Address(
            company=self.freight_source_company or None,
            street=self.freight_source_street,
            city=self.freight_source_city,
            state=self.freight_source_state,
            postal_code=self.freight_source_postal_code,
            country_code=self.freight_source_country_code,
        )


config = Config()
