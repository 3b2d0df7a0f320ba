"""
Session/credential provider for the freight site.

Supplies either an email/password pair or a cookie set exported from a logged-in
browser (Cookie-Editor / EditThisCookie JSON format), converted into the shape
Playwright's BrowserContext.add_cookies() expects.
"""

import json
import time
from collections import defaultdict
from pathlib import Path

from pydantic import ValidationError

from common.config import Config, config
from common.errors import ConfigurationMissingError, SessionInvalidError
from common.logging import get_logger
from services.freight_quote.schemas import BrowserCookie, ExportedCookie, SessionCredentials

logger = get_logger(__name__)

# Export vocabulary -> Playwright vocabulary. Anything else means "unset".
SAME_SITE_MAP = {
    "lax": "Lax",
    "strict": "Strict",
    "no_restriction": "None",
}

ESSENTIAL_COOKIES = ["session", "JSESSIONID"]


def convert_same_site(value: str | None) -> str | None:
    if not value:
        return None
    return SAME_SITE_MAP.get(value.lower())


def convert_cookie(cookie: ExportedCookie) -> BrowserCookie:
    """Convert one exported cookie record into a browser cookie."""
    # Exports carry fractional epoch seconds; Playwright takes whole epoch seconds
    expires = int(cookie.expiration_date) if cookie.expiration_date is not None else None
    return BrowserCookie(
        name=cookie.name,
        value=cookie.value,
        domain=cookie.domain,
        path=cookie.path,
        http_only=cookie.http_only,
        secure=cookie.secure,
        same_site=convert_same_site(cookie.same_site),
        expires=expires,
    )


def parse_cookie_store(raw: object) -> list[ExportedCookie]:
    """Validate the decoded JSON of a cookie store."""
    if not isinstance(raw, list):
        raise SessionInvalidError(f"Cookie store must contain a list of cookies, got {type(raw).__name__}")
    try:
        return [ExportedCookie.model_validate(item) for item in raw]
    except ValidationError as e:
        raise SessionInvalidError(f"Malformed cookie record: {e}") from e


def count_expired(cookies: list[ExportedCookie], now: float | None = None) -> int:
    now = time.time() if now is None else now
    return sum(1 for c in cookies if c.expiration_date is not None and c.expiration_date < now)


def describe_cookie_store(cookies: list[ExportedCookie], now: float | None = None) -> dict[str, list[dict]]:
    """Group cookies by domain with their expiry status, for the cookie helper."""
    now = time.time() if now is None else now
    by_domain: dict[str, list[dict]] = defaultdict(list)
    for cookie in cookies:
        by_domain[cookie.domain].append(
            {
                "name": cookie.name,
                "expires": cookie.expiration_date,
                "expired": cookie.expiration_date is not None and cookie.expiration_date < now,
            }
        )
    return dict(by_domain)


class SessionProvider:
    """Loads the credentials used to authenticate one quote run. Read-only."""

    def __init__(self, settings: Config | None = None):
        self.settings = settings or config

    @property
    def cookie_path(self) -> Path:
        return Path(self.settings.freight_cookie_file)

    def has_credentials(self) -> bool:
        return bool(self.settings.freight_email and self.settings.freight_password.get_secret_value())

    def obtain_session(self) -> SessionCredentials:
        """
        Return email/password credentials when configured, otherwise the cookie store.

        Raises:
            ConfigurationMissingError: Neither credentials nor a readable JSON cookie store.
            SessionInvalidError: The cookie store is not a list of cookie records, or
                expired cookies were found and expired sessions are rejected.
        """
        if self.has_credentials():
            logger.info("Using email/password credentials for freight site")
            return SessionCredentials(
                email=self.settings.freight_email,
                password=self.settings.freight_password,
            )

        exported = self.load_cookie_store()
        expired = count_expired(exported)
        if expired:
            logger.warning(f"{expired} of {len(exported)} cookies in {self.cookie_path} have expired")
            if self.settings.freight_reject_expired_cookies:
                raise SessionInvalidError(f"{expired} cookies have expired and no credentials are configured")

        cookies = [convert_cookie(c) for c in exported]
        logger.info(f"Loaded {len(cookies)} cookies from {self.cookie_path}")
        return SessionCredentials(cookies=cookies, expired_cookie_count=expired)

    def load_cookie_store(self) -> list[ExportedCookie]:
        path = self.cookie_path
        try:
            raw = json.loads(path.read_text(encoding="utf-8"))
        except FileNotFoundError as e:
            raise ConfigurationMissingError(
                f"No freight credentials configured and cookie store {path} does not exist"
            ) from e
        except (OSError, json.JSONDecodeError) as e:
            raise ConfigurationMissingError(f"Cookie store {path} is not readable JSON: {e}") from e

        return parse_cookie_store(raw)
