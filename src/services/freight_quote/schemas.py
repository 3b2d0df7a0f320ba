from typing import Literal

from pydantic import BaseModel, ConfigDict, Field, SecretStr, model_validator

from common.errors import FATAL_KINDS, ErrorKind
from models.freight import StageStatus


class ExportedCookie(BaseModel):
    """A cookie record as exported by browser extensions (Cookie-Editor, EditThisCookie)."""

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    name: str
    value: str
    domain: str
    path: str = "/"
    host_only: bool = Field(False, alias="hostOnly")
    http_only: bool = Field(False, alias="httpOnly")
    secure: bool = False
    session: bool = False
    same_site: str | None = Field(None, alias="sameSite")
    expiration_date: float | None = Field(None, alias="expirationDate")
    store_id: str | None = Field(None, alias="storeId")


class BrowserCookie(BaseModel):
    """A cookie in the browser driver's vocabulary."""

    model_config = ConfigDict(frozen=True)

    name: str
    value: str
    domain: str
    path: str = "/"
    http_only: bool = False
    secure: bool = False
    same_site: Literal["Lax", "Strict", "None"] | None = None
    expires: int | None = None

    def to_playwright(self) -> dict:
        """Shape accepted by BrowserContext.add_cookies(); unset keys are left out."""
        cookie = {
            "name": self.name,
            "value": self.value,
            "domain": self.domain,
            "path": self.path,
            "httpOnly": self.http_only,
            "secure": self.secure,
        }
        if self.same_site is not None:
            cookie["sameSite"] = self.same_site
        if self.expires is not None:
            cookie["expires"] = self.expires
        return cookie


class SessionCredentials(BaseModel):
    """Either an email/password pair or a cookie set."""

    email: str | None = None
    password: SecretStr | None = None
    cookies: list[BrowserCookie] = []
    expired_cookie_count: int = 0

    @model_validator(mode="after")
    def _check_pair(self) -> "SessionCredentials":
        if (self.email is None) != (self.password is None):
            raise ValueError("Email and password must be given together")
        if self.email is not None and self.cookies:
            raise ValueError("Credentials and cookies are mutually exclusive")
        return self

    @property
    def uses_password(self) -> bool:
        return self.email is not None


class StageResult(BaseModel):
    """Outcome of one stage handler. Decides whether the pipeline continues, retries or aborts."""

    status: StageStatus
    diagnostic: str = ""
    error_kind: ErrorKind | None = None

    @model_validator(mode="after")
    def _fatal_has_kind(self) -> "StageResult":
        if self.status == StageStatus.FAILED_FATAL and self.error_kind not in FATAL_KINDS:
            raise ValueError(f"Fatal stage results need a fatal error kind, got {self.error_kind}")
        return self

    @classmethod
    def completed(cls, diagnostic: str = "") -> "StageResult":
        return cls(status=StageStatus.COMPLETED, diagnostic=diagnostic)

    @classmethod
    def skipped(cls, diagnostic: str = "") -> "StageResult":
        return cls(status=StageStatus.SKIPPED, diagnostic=diagnostic)

    @classmethod
    def recoverable(cls, diagnostic: str, kind: ErrorKind = ErrorKind.STAGE_TIMEOUT) -> "StageResult":
        return cls(status=StageStatus.FAILED_RECOVERABLE, diagnostic=diagnostic, error_kind=kind)

    @classmethod
    def fatal(cls, diagnostic: str, kind: ErrorKind) -> "StageResult":
        return cls(status=StageStatus.FAILED_FATAL, diagnostic=diagnostic, error_kind=kind)

    @property
    def is_fatal(self) -> bool:
        return self.status == StageStatus.FAILED_FATAL


class RawQuoteRow(BaseModel):
    """Text pulled from one result row before any parsing."""

    vendor: str | None = None
    price_title: str | None = None
    price_whole: str | None = None
    price_decimals: str | None = None
    transit_time: str | None = None
    departure: str | None = None
    arrival: str | None = None
