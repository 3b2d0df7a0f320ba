#!/usr/bin/env python3
"""
Freight site cookie helper.

Usage:
    python -m scripts.cookies validate   # check the store parses and report expired cookies
    python -m scripts.cookies info       # list cookies per domain with expiry
    python -m scripts.cookies refresh    # how to export a fresh cookie store
"""

import argparse
import sys
import time
from datetime import datetime

from common.config import config
from common.errors import FreightQuoteError
from services.freight_quote.session import (
    ESSENTIAL_COOKIES,
    SessionProvider,
    count_expired,
    describe_cookie_store,
)


def validate() -> int:
    provider = SessionProvider()
    print(f"Validating freight cookies in {provider.cookie_path}...")

    try:
        cookies = provider.load_cookie_store()
    except FreightQuoteError as e:
        print(f"[{e.kind.value}] {e}")
        print("Run 'python -m scripts.cookies refresh' for export instructions.")
        return 1

    print(f"Found {len(cookies)} cookies")

    found = [name for name in ESSENTIAL_COOKIES if any(c.name == name for c in cookies)]
    print(f"Essential cookies found: {', '.join(found) or 'none'}")

    now = time.time()
    expired = count_expired(cookies, now)
    if expired:
        print(f"Warning: {expired} cookies have expired")
        for cookie in cookies:
            if cookie.expiration_date is not None and cookie.expiration_date < now:
                print(f"   - {cookie.name}: expired on {datetime.fromtimestamp(cookie.expiration_date):%Y-%m-%d}")

    session_cookie = next((c for c in cookies if c.name == "session"), None)
    if session_cookie is not None:
        if session_cookie.session:
            print("Session cookie is session-scoped")
        elif session_cookie.expiration_date is not None:
            state = "EXPIRED" if session_cookie.expiration_date < now else "valid"
            print(f"Session cookie expires {datetime.fromtimestamp(session_cookie.expiration_date)} ({state})")

    return 0


def info() -> int:
    try:
        cookies = SessionProvider().load_cookie_store()
    except FreightQuoteError as e:
        print(f"[{e.kind.value}] {e}")
        return 1

    for domain, entries in describe_cookie_store(cookies).items():
        print(f"\n{domain}:")
        for entry in entries:
            expiry = f"{datetime.fromtimestamp(entry['expires']):%Y-%m-%d}" if entry["expires"] else "Session"
            status = " (EXPIRED)" if entry["expired"] else ""
            print(f"  - {entry['name']}: {expiry}{status}")
    return 0


def refresh() -> int:
    print("How to refresh freight site cookies")
    print("=" * 36)
    print(f"1. Open {config.freight_base_url} in your browser and log in")
    print("2. Export cookies for the site with Cookie-Editor or EditThisCookie (JSON)")
    print(f"3. Save the exported JSON to: {config.freight_cookie_file}")
    print("4. Run 'python -m scripts.cookies validate'")
    print("5. Restart the service")
    print("\nSetting FREIGHT_EMAIL and FREIGHT_PASSWORD avoids cookie expiry altogether.")
    return 0


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(description="Manage freight site session cookies")
    parser.add_argument("command", nargs="?", default="validate", choices=["validate", "info", "refresh"])
    args = parser.parse_args(argv)
    return {"validate": validate, "info": info, "refresh": refresh}[args.command]()


if __name__ == "__main__":
    sys.exit(main())
