from unittest.mock import AsyncMock

import pytest
from playwright.async_api import Error as PlaywrightError

from services.freight_quote.browser import _close


@pytest.mark.asyncio
async def test_close_tolerates_dead_browser():
    target = AsyncMock()
    target.close.side_effect = PlaywrightError("Target page, context or browser has been closed")

    await _close(target)

    target.close.assert_awaited_once()
