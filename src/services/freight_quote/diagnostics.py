from pathlib import Path

from playwright.async_api import Error as PlaywrightError
from playwright.async_api import Page

from common.logging import get_logger

logger = get_logger(__name__)


class Checkpoint:
    POST_LOGIN = "post-login"
    PRE_SUBMIT = "pre-submit"
    POST_RESULTS = "post-results"


class ScreenshotRecorder:
    """Writes full-page screenshots at pipeline checkpoints. Disabled when no directory is set."""

    def __init__(self, directory: str | None, run_id: str):
        self.directory = Path(directory) if directory else None
        self.run_id = run_id
        self.saved: list[Path] = []

    @property
    def enabled(self) -> bool:
        return self.directory is not None

    async def capture(self, page: Page, checkpoint: str) -> Path | None:
        if self.directory is None:
            return None

        path = self.directory / f"{self.run_id}-{checkpoint}.png"
        try:
            self.directory.mkdir(parents=True, exist_ok=True)
            await page.screenshot(path=str(path), full_page=True)
        except (OSError, PlaywrightError) as e:
            # A missing screenshot never changes the quote outcome
            logger.warning(f"Screenshot {checkpoint} failed: {e}")
            return None

        self.saved.append(path)
        logger.debug(f"Screenshot saved: {path}")
        return path
