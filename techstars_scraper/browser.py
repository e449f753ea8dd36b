"""
Headless browser session used to render the job listing

ListingSession is the small surface the listing acquirer needs from a
browser. PlaywrightListingSession drives Chromium through Playwright; tests
substitute a scripted fake.
"""

import logging
from typing import Optional

from playwright.sync_api import sync_playwright, Error as PlaywrightError, TimeoutError as PlaywrightTimeoutError

from . import config
from .errors import AcquisitionFailure

logger = logging.getLogger(__name__)

COUNT_GROWTH_SCRIPT = "([selector, previous]) => document.querySelectorAll(selector).length > previous"
HIDE_ELEMENT_SCRIPT = """(elementId) => {
    const elem = document.getElementById(elementId);
    if (elem) { elem.style.display = 'none'; }
}"""


class ListingSession:
    """Browser operations used while expanding the listing page."""

    def open(self, url: str) -> None:
        raise NotImplementedError

    def wait_for_selector(self, selector: str, timeout_ms: int) -> bool:
        """Wait until at least one element matches. False on timeout."""
        raise NotImplementedError

    def count(self, selector: str) -> int:
        raise NotImplementedError

    def hide_element(self, element_id: str) -> None:
        """Set display:none on the element with this id, if there is one."""
        raise NotImplementedError

    def click(self, selector: str, timeout_ms: int) -> bool:
        """Scroll the element into view and click it. False if it never became clickable."""
        raise NotImplementedError

    def scroll_bottom(self) -> None:
        raise NotImplementedError

    def wait_for_count_growth(self, selector: str, previous: int, timeout_ms: int) -> bool:
        """Wait until more than `previous` elements match. False on timeout."""
        raise NotImplementedError

    def html(self) -> Optional[str]:
        raise NotImplementedError

    def close(self) -> None:
        pass

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc, tb):
        self.close()


class PlaywrightListingSession(ListingSession):
    """ListingSession backed by a headless Chromium."""

    def __init__(self, user_agent: str = config.USER_AGENT, headless: bool = config.HEADLESS):
        try:
            self._playwright = sync_playwright().start()
        except PlaywrightError as e:
            raise AcquisitionFailure(f"Could not start Playwright: {e}") from e

        try:
            # Sandbox off for containers
            self._browser = self._playwright.chromium.launch(
                headless=headless,
                args=["--no-sandbox", "--disable-dev-shm-usage"],
            )
            context = self._browser.new_context(
                user_agent=user_agent,
                viewport={'width': 1920, 'height': 1080},
            )
            self._page = context.new_page()
        except PlaywrightError as e:
            self._playwright.stop()
            raise AcquisitionFailure(f"Could not launch browser: {e}") from e
        except Exception:
            self._playwright.stop()
            raise

    def open(self, url: str) -> None:
        try:
            self._page.goto(url, wait_until="domcontentloaded", timeout=config.WAIT_TIMEOUT * 2)
        except PlaywrightError as e:
            raise AcquisitionFailure(f"Could not load {url}: {e}") from e

    def wait_for_selector(self, selector: str, timeout_ms: int) -> bool:
        try:
            self._page.wait_for_selector(selector, state="attached", timeout=timeout_ms)
            return True
        except PlaywrightTimeoutError:
            return False

    def count(self, selector: str) -> int:
        return self._page.locator(selector).count()

    def hide_element(self, element_id: str) -> None:
        self._page.evaluate(HIDE_ELEMENT_SCRIPT, element_id)

    def click(self, selector: str, timeout_ms: int) -> bool:
        button = self._page.locator(selector).first
        try:
            button.wait_for(state="visible", timeout=timeout_ms)
            button.scroll_into_view_if_needed(timeout=timeout_ms)
            button.click(timeout=timeout_ms)
            return True
        except PlaywrightTimeoutError:
            return False

    def scroll_bottom(self) -> None:
        self._page.evaluate("window.scrollBy(0, document.body.scrollHeight)")

    def wait_for_count_growth(self, selector: str, previous: int, timeout_ms: int) -> bool:
        try:
            self._page.wait_for_function(COUNT_GROWTH_SCRIPT, arg=[selector, previous], timeout=timeout_ms)
            return True
        except PlaywrightTimeoutError:
            return False

    def html(self) -> Optional[str]:
        return self._page.content()

    def close(self) -> None:
        try:
            self._browser.close()
        finally:
            self._playwright.stop()
            logger.info("Browser closed")
