"""Playwright renderer for flight results pages.

One browser page is reused for every URL of a batch; it must only be driven from one thread.
"""
import logging

from playwright.sync_api import Error as PlaywrightError, sync_playwright

from .base_driver import BasePlaywrightDriver
from ..config import settings
from ..errors import PageLoadInsufficient
from ..parsing.normalize import content_line_count, normalize_text

_INNER_TEXT_JS = "() => document.body ? document.body.innerText : ''"


class PlaywrightRenderer(BasePlaywrightDriver):
    """Render a URL and return the page's visible text once it holds enough lines.

    Use as a context manager; the browser is started on enter and closed on exit.
    """

    def __init__(
            self,
            min_lines: int | None = None,
            max_attempts: int | None = None,
            poll_interval_ms: int = 1000,
            headless: bool | None = None,
    ):
        self.min_lines = settings.min_content_lines if min_lines is None else min_lines
        self.max_attempts = max_attempts or settings.render_max_attempts
        self.poll_interval_ms = poll_interval_ms
        if headless is not None:
            self.headless = headless
        self._playwright = None
        self._browser = None
        self._page = None

    def __enter__(self) -> "PlaywrightRenderer":
        self._playwright = sync_playwright().start()
        try:
            self._browser, self._page = self.get_page(self._playwright)
        except PlaywrightError:
            self._playwright.stop()
            raise
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        try:
            if self._browser is not None:
                self._browser.close()
        finally:
            self._playwright.stop()
            self._browser = self._page = self._playwright = None

    def render(self, url: str) -> str:
        if self._page is None:
            raise RuntimeError("PlaywrightRenderer must be used inside a 'with' block")
        self._page.goto(url, wait_until="domcontentloaded")
        line_count = 0
        for attempt in range(1, self.max_attempts + 1):
            text = self._page.evaluate(_INNER_TEXT_JS)
            line_count = content_line_count(normalize_text(text))
            if line_count > self.min_lines:
                logging.debug("Page ready after %d attempt(s): %d lines", attempt, line_count)
                return text
            self._page.wait_for_timeout(self.poll_interval_ms)
        raise PageLoadInsufficient(url, line_count, self.min_lines)
