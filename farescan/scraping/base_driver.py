import logging

from playwright_stealth import Stealth

from ..config import settings


class BasePlaywrightDriver:
    """Chromium driver with anti-bot stealth applied."""

    timeout: int = settings.render_timeout_ms
    headless: bool = settings.render_headless

    def _get_browser_args(self) -> list[str]:
        return [
            "--disable-blink-features=AutomationControlled",
            "--no-sandbox",
            "--disable-infobars",
            "--window-size=1280,1000",
            "--disable-dev-shm-usage",
            "--disable-gpu",
        ]

    def get_page(self, playwright):
        """Create and return a (browser, page) tuple with stealth applied."""
        browser = playwright.chromium.launch(
            headless=self.headless,
            args=self._get_browser_args(),
        )

        # results pages are read in English so the field extractors see "stop", "hr", "min"
        context = browser.new_context(
            user_agent=(
                "Mozilla/5.0 (Windows NT 10.0; Win64; x64) "
                "AppleWebKit/537.36 (KHTML, like Gecko) "
                "Chrome/131.0.0.0 Safari/537.36"
            ),
            locale="en-US",
            timezone_id="UTC",
            viewport={"width": 1280, "height": 1000},
            color_scheme="light",
            java_script_enabled=True,
            extra_http_headers={
                "Accept-Language": "en-US,en;q=0.9",
                "Accept": "text/html,application/xhtml+xml,application/xml;q=0.9,image/avif,image/webp,*/*;q=0.8",
                "Upgrade-Insecure-Requests": "1",
            },
        )

        # Skip loading images to speed up rendering
        context.route(
            "**/*.{png,jpg,jpeg,webp,svg,gif}",
            lambda route: route.abort(),
        )

        context.add_init_script("""
            Object.defineProperty(navigator, 'webdriver', { get: () => undefined });
            Object.defineProperty(navigator, 'languages', { get: () => ['en-US', 'en'] });
            window.chrome = { runtime: {} };
        """)

        page = context.new_page()
        Stealth().apply_stealth_sync(page)
        page.set_default_timeout(self.timeout)
        logging.debug("Browser page created with stealth applied (headless=%s).", self.headless)
        return browser, page
