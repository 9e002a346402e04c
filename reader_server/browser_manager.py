"""Singleton browser manager for Playwright."""

import os
from pathlib import Path
from typing import Optional
from playwright.async_api import async_playwright, Browser, BrowserContext, Page, Playwright

from article_resolver.classifier import is_article_url
from article_resolver.config import ResolverConfig
from article_resolver.interceptor import LinkInterceptor
from article_resolver.reader_view import ReaderViewWatcher
from article_resolver.surface import PlaywrightSurface


# Safari user agents, desktop and mobile; NYT and the mirrors serve both
DESKTOP_USER_AGENT = (
    "Mozilla/5.0 (Macintosh; Intel Mac OS X 15_5) "
    "AppleWebKit/605.1.15 (KHTML, like Gecko) "
    "Version/18.5 Safari/605.1.15"
)
MOBILE_USER_AGENT = (
    "Mozilla/5.0 (iPhone; CPU iPhone OS 18_5 like Mac OS X) "
    "AppleWebKit/605.1.15 (KHTML, like Gecko) "
    "Version/18.5 Mobile/15E148 Safari/605.1.15"
)

# JavaScript to mask Playwright/automation fingerprints; archive mirrors
# answer automation with a CAPTCHA page
_STEALTH_JS = """
() => {
    Object.defineProperty(navigator, 'webdriver', { get: () => false });
    Object.defineProperty(navigator, 'languages', {
        get: () => ['en-US', 'en'],
    });
}
"""


def _find_chromium_executable() -> Optional[str]:
    """Find a Chromium executable under PLAYWRIGHT_BROWSERS_PATH, if one is set."""
    browsers_path = os.environ.get("PLAYWRIGHT_BROWSERS_PATH")
    if not browsers_path or not os.path.isdir(browsers_path):
        return None
    base = Path(browsers_path)
    for pattern in [
        "chromium-*/chrome-linux/chrome",
        "chromium-*/chrome-mac-arm64/Google Chrome for Testing.app/Contents/MacOS/Google Chrome for Testing",
        "chromium-*/chrome-mac-x64/Google Chrome for Testing.app/Contents/MacOS/Google Chrome for Testing",
        "chromium_headless_shell-*/chrome-linux/headless_shell",
    ]:
        for p in base.glob(pattern):
            if p.is_file() and os.access(p, os.X_OK):
                return str(p)
    return None


class BrowserManager:
    """Singleton owner of the browser, the main browsing page and resolver pages.

    The main page shows the NYT site with article links intercepted; every
    resolution gets a fresh page from ``new_page`` so attempts never share
    a navigation history.
    """

    _instance: Optional['BrowserManager'] = None
    _playwright: Optional[Playwright] = None
    _browser: Optional[Browser] = None
    _context: Optional[BrowserContext] = None
    _page: Optional[Page] = None
    _interceptor: Optional[LinkInterceptor] = None
    _reader_view: Optional[ReaderViewWatcher] = None
    _config: ResolverConfig = ResolverConfig()

    def __new__(cls):
        if cls._instance is None:
            cls._instance = super().__new__(cls)
            cls._instance._article_links = []
        return cls._instance

    @classmethod
    async def get_instance(cls) -> 'BrowserManager':
        """Get or create the singleton instance."""
        if cls._instance is None:
            cls._instance = cls()
        return cls._instance

    @property
    def config(self) -> ResolverConfig:
        return self._config

    def set_config(self, config: ResolverConfig) -> None:
        self._config = config

    async def launch(
        self,
        headless: bool = False,
        viewport_width: int = 1280,
        viewport_height: int = 900,
        mobile_user_agent: bool = False,
    ) -> dict:
        """Launch the browser if not already running."""
        if self._browser is not None and self._page is not None:
            return {
                "status": "already_running",
                "message": "Browser is already launched and ready.",
                "url": self._page.url if self._page else "about:blank"
            }

        self._playwright = await async_playwright().start()

        launch_options = {
            "headless": headless,
            "args": [
                '--disable-blink-features=AutomationControlled',
                '--disable-infobars',
            ]
        }
        executable = _find_chromium_executable()
        if executable:
            launch_options["executable_path"] = executable

        self._browser = await self._playwright.chromium.launch(**launch_options)

        self._context = await self._browser.new_context(
            viewport={'width': viewport_width, 'height': viewport_height},
            user_agent=MOBILE_USER_AGENT if mobile_user_agent else DESKTOP_USER_AGENT,
            locale='en-US',
            timezone_id='America/New_York',
            java_script_enabled=True,
        )
        await self._context.add_init_script(_STEALTH_JS)

        self._page = await self._context.new_page()
        self._article_links.clear()

        return {
            "status": "launched",
            "message": f"Browser launched successfully ({'headless' if headless else 'headed'} mode).",
            "viewport": f"{viewport_width}x{viewport_height}",
            "user_agent": "mobile" if mobile_user_agent else "desktop",
        }

    async def ensure_page(self) -> Page:
        """Get the main browsing page or raise an error if browser not launched."""
        if self._page is None:
            raise RuntimeError(
                "Browser not launched. Please call browser_launch first."
            )
        return self._page

    async def new_page(self) -> Page:
        """Open an isolated page for one resolution attempt."""
        if self._context is None:
            raise RuntimeError(
                "Browser not launched. Please call browser_launch first."
            )
        return await self._context.new_page()

    async def ensure_interceptor(self) -> bool:
        """Install the article link interceptor on the main page once.

        Returns True when it was installed by this call.
        """
        page = await self.ensure_page()
        if self._interceptor is not None:
            return False
        self._interceptor = LinkInterceptor(self._config, self._article_links.append)
        await self._interceptor.install(page)
        surface = PlaywrightSurface(page, navigation_timeout_ms=self._config.navigation_timeout_ms)
        self._reader_view = ReaderViewWatcher(surface, self._config, allow=self._interceptor.allow_once)
        return True

    def allow_main_navigation(self, url: str) -> None:
        """Let the main page open ``url`` even if it is an article link."""
        if self._interceptor is not None and is_article_url(url, self._config):
            self._interceptor.allow_once(url)

    def take_article_links(self, clear: bool = True) -> list:
        links = list(self._article_links)
        if clear:
            self._article_links.clear()
        return links

    def is_running(self) -> bool:
        """Check if browser is currently running."""
        return self._browser is not None and self._page is not None

    async def close(self) -> dict:
        """Close the browser and cleanup resources."""
        if self._browser is None:
            return {
                "status": "not_running",
                "message": "Browser is not running."
            }

        await self._browser.close()

        if self._playwright:
            await self._playwright.stop()

        self._browser = None
        self._context = None
        self._page = None
        self._interceptor = None
        self._reader_view = None
        self._playwright = None

        return {
            "status": "closed",
            "message": "Browser closed successfully."
        }
