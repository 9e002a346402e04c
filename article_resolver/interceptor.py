"""Catch article links on the main browsing page and hand them to the resolver."""

from __future__ import annotations

import logging
import time
from collections.abc import Callable
from typing import Optional

from playwright.async_api import Page, Request, Route

from .classifier import is_article_url
from .config import ResolverConfig

logger = logging.getLogger(__name__)

# Capture-phase click listener so SPA-style links that never navigate still
# get reported.
_LINK_TAP_JS = """
(() => {
    function handler(e) {
        const a = e.target && e.target.closest && e.target.closest('a[href]');
        if (!a) return;
        try { window.linkTap(a.href); } catch (err) {}
    }
    document.addEventListener('click', handler, true);
})();
"""

# A click produces both a tap report and a navigation request.
_DUPLICATE_WINDOW_S = 2.0


class LinkInterceptor:
    """Route article links away from the main page.

    Non-article links (section fronts, games, account pages) keep navigating
    normally. Popups are folded back into the main page.
    """

    def __init__(self, config: ResolverConfig, on_article_link: Callable[[str], None]):
        self._config = config
        self._on_article_link = on_article_link
        self._page: Optional[Page] = None
        self._last_handoff: tuple[str, float] = ("", 0.0)
        self._allowed: set[str] = set()

    async def install(self, page: Page) -> None:
        self._page = page
        await page.expose_function("linkTap", self._on_link_tap)
        await page.add_init_script(_LINK_TAP_JS)
        await page.route("**/*", self._on_route)
        page.on("popup", self._on_popup)

    def allow_once(self, url: str) -> None:
        """Let the next main-frame navigation to ``url`` through.

        Used when the main tab itself is asked to show an article URL, such
        as a resolution that fell back to the original link.
        """
        self._allowed.add(url)

    def _hand_off(self, url: str) -> None:
        last_url, last_at = self._last_handoff
        now = time.monotonic()
        if url == last_url and now - last_at < _DUPLICATE_WINDOW_S:
            return
        self._last_handoff = (url, now)
        logger.info("Article link intercepted: %s", url)
        self._on_article_link(url)

    def _on_link_tap(self, href: str) -> None:
        if isinstance(href, str) and is_article_url(href, self._config):
            self._hand_off(href)

    async def _on_route(self, route: Route, request: Request) -> None:
        if request.is_navigation_request() and request.url in self._allowed:
            self._allowed.discard(request.url)
            await route.continue_()
            return
        if (
            request.is_navigation_request()
            and self._page is not None
            and request.frame == self._page.main_frame
            and is_article_url(request.url, self._config)
        ):
            await route.abort()
            self._hand_off(request.url)
            return
        await route.continue_()

    async def _on_popup(self, popup: Page) -> None:
        try:
            await popup.wait_for_load_state("domcontentloaded")
        except Exception as e:
            logger.debug("Popup never loaded: %s", e)
        url = popup.url
        await popup.close()
        if not url or url == "about:blank":
            return
        if is_article_url(url, self._config):
            self._hand_off(url)
        elif self._page is not None:
            await self._page.goto(url, wait_until="domcontentloaded")
