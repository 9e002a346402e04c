"""Browser surface the resolver drives: load a URL, read it back, run script."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Callable
from typing import Any, Optional, Protocol

from playwright.async_api import Page

logger = logging.getLogger(__name__)


class BrowserSurface(Protocol):
    def load(self, url: str) -> None:
        """Start loading ``url``; completion arrives via the navigation callback."""

    def current_url(self) -> str:
        """Effective URL of the loaded document, after any server redirects."""

    async def evaluate(self, script: str, arg: Any = None) -> Any:
        ...

    def on_navigation_finished(self, callback: Callable[[], None]) -> None:
        ...


class PlaywrightSurface:
    """BrowserSurface backed by a Playwright page.

    The page's main-frame ``load`` event is the navigation-finished signal.
    A load issued while an earlier one is still in flight replaces it; the
    interrupted ``goto`` is logged and dropped.
    """

    def __init__(self, page: Page, navigation_timeout_ms: int = 30_000):
        self._page = page
        self._navigation_timeout_ms = navigation_timeout_ms
        self._callbacks: list[Callable[[], None]] = []
        self._tasks: set[asyncio.Task] = set()
        self._page.on("load", self._handle_load)

    @property
    def page(self) -> Page:
        return self._page

    def load(self, url: str) -> None:
        task = asyncio.get_running_loop().create_task(self._goto(url))
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)

    async def _goto(self, url: str) -> None:
        try:
            await self._page.goto(
                url,
                wait_until="load",
                timeout=self._navigation_timeout_ms,
            )
        except Exception as e:
            # Superseded loads and slow mirrors land here; the resolver
            # timeout covers anything that never finishes.
            logger.debug("goto %s did not complete: %s", url, e)

    def current_url(self) -> str:
        return self._page.url

    async def evaluate(self, script: str, arg: Any = None) -> Any:
        if arg is None:
            return await self._page.evaluate(script)
        return await self._page.evaluate(script, arg)

    def on_navigation_finished(self, callback: Callable[[], None]) -> None:
        self._callbacks.append(callback)

    def _handle_load(self, _page: Optional[Page] = None) -> None:
        for callback in list(self._callbacks):
            callback()

    def detach(self) -> None:
        self._page.remove_listener("load", self._handle_load)
        self._callbacks.clear()
        for task in list(self._tasks):
            task.cancel()
