"""Reader-mode upkeep for the main browsing page.

With reader mode on, an archive snapshot the main page lands on is reopened
through the reader proxy, and a reader page that turns out to be a 403 or
CAPTCHA block is swapped for the URL it wraps. Each URL is acted on at most
once, so a blocked reader view of a snapshot does not bounce back and forth.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Callable
from typing import Optional

from .classifier import HostClass, classify, is_reader_wrapped, reader_url, unwrap_reader_url
from .config import ResolverConfig
from .probe import probe_blocked
from .surface import BrowserSurface

logger = logging.getLogger(__name__)


class ReaderViewWatcher:
    def __init__(
        self,
        surface: BrowserSurface,
        config: ResolverConfig,
        allow: Optional[Callable[[str], None]] = None,
    ):
        self._surface = surface
        self._config = config
        # Called before each load so the link interceptor lets it through.
        self._allow = allow
        self._attempted: set[str] = set()
        self._tasks: set[asyncio.Task] = set()
        surface.on_navigation_finished(self._on_navigation_finished)

    def _on_navigation_finished(self) -> None:
        if not self._config.prefer_reader_mode:
            return
        url = self._surface.current_url()
        if url in self._attempted:
            return

        host_class = classify(url, self._config)
        if host_class is HostClass.ARCHIVE and not is_reader_wrapped(url, self._config):
            self._attempted.add(url)
            self._navigate(reader_url(url, self._config))
        elif host_class is HostClass.READER_PROXY:
            self._attempted.add(url)
            task = asyncio.get_running_loop().create_task(self._check_reader(url))
            self._tasks.add(task)
            task.add_done_callback(self._tasks.discard)

    async def _check_reader(self, url: str) -> None:
        if not await probe_blocked(self._surface, self._config.block_patterns):
            return
        if self._surface.current_url() != url:
            return
        target = unwrap_reader_url(url, self._config)
        if target != url:
            logger.info("Reader view blocked, falling back to %s", target)
            self._attempted.add(target)
            self._navigate(target)

    def _navigate(self, url: str) -> None:
        if self._allow is not None:
            self._allow(url)
        self._surface.load(url)
