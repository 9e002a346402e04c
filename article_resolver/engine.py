"""Async driver for one resolution attempt.

Navigation events, the deadline timer and probe/script completions are all
producers on a single ``asyncio.Queue``. One consumer task applies
``machine.transition`` and executes the resulting effects, so state is only
ever written from one place.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Callable
from typing import Optional

from playwright.async_api import Page

from .config import ResolverConfig
from .machine import (
    ArchiveLinkFound,
    ArmTimeout,
    CancelTimeout,
    Dismissed,
    FindArchiveLink,
    Load,
    NavigationFinished,
    ProbeCompleted,
    Resolve,
    ResolutionState,
    RunProbe,
    Started,
    TimedOut,
    transition,
)
from .probe import find_archive_link, probe_blocked
from .surface import BrowserSurface, PlaywrightSurface

logger = logging.getLogger(__name__)


class ArticleResolver:
    """Resolve one article URL against one browser surface.

    ``on_resolved`` is called exactly once with the chosen URL unless the
    attempt is dismissed first.
    """

    def __init__(self, surface: BrowserSurface, config: Optional[ResolverConfig] = None):
        self._surface = surface
        self._config = config or ResolverConfig()
        self._queue: asyncio.Queue = asyncio.Queue()
        self._state: Optional[ResolutionState] = None
        self._on_resolved: Optional[Callable[[str], None]] = None
        self._timer: Optional[asyncio.TimerHandle] = None
        self._consumer: Optional[asyncio.Task] = None
        self._result: Optional[asyncio.Future] = None
        self._tasks: set[asyncio.Task] = set()
        surface.on_navigation_finished(self.on_navigation_finished)

    @property
    def state(self) -> Optional[ResolutionState]:
        return self._state

    def start(self, original_url: str, on_resolved: Optional[Callable[[str], None]] = None) -> None:
        if self._state is not None:
            raise RuntimeError("resolution already started for this resolver")
        loop = asyncio.get_running_loop()
        self._state = ResolutionState(original_url=original_url)
        self._on_resolved = on_resolved
        self._result = loop.create_future()
        self._consumer = loop.create_task(self._consume())
        logger.info("Resolving %s", original_url)
        self._queue.put_nowait(Started())

    def on_navigation_finished(self) -> None:
        if self._state is None or self._state.closed:
            return
        self._queue.put_nowait(NavigationFinished(self._surface.current_url()))

    def dismiss(self) -> None:
        """Abandon the attempt without firing the callback."""
        if self._state is None or self._state.closed:
            return
        self._queue.put_nowait(Dismissed())

    async def wait(self) -> Optional[str]:
        """Resolved URL, or None if the attempt was dismissed."""
        if self._result is None:
            raise RuntimeError("resolution not started")
        return await asyncio.shield(self._result)

    async def _consume(self) -> None:
        try:
            while True:
                event = await self._queue.get()
                previous = self._state.stage
                self._state, effects = transition(self._state, event, self._config)
                if self._state.stage is not previous:
                    logger.info("Stage %s -> %s", previous.value, self._state.stage.value)
                for effect in effects:
                    self._apply(effect)
                if self._state.closed:
                    break
        finally:
            self._shutdown()

    def _apply(self, effect) -> None:
        if isinstance(effect, Load):
            logger.info("Loading %s", effect.url)
            self._surface.load(effect.url)
        elif isinstance(effect, RunProbe):
            self._spawn(self._run_probe(effect.url))
        elif isinstance(effect, FindArchiveLink):
            self._spawn(self._run_link_lookup(effect.url))
        elif isinstance(effect, ArmTimeout):
            loop = asyncio.get_running_loop()
            self._timer = loop.call_later(effect.seconds, self._queue.put_nowait, TimedOut())
        elif isinstance(effect, CancelTimeout):
            if self._timer is not None:
                self._timer.cancel()
                self._timer = None
        elif isinstance(effect, Resolve):
            self._deliver(effect.url)
        else:
            raise TypeError(f"unknown resolver effect: {effect!r}")

    def _spawn(self, coro) -> None:
        task = asyncio.get_running_loop().create_task(coro)
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)

    async def _run_probe(self, url: str) -> None:
        blocked = await probe_blocked(self._surface, self._config.block_patterns)
        logger.info("Probe on %s: %s", url, "blocked" if blocked else "ok")
        self._queue.put_nowait(ProbeCompleted(url, blocked))

    async def _run_link_lookup(self, url: str) -> None:
        href = await find_archive_link(self._surface, self._config.archive_fragments)
        if href is None:
            logger.info("No archive link on %s", url)
        self._queue.put_nowait(ArchiveLinkFound(url, href))

    def _deliver(self, url: str) -> None:
        logger.info("Resolved %s -> %s", self._state.original_url, url)
        if self._result is not None and not self._result.done():
            self._result.set_result(url)
        if self._on_resolved is not None:
            try:
                self._on_resolved(url)
            except Exception:
                logger.exception("on_resolved callback failed for %s", url)

    def _shutdown(self) -> None:
        if self._timer is not None:
            self._timer.cancel()
            self._timer = None
        for task in list(self._tasks):
            task.cancel()
        if self._result is not None and not self._result.done():
            self._result.set_result(None)


async def resolve_article(page: Page, original_url: str, config: Optional[ResolverConfig] = None) -> str:
    """Run one resolution on ``page`` and return the URL to display."""
    config = config or ResolverConfig()
    surface = PlaywrightSurface(page, navigation_timeout_ms=config.navigation_timeout_ms)
    resolver = ArticleResolver(surface, config)
    try:
        resolver.start(original_url)
        resolved = await resolver.wait()
    finally:
        resolver.dismiss()
        surface.detach()
    return resolved or original_url
