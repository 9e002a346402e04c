"""Shared fixtures: a scripted stand-in for the resolver's browser page."""

import asyncio

import pytest

from article_resolver.config import ResolverConfig

ORIGINAL = "https://www.nytimes.com/2024/01/01/technology/example.html"


class FakeSurface:
    """Records loads; tests decide which URL each navigation lands on."""

    def __init__(self):
        self.loads = []
        self.url = "about:blank"
        self.page_text = ""
        self.archive_link = None
        self.fail_eval = False
        self.evaluations = 0
        self._callbacks = []

    def load(self, url):
        self.loads.append(url)

    def current_url(self):
        return self.url

    async def evaluate(self, script, arg=None):
        self.evaluations += 1
        if self.fail_eval:
            raise RuntimeError("Execution context was destroyed")
        if arg is None:
            return self.page_text
        return self.archive_link

    def on_navigation_finished(self, callback):
        self._callbacks.append(callback)

    def finish(self, url, text=None):
        self.url = url
        if text is not None:
            self.page_text = text
        for callback in list(self._callbacks):
            callback()


async def settle(rounds: int = 25):
    """Let the resolver's consumer and probe tasks run to quiescence."""
    for _ in range(rounds):
        await asyncio.sleep(0)


@pytest.fixture
def surface():
    return FakeSurface()


@pytest.fixture
def config():
    return ResolverConfig(timeout_seconds=5.0)


MAIN_FRAME = object()


class FakeRoute:
    def __init__(self):
        self.outcome = None

    async def abort(self):
        self.outcome = "abort"

    async def continue_(self):
        self.outcome = "continue"


class FakeRequest:
    def __init__(self, url, navigation=True, frame=MAIN_FRAME):
        self.url = url
        self._navigation = navigation
        self.frame = frame

    def is_navigation_request(self):
        return self._navigation
