"""PlaywrightSurface adapter over a stand-in page object."""

import pytest

from article_resolver.surface import PlaywrightSurface

from conftest import settle


class FakePage:
    def __init__(self, fail_goto=False):
        self.url = "about:blank"
        self.listeners = {}
        self.gotos = []
        self.fail_goto = fail_goto

    def on(self, event, handler):
        self.listeners.setdefault(event, []).append(handler)

    def remove_listener(self, event, handler):
        self.listeners[event].remove(handler)

    async def goto(self, url, wait_until=None, timeout=None):
        self.gotos.append((url, wait_until, timeout))
        if self.fail_goto:
            raise RuntimeError("net::ERR_ABORTED; maybe frame was detached?")
        self.url = url
        for handler in list(self.listeners.get("load", [])):
            handler(self)

    async def evaluate(self, script, arg=None):
        return {"script": script, "arg": arg}


@pytest.mark.asyncio
async def test_load_is_fire_and_forget_and_reports_finish():
    page = FakePage()
    surface = PlaywrightSurface(page, navigation_timeout_ms=1234)
    finished = []
    surface.on_navigation_finished(lambda: finished.append(surface.current_url()))

    surface.load("https://archive.ph/AbCdE")
    assert finished == []
    await settle()

    assert page.gotos == [("https://archive.ph/AbCdE", "load", 1234)]
    assert finished == ["https://archive.ph/AbCdE"]


@pytest.mark.asyncio
async def test_failed_navigation_is_swallowed():
    page = FakePage(fail_goto=True)
    surface = PlaywrightSurface(page)
    surface.load("https://archive.is/latest/x")
    await settle()
    assert page.gotos and page.url == "about:blank"


@pytest.mark.asyncio
async def test_evaluate_passes_argument_only_when_given():
    surface = PlaywrightSurface(FakePage())
    assert (await surface.evaluate("() => 1"))["arg"] is None
    assert (await surface.evaluate("(x) => x", ["archive.is"]))["arg"] == ["archive.is"]


@pytest.mark.asyncio
async def test_detach_stops_callbacks():
    page = FakePage()
    surface = PlaywrightSurface(page)
    finished = []
    surface.on_navigation_finished(lambda: finished.append(True))
    surface.detach()
    assert page.listeners["load"] == []
    surface.load("https://archive.ph/AbCdE")
    await settle()
    assert finished == []
