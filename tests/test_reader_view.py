"""Reader-mode upkeep on the main browsing page."""

from dataclasses import replace

import pytest

from article_resolver.classifier import reader_url
from article_resolver.reader_view import ReaderViewWatcher

from conftest import ORIGINAL, settle

SNAPSHOT = "https://archive.ph/2024.01.01/" + ORIGINAL
BLOCKED = "Warning: Target URL returned error 403: Forbidden"


@pytest.fixture
def reader_config(config):
    return replace(config, prefer_reader_mode=True)


def make_watcher(surface, config):
    allowed = []
    ReaderViewWatcher(surface, config, allow=allowed.append)
    return allowed


@pytest.mark.asyncio
async def test_archive_snapshot_is_opened_through_reader(surface, reader_config):
    allowed = make_watcher(surface, reader_config)
    surface.finish(SNAPSHOT)
    surface.finish(SNAPSHOT)
    assert surface.loads == [reader_url(SNAPSHOT, reader_config)]
    assert allowed == surface.loads


@pytest.mark.asyncio
async def test_blocked_reader_page_falls_back_to_wrapped_url(surface, reader_config):
    allowed = make_watcher(surface, reader_config)
    surface.finish(reader_url(ORIGINAL, reader_config), text=BLOCKED)
    await settle()
    assert surface.loads == [ORIGINAL]
    assert allowed == [ORIGINAL]


@pytest.mark.asyncio
async def test_readable_reader_page_is_left_alone(surface, reader_config):
    make_watcher(surface, reader_config)
    surface.finish(reader_url(ORIGINAL, reader_config), text="Title: Example\n\nBody text")
    await settle()
    assert surface.loads == []


@pytest.mark.asyncio
async def test_block_check_skipped_after_page_moves_on(surface, reader_config):
    make_watcher(surface, reader_config)
    surface.finish(reader_url(ORIGINAL, reader_config), text=BLOCKED)
    surface.url = "https://www.nytimes.com/"
    await settle()
    assert surface.loads == []


@pytest.mark.asyncio
async def test_nothing_happens_without_reader_mode(surface, config):
    make_watcher(surface, config)
    surface.finish(SNAPSHOT)
    surface.finish(reader_url(ORIGINAL, config), text=BLOCKED)
    await settle()
    assert surface.loads == []


@pytest.mark.asyncio
async def test_blocked_reader_view_of_snapshot_does_not_bounce(surface, reader_config):
    make_watcher(surface, reader_config)
    wrapped = reader_url(SNAPSHOT, reader_config)

    surface.finish(SNAPSHOT)
    surface.finish(wrapped, text=BLOCKED)
    await settle()
    surface.finish(SNAPSHOT, text="archived article")
    await settle()

    assert surface.loads == [wrapped, SNAPSHOT]
