"""Block/CAPTCHA probe and aggregator link lookup."""

import pytest

from article_resolver.config import DEFAULT_ARCHIVE_FRAGMENTS, DEFAULT_BLOCK_PATTERNS
from article_resolver.probe import find_archive_link, matches_block_signal, probe_blocked


@pytest.mark.parametrize("text, expected", [
    ("403 Forbidden", True),
    ("Warning: Target URL returned error 403: Forbidden", True),
    ("Please solve this CAPTCHA to continue", True),
    ("Verify you are human by completing the action below.", True),
    ("One more step: Security Check", True),
    ("The Senate passed the bill on Tuesday.", False),
    ("", False),
])
def test_matches_block_signal(text, expected):
    assert matches_block_signal(text, DEFAULT_BLOCK_PATTERNS) is expected


@pytest.mark.asyncio
async def test_probe_reports_block(surface):
    surface.page_text = "Title: \n\nWarning: Target URL returned error 403: Forbidden"
    assert await probe_blocked(surface, DEFAULT_BLOCK_PATTERNS) is True


@pytest.mark.asyncio
async def test_empty_body_is_not_blocked(surface):
    surface.page_text = ""
    assert await probe_blocked(surface, DEFAULT_BLOCK_PATTERNS) is False


@pytest.mark.asyncio
async def test_script_failure_is_not_blocked(surface):
    surface.fail_eval = True
    assert await probe_blocked(surface, DEFAULT_BLOCK_PATTERNS) is False


@pytest.mark.asyncio
async def test_non_text_result_is_not_blocked(surface):
    surface.page_text = None
    assert await probe_blocked(surface, DEFAULT_BLOCK_PATTERNS) is False


@pytest.mark.asyncio
async def test_find_archive_link(surface):
    surface.archive_link = "  https://archive.is/AbCdE  "
    assert await find_archive_link(surface, DEFAULT_ARCHIVE_FRAGMENTS) == "https://archive.is/AbCdE"


@pytest.mark.asyncio
async def test_find_archive_link_none(surface):
    assert await find_archive_link(surface, DEFAULT_ARCHIVE_FRAGMENTS) is None
    surface.fail_eval = True
    assert await find_archive_link(surface, DEFAULT_ARCHIVE_FRAGMENTS) is None
