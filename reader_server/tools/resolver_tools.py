"""Resolver tools: classify a link, resolve an article to a readable URL."""

from __future__ import annotations

import json
import logging
import time
from dataclasses import replace

from reader_server.browser_manager import BrowserManager
from reader_server.schemas import ClassifyUrlInput, ResolveArticleInput
from reader_server.utils.errors import format_error
from article_resolver.classifier import classify, is_article_url
from article_resolver.engine import resolve_article as run_resolution

logger = logging.getLogger(__name__)


async def classify_url(arguments: dict) -> str:
    """Report the host class of a URL and whether it would be intercepted."""
    try:
        input_data = ClassifyUrlInput(**arguments)
        manager = await BrowserManager.get_instance()
        config = manager.config

        result = {
            "url": input_data.url,
            "host_class": classify(input_data.url, config).value,
            "is_article": is_article_url(input_data.url, config),
        }
        return json.dumps(result, indent=2)

    except Exception as e:
        return format_error("classify_url", e)


async def resolve_article(arguments: dict) -> str:
    """Resolve an article through the mirror chain in a throwaway page."""
    try:
        input_data = ResolveArticleInput(**arguments)
        manager = await BrowserManager.get_instance()

        overrides = {}
        if input_data.prefer_reader_mode is not None:
            overrides["prefer_reader_mode"] = input_data.prefer_reader_mode
        if input_data.timeout_seconds is not None:
            overrides["timeout_seconds"] = input_data.timeout_seconds
        config = replace(manager.config, **overrides) if overrides else manager.config

        if not is_article_url(input_data.url, config):
            result = {
                "status": "skipped",
                "original_url": input_data.url,
                "resolved_url": input_data.url,
                "message": "Not an article URL; open it directly instead.",
            }
            return json.dumps(result, indent=2)

        page = await manager.new_page()
        t0 = time.monotonic()
        try:
            resolved = await run_resolution(page, input_data.url, config)
        finally:
            await page.close()

        result = {
            "status": "success",
            "original_url": input_data.url,
            "resolved_url": resolved,
            "host_class": classify(resolved, config).value,
            "elapsed_s": round(time.monotonic() - t0, 2),
        }

        if input_data.open_in_browser:
            main_page = await manager.ensure_page()
            manager.allow_main_navigation(resolved)
            await main_page.goto(resolved, wait_until="domcontentloaded", timeout=60000)
            result["title"] = await main_page.title()

        return json.dumps(result, indent=2)

    except Exception as e:
        return format_error(
            "resolve_article",
            e,
            "Make sure the browser is launched and the URL is a full http(s) article link."
        )
