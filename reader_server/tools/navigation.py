"""Browser tools: launch, open the front page, collect intercepted links, close."""

from __future__ import annotations

import json
import logging
from reader_server.browser_manager import BrowserManager
from reader_server.schemas import (
    BrowserLaunchInput,
    OpenFrontPageInput,
    PendingArticleLinksInput,
)
from reader_server.utils.errors import format_error
from article_resolver.classifier import initial_target

logger = logging.getLogger(__name__)


async def browser_launch(arguments: dict) -> str:
    """Launch Chromium browser via Playwright."""
    try:
        input_data = BrowserLaunchInput(**arguments)
        manager = await BrowserManager.get_instance()

        result = await manager.launch(
            headless=input_data.headless,
            viewport_width=input_data.viewport_width,
            viewport_height=input_data.viewport_height,
            mobile_user_agent=input_data.mobile_user_agent,
        )

        return json.dumps(result, indent=2)

    except Exception as e:
        return format_error("browser_launch", e)


async def open_front_page(arguments: dict) -> str:
    """Open a page in the main tab with article links intercepted."""
    try:
        input_data = OpenFrontPageInput(**arguments)
        manager = await BrowserManager.get_instance()
        page = await manager.ensure_page()

        installed = await manager.ensure_interceptor()
        if installed:
            logger.info("Article link interceptor installed on main page")

        target = initial_target(input_data.url, manager.config)
        manager.allow_main_navigation(target)
        response = await page.goto(target, wait_until="domcontentloaded", timeout=60000)

        result = {
            "status": "success",
            "title": await page.title(),
            "url": page.url,
            "http_status": response.status if response else "unknown",
            "message": "Article links on this page are now routed to resolve_article.",
        }
        return json.dumps(result, indent=2)

    except Exception as e:
        return format_error("open_front_page", e, "Check if the URL is valid and accessible.")


async def pending_article_links(arguments: dict) -> str:
    """Return article links the user clicked on the main page."""
    try:
        input_data = PendingArticleLinksInput(**arguments)
        manager = await BrowserManager.get_instance()
        links = manager.take_article_links(clear=input_data.clear)

        return json.dumps({"count": len(links), "links": links}, indent=2)

    except Exception as e:
        return format_error("pending_article_links", e)


async def browser_close(arguments: dict) -> str:
    """Close the browser and cleanup resources."""
    try:
        manager = await BrowserManager.get_instance()
        result = await manager.close()

        return json.dumps(result, indent=2)

    except Exception as e:
        return format_error("browser_close", e)
