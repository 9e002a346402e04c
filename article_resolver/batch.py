from __future__ import annotations

import logging
import time
from collections.abc import AsyncGenerator, Iterable
from datetime import datetime, timezone

from playwright.async_api import async_playwright

from .classifier import classify, is_article_url
from .config import ResolverConfig
from .engine import resolve_article
from .models import ResolutionRecord

logger = logging.getLogger(__name__)


def _now() -> str:
    return datetime.now(timezone.utc).isoformat()


async def resolve_urls(
    config: ResolverConfig,
    urls: Iterable[str],
) -> AsyncGenerator[ResolutionRecord, None]:
    async with async_playwright() as pw:
        browser = await pw.chromium.launch(headless=config.headless)
        context = await browser.new_context()
        try:
            for url in urls:
                if not is_article_url(url, config):
                    logger.info("skipping non-article url %s", url)
                    yield ResolutionRecord(
                        original_url=url,
                        resolved_at=_now(),
                        status="skipped",
                        error_msg="not an article URL",
                    )
                    continue

                # Each attempt gets its own page so no state leaks between them.
                page = await context.new_page()
                t0 = time.monotonic()
                try:
                    resolved = await resolve_article(page, url, config)
                    record = ResolutionRecord(
                        original_url=url,
                        resolved_at=_now(),
                        resolved_url=resolved,
                        host_class=classify(resolved, config).value,
                        elapsed_s=round(time.monotonic() - t0, 2),
                    )
                except Exception as exc:
                    logger.error("failed to resolve %s: %s", url, exc)
                    record = ResolutionRecord(
                        original_url=url,
                        resolved_at=_now(),
                        resolved_url=url,
                        elapsed_s=round(time.monotonic() - t0, 2),
                        status="error",
                        error_msg=str(exc),
                    )
                finally:
                    await page.close()
                yield record
        finally:
            await browser.close()
