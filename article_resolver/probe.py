"""In-page checks run against whatever the resolver page currently shows."""

from __future__ import annotations

import logging
import re
from typing import Optional

logger = logging.getLogger(__name__)

# Rendered text of the page, or '' when the body has not been built yet.
_PAGE_TEXT_JS = """
() => {
    const body = document.body;
    return (body && body.innerText) || '';
}
"""

# Aggregator pages list several mirrors; take the first archive-family
# anchor, then an "Option 1" anchor if it happens to point at one.
_FIND_ARCHIVE_LINK_JS = """
(fragments) => {
    const links = Array.from(document.querySelectorAll('a[href]'));
    const isArchive = (href) => {
        try {
            const host = new URL(href).hostname.toLowerCase();
            return fragments.some(f => host === f || host.includes(f));
        } catch (e) {
            return false;
        }
    };
    const direct = links.find(a => a.href && isArchive(a.href));
    if (direct) return direct.href;
    const option = links.find(a => /option\\s*1/i.test((a.textContent || '').trim()));
    if (option && option.href && isArchive(option.href)) return option.href;
    return null;
}
"""


def matches_block_signal(text: str, patterns) -> bool:
    if not text:
        return False
    return any(re.search(p, text, re.IGNORECASE) for p in patterns)


async def probe_blocked(surface, patterns) -> bool:
    """Check the loaded page for a block or CAPTCHA page.

    An empty body counts as not blocked: some pages render late and an
    empty read is no evidence of a block. Script failures count as not
    blocked as well.
    """
    try:
        text = await surface.evaluate(_PAGE_TEXT_JS)
    except Exception as e:
        logger.debug("Block probe failed on %s: %s", surface.current_url(), e)
        return False
    if not isinstance(text, str):
        return False
    return matches_block_signal(text, patterns)


async def find_archive_link(surface, fragments) -> Optional[str]:
    try:
        href = await surface.evaluate(_FIND_ARCHIVE_LINK_JS, list(fragments))
    except Exception as e:
        logger.debug("Archive link lookup failed on %s: %s", surface.current_url(), e)
        return None
    if isinstance(href, str) and href.strip():
        return href.strip()
    return None
