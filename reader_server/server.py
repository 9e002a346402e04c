"""FastMCP server with browser and article resolver tools."""

import os

from fastmcp import FastMCP
from reader_server.browser_manager import BrowserManager
from reader_server.tools import navigation, resolver_tools
from article_resolver.config import load_config

# Create MCP server
mcp = FastMCP("nyt-article-resolver")

# Optional YAML overrides for domains, timeout and reader mode
_config_path = os.environ.get("ARTICLE_RESOLVER_CONFIG")
if _config_path:
    BrowserManager().set_config(load_config(_config_path))


# Register browser tools
@mcp.tool()
async def browser_launch(
    headless: bool = False,
    viewport_width: int = 1280,
    viewport_height: int = 900,
    mobile_user_agent: bool = False,
) -> str:
    """Launch Chromium browser. Call this before any browser-based tools.

    Args:
        headless: Run browser in headless mode (no UI)
        viewport_width: Browser viewport width in pixels
        viewport_height: Browser viewport height in pixels
        mobile_user_agent: Present a mobile Safari user agent
    """
    return await navigation.browser_launch({
        "headless": headless,
        "viewport_width": viewport_width,
        "viewport_height": viewport_height,
        "mobile_user_agent": mobile_user_agent,
    })


@mcp.tool()
async def open_front_page(url: str = "https://www.nytimes.com") -> str:
    """Open a page in the main tab. Article links clicked there are not
    followed; they are collected for pending_article_links.

    Args:
        url: Page to open
    """
    return await navigation.open_front_page({"url": url})


@mcp.tool()
async def pending_article_links(clear: bool = True) -> str:
    """List article links clicked on the main page since the last call.

    Args:
        clear: Forget the links once returned
    """
    return await navigation.pending_article_links({"clear": clear})


@mcp.tool()
async def browser_close() -> str:
    """Close the browser and cleanup resources."""
    return await navigation.browser_close({})


# Register resolver tools
@mcp.tool()
async def classify_url(url: str) -> str:
    """Classify a URL's host and report whether it counts as an article link.

    Args:
        url: URL to classify
    """
    return await resolver_tools.classify_url({"url": url})


@mcp.tool()
async def resolve_article(
    url: str,
    prefer_reader_mode: bool = None,
    timeout_seconds: float = None,
    open_in_browser: bool = False,
) -> str:
    """Resolve a NYT article to a readable mirror URL.

    Tries the paywall aggregator (or the reader proxy in reader mode), then
    archive snapshots, and always returns a URL: the original one when
    nothing better was found.

    Args:
        url: Article URL
        prefer_reader_mode: Start via the reader proxy
        timeout_seconds: Deadline before falling back (default 8)
        open_in_browser: Load the result in the main tab afterwards
    """
    args = {"url": url, "open_in_browser": open_in_browser}
    if prefer_reader_mode is not None:
        args["prefer_reader_mode"] = prefer_reader_mode
    if timeout_seconds is not None:
        args["timeout_seconds"] = timeout_seconds
    return await resolver_tools.resolve_article(args)


# Run the server
if __name__ == "__main__":
    mcp.run()
