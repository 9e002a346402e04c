"""Host classification and URL templates for the resolution chain.

Everything here is pure string work: no network calls, no page access.
"""

from __future__ import annotations

import enum
import re
from urllib.parse import parse_qs, quote, urlparse

from .config import ResolverConfig

_DATE_PATH_RE = re.compile(r"^/\d{4}/\d{2}/\d{2}/")


class HostClass(str, enum.Enum):
    NYT_ARTICLE = "nyt_article"
    READER_PROXY = "reader_proxy"
    AGGREGATOR = "aggregator"
    ARCHIVE = "archive"
    OTHER = "other"


def _host(url: str) -> str:
    try:
        return (urlparse(url).hostname or "").lower()
    except ValueError:
        return ""


def is_nyt_host(host: str, config: ResolverConfig) -> bool:
    domain = config.content_domain.lower()
    return (
        host == domain
        or host.endswith("." + domain)
        or host == config.shortlink_domain.lower()
    )


def is_archive_host(host: str, config: ResolverConfig) -> bool:
    return any(host == frag or frag in host for frag in config.archive_fragments)


def classify(url: str, config: ResolverConfig) -> HostClass:
    host = _host(url)
    if not host:
        return HostClass.OTHER
    if is_nyt_host(host, config):
        return HostClass.NYT_ARTICLE
    if host == config.reader_proxy_host:
        return HostClass.READER_PROXY
    if host == config.aggregator_host:
        return HostClass.AGGREGATOR
    if is_archive_host(host, config):
        return HostClass.ARCHIVE
    return HostClass.OTHER


def is_article_url(url: str, config: ResolverConfig) -> bool:
    """Decide whether a NYT-family link should be intercepted for resolution.

    Section fronts, games, account and auth pages navigate normally; only
    story-shaped paths are handed to the resolver.
    """
    try:
        parsed = urlparse(url)
    except ValueError:
        return False
    if parsed.scheme.lower() not in ("http", "https"):
        return False

    host = (parsed.hostname or "").lower()
    path = parsed.path

    if path in ("", "/"):
        return False
    if host == config.shortlink_domain.lower():
        return True
    if not is_nyt_host(host, config):
        return False
    if any(path.startswith(prefix) for prefix in config.excluded_prefixes):
        return False

    if _DATE_PATH_RE.match(path):
        return True
    if "/interactive/" in path or "/live/" in path:
        return True
    return path.endswith(config.article_suffix)


def reader_url(url: str, config: ResolverConfig) -> str:
    return config.reader_proxy_prefix + url


def aggregator_url(url: str, config: ResolverConfig) -> str:
    return config.aggregator_prefix + url


def archive_run_url(url: str, config: ResolverConfig) -> str:
    return f"{config.archive_base.rstrip('/')}/?run=1&url={quote(url, safe='')}"


def archive_candidates(url: str, config: ResolverConfig) -> list[str]:
    """Direct archive URLs to try, most useful first: latest, oldest, fresh capture."""
    return [
        f"{config.archive_latest_base.rstrip('/')}/latest/{url}",
        f"{config.archive_oldest_base.rstrip('/')}/oldest/{url}",
        f"{config.archive_base.rstrip('/')}/submit/?url={quote(url, safe='')}",
    ]


def unwrap_reader_url(url: str, config: ResolverConfig) -> str:
    prefix = config.reader_proxy_prefix
    for candidate in (prefix, prefix.replace("https://", "http://", 1)):
        if url.startswith(candidate):
            return url[len(candidate):]
    return url


def is_reader_wrapped(url: str, config: ResolverConfig) -> bool:
    return unwrap_reader_url(url, config) != url


def is_archive_root(url: str) -> bool:
    """True for an archive landing page that holds no snapshot.

    That is the bare root with no query, or a submit page whose ``url``
    target is empty.
    """
    parsed = urlparse(url)
    path = parsed.path
    if path in ("", "/") and not parsed.query:
        return True
    if path.rstrip("/") == "/submit":
        target = parse_qs(parsed.query).get("url", [""])[0]
        return not target.strip()
    return False


def initial_target(url: str, config: ResolverConfig) -> str:
    """URL the main browsing page should actually open for ``url``.

    In reader mode plain NYT pages are wrapped with the reader proxy;
    intermediaries and already-wrapped URLs are left alone.
    """
    if not config.prefer_reader_mode:
        return url
    if classify(url, config) is not HostClass.NYT_ARTICLE:
        return url
    if is_reader_wrapped(url, config):
        return url
    return reader_url(url, config)
