from __future__ import annotations

import pathlib
from dataclasses import dataclass, fields

import yaml


DEFAULT_BLOCK_PATTERNS: tuple[str, ...] = (
    r"403\s*forbidden",
    r"Warning:\s*Target URL returned error\s*403",
    r"captcha",
    r"verify you are human",
    r"security check",
)

DEFAULT_ARCHIVE_FRAGMENTS: tuple[str, ...] = (
    "archive.is",
    "archive.today",
    "archive.ph",
    "archive.li",
    "archive.vn",
    "archive.md",
    "archive.fo",
)

DEFAULT_EXCLUDED_PREFIXES: tuple[str, ...] = (
    "/section/",
    "/topic/",
    "/crosswords/",
    "/games/",
    "/account/",
    "/subscriptions/",
    "/auth/",
    "/wirecutter/",
    "/cooking/",
    "/athletic/",
)


@dataclass(frozen=True)
class ResolverConfig:
    content_domain: str = "nytimes.com"
    shortlink_domain: str = "nyti.ms"
    reader_proxy_prefix: str = "https://r.jina.ai/"
    aggregator_prefix: str = "https://removepaywalls.com/"
    archive_base: str = "https://archive.today"
    archive_latest_base: str = "https://archive.is"
    archive_oldest_base: str = "https://archive.ph"
    archive_fragments: tuple[str, ...] = DEFAULT_ARCHIVE_FRAGMENTS
    excluded_prefixes: tuple[str, ...] = DEFAULT_EXCLUDED_PREFIXES
    article_suffix: str = ".html"
    block_patterns: tuple[str, ...] = DEFAULT_BLOCK_PATTERNS
    timeout_seconds: float = 8.0
    prefer_reader_mode: bool = False
    reader_fallback: bool = True
    chain_archive_candidates: bool = False
    navigation_timeout_ms: int = 30_000
    headless: bool = True
    start_url: str = "https://www.nytimes.com"
    output_json: str = ""

    @property
    def reader_proxy_host(self) -> str:
        return _host_of(self.reader_proxy_prefix)

    @property
    def aggregator_host(self) -> str:
        return _host_of(self.aggregator_prefix)


def _host_of(prefix: str) -> str:
    rest = prefix.split("://", 1)[-1]
    return rest.split("/", 1)[0].lower()


_TUPLE_KEYS = {"archive_fragments", "excluded_prefixes", "block_patterns"}
_PREFIX_KEYS = {
    "reader_proxy_prefix", "aggregator_prefix", "archive_base",
    "archive_latest_base", "archive_oldest_base", "start_url",
}
_BOOL_KEYS = {"prefer_reader_mode", "reader_fallback", "chain_archive_candidates", "headless"}


def config_from_mapping(data: dict) -> ResolverConfig:
    """Build a config from a plain mapping, keeping defaults for omitted keys."""
    known = {f.name for f in fields(ResolverConfig)}
    unknown = set(data) - known
    if unknown:
        raise ValueError(f"unknown config keys: {', '.join(sorted(unknown))}")

    values: dict = {}
    for key, raw in data.items():
        if key in _TUPLE_KEYS:
            if isinstance(raw, list):
                values[key] = tuple(str(x) for x in raw)
            else:
                values[key] = (str(raw),) if raw else ()
        elif key in _BOOL_KEYS:
            values[key] = bool(raw)
        elif key == "timeout_seconds":
            values[key] = float(raw)
        elif key == "navigation_timeout_ms":
            values[key] = int(raw)
        else:
            values[key] = str(raw)

    for key in _PREFIX_KEYS & values.keys():
        if not values[key].startswith("http"):
            raise ValueError(f"{key} must begin with http, got: {values[key]}")
    if values.get("timeout_seconds", 1.0) <= 0:
        raise ValueError(f"timeout_seconds must be > 0, got {values['timeout_seconds']}")
    if values.get("navigation_timeout_ms", 1) <= 0:
        raise ValueError(
            f"navigation_timeout_ms must be > 0, got {values['navigation_timeout_ms']}"
        )
    if "archive_fragments" in values and not values["archive_fragments"]:
        raise ValueError("archive_fragments must list at least one archive domain")

    return ResolverConfig(**values)


def load_config(path: str) -> ResolverConfig:
    raw = pathlib.Path(path).read_text(encoding="utf-8")
    data = yaml.safe_load(raw)
    if data is None:
        return ResolverConfig()
    if not isinstance(data, dict):
        raise ValueError(f"config file must be a YAML mapping, got {type(data).__name__}")

    config = config_from_mapping(data)

    if config.output_json:
        out_dir = pathlib.Path(config.output_json).parent
        out_dir.mkdir(parents=True, exist_ok=True)

    return config
