from __future__ import annotations

import argparse
import asyncio
import logging
import os
import time
from dataclasses import replace

from .batch import resolve_urls
from .config import ResolverConfig, load_config
from .writer import write_one_record

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s  %(levelname)-8s  %(name)s  %(message)s",
)
logger = logging.getLogger(__name__)

DEFAULT_CONFIG = os.path.join(os.path.dirname(__file__), "config.yaml")


async def run(config: ResolverConfig, urls: list[str]) -> int:
    logger.info("urls        = %d", len(urls))
    logger.info("timeout     = %.1f s", config.timeout_seconds)
    logger.info("reader mode = %s", config.prefer_reader_mode)
    logger.info("output      = %s", config.output_json or "-")

    t0 = time.monotonic()
    count = 0
    resolved = 0
    fh = None

    if config.output_json and config.output_json.strip():
        fh = open(config.output_json, "w", encoding="utf-8")
        fh.write("[\n")

    try:
        async for record in resolve_urls(config, urls):
            if fh is not None:
                write_one_record(fh, record, need_comma=count > 0)
            else:
                print(f"{record.original_url} -> {record.resolved_url or record.status}")
            if record.status == "ok":
                resolved += 1
            count += 1
    finally:
        if fh is not None:
            fh.write("\n]\n")
            fh.close()

    elapsed = time.monotonic() - t0

    logger.info("--- resolution complete ---")
    logger.info("urls seen     : %d", count)
    logger.info("resolved      : %d", resolved)
    if config.output_json:
        logger.info("output file   : %s", os.path.abspath(config.output_json))
    logger.info("elapsed       : %.1f s", elapsed)
    return resolved


def main() -> None:
    parser = argparse.ArgumentParser(description="Resolve NYT article links to readable mirrors")
    parser.add_argument("urls", nargs="+", help="article URLs to resolve")
    parser.add_argument(
        "--config",
        default=DEFAULT_CONFIG,
        help="path to config.yaml (default: article_resolver/config.yaml)",
    )
    parser.add_argument("--reader", action="store_true", help="start via the reader proxy")
    parser.add_argument("--headed", action="store_true", help="show the browser window")
    args = parser.parse_args()

    config = load_config(args.config) if os.path.exists(args.config) else ResolverConfig()
    overrides = {}
    if args.reader:
        overrides["prefer_reader_mode"] = True
    if args.headed:
        overrides["headless"] = False
    if overrides:
        config = replace(config, **overrides)

    try:
        asyncio.run(run(config, args.urls))
    except Exception:
        logger.exception("Resolver failed")
        raise


if __name__ == "__main__":
    main()
