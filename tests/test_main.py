"""Batch CLI output."""

import json

import pytest

from article_resolver import main as cli
from article_resolver.config import load_config
from article_resolver.models import ResolutionRecord

from conftest import ORIGINAL


@pytest.mark.asyncio
async def test_run_writes_json_array_into_new_directory(tmp_path, monkeypatch):
    out = tmp_path / "results" / "resolved.json"
    config_path = tmp_path / "config.yaml"
    config_path.write_text(f"output_json: {out}\n", encoding="utf-8")
    config = load_config(str(config_path))

    async def fake_resolve_urls(config, urls):
        yield ResolutionRecord(original_url=urls[0], resolved_at="2024-01-01T00:00:00Z",
                               resolved_url="https://archive.ph/abc", host_class="archive")
        yield ResolutionRecord(original_url=urls[1], resolved_at="2024-01-01T00:00:01Z",
                               status="skipped")

    monkeypatch.setattr(cli, "resolve_urls", fake_resolve_urls)
    resolved = await cli.run(config, [ORIGINAL, "https://www.nytimes.com/section/world"])

    assert resolved == 1
    records = json.loads(out.read_text(encoding="utf-8"))
    assert [r["status"] for r in records] == ["ok", "skipped"]
    assert records[0]["resolved_url"] == "https://archive.ph/abc"
