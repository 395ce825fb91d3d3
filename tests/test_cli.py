"""Tests for the keyword clustering CLI."""

import csv
import json
import sys
from pathlib import Path
from unittest.mock import patch

import pytest

from keyword_clusters.cli.__main__ import main, run_commit, run_preview
from keyword_clusters.clustering.types import ClusteringParams
from keyword_clusters.persistence import load_clusters


def _urls(prefix, count):
    return [f"https://{prefix}.com/{i}" for i in range(count)]


@pytest.fixture
def keyword_file(tmp_path: Path) -> Path:
    shared = _urls("shoes", 5)
    data = {
        "keywords": [
            {"text": "running shoes", "serp_urls": shared + _urls("a", 5), "search_volume": 100},
            {"text": "best running shoes", "serp_urls": shared + _urls("b", 5), "search_volume": 900},
            {"text": "banana bread", "serp_urls": _urls("bake", 10)},
        ]
    }
    path = tmp_path / "keywords.json"
    path.write_text(json.dumps(data), encoding="utf-8")
    return path


@pytest.mark.asyncio
async def test_run_preview_writes_csv_and_json(keyword_file, tmp_path):
    output_dir = tmp_path / "out"
    result = await run_preview(keyword_file, ClusteringParams(), output_dir, "kc")

    assert len(result.clusters) == 1
    csv_files = list(output_dir.glob("kc-*.csv"))
    json_files = list(output_dir.glob("kc-*.json"))
    assert len(csv_files) == 1
    assert len(json_files) == 1

    with open(csv_files[0], newline="", encoding="utf-8") as f:
        rows = list(csv.reader(f))
    assert rows[1][:3] == ["best running shoes", "running shoes", "Cluster: best running shoes"]

    exported = json.loads(json_files[0].read_text(encoding="utf-8"))
    assert exported[0]["pillar"] == "best running shoes"


@pytest.mark.asyncio
async def test_run_commit_persists_clusters(keyword_file, test_session_factory, tmp_path):
    with patch("keyword_clusters.cli.__main__.get_session_factory", return_value=test_session_factory):
        ids = await run_commit(
            keyword_file, ClusteringParams(), "proj-cli", "cli", tmp_path / "out", "kc"
        )

    assert len(ids) == 1
    async with test_session_factory() as session:
        stored = await load_clusters(session, "proj-cli")
    assert [c.id for c in stored] == ids
    assert stored[0].representative.keyword_text == "best running shoes"


def test_main_without_command_exits_1(monkeypatch):
    monkeypatch.setattr(sys, "argv", ["keyword-clusters"])
    with pytest.raises(SystemExit) as exc_info:
        main()
    assert exc_info.value.code == 1


def test_main_invalid_input_exits_2(monkeypatch, tmp_path):
    bad = tmp_path / "bad.json"
    bad.write_text("[]", encoding="utf-8")
    monkeypatch.setattr(
        sys, "argv", ["keyword-clusters", "preview", str(bad), "--output-dir", str(tmp_path / "out")]
    )
    with pytest.raises(SystemExit) as exc_info:
        main()
    assert exc_info.value.code == 2


def test_main_preview_uses_flags(monkeypatch, keyword_file, tmp_path):
    output_dir = tmp_path / "flags"
    monkeypatch.setattr(
        sys,
        "argv",
        [
            "keyword-clusters",
            "preview",
            str(keyword_file),
            "--overlap-threshold",
            "6",
            "--output-dir",
            str(output_dir),
        ],
    )
    main()

    json_files = list(output_dir.glob("*.json"))
    assert len(json_files) == 1
    assert json.loads(json_files[0].read_text(encoding="utf-8")) == []


@pytest.mark.asyncio
async def test_run_commit_exports_carry_cluster_ids(keyword_file, test_session_factory, tmp_path):
    output_dir = tmp_path / "committed"
    with patch("keyword_clusters.cli.__main__.get_session_factory", return_value=test_session_factory):
        ids = await run_commit(keyword_file, ClusteringParams(), "proj-cli", "cli", output_dir, "kc")

    (csv_file,) = output_dir.glob("kc-*.csv")
    (json_file,) = output_dir.glob("kc-*.json")
    with open(csv_file, newline="", encoding="utf-8") as f:
        rows = list(csv.reader(f))
    assert rows[1] == ["best running shoes", "running shoes", "Cluster: best running shoes", ids[0]]
    assert json.loads(json_file.read_text(encoding="utf-8"))[0]["id"] == ids[0]
