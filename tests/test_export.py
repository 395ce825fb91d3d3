"""Tests for the CSV/JSON cluster export service."""

import csv
import io
import json
from datetime import datetime, timezone

import pytest

from keyword_clusters.clustering.types import Cluster, ClusterMember
from keyword_clusters.exceptions import InvalidInputError
from keyword_clusters.export.service import (
    CSV_HEADER,
    NO_PILLAR,
    clusters_to_csv,
    clusters_to_json,
    export_clusters,
    generate_export_filename,
)


def _cluster(name, pillar, supports, cluster_id=None):
    members = [ClusterMember(keyword_text=pillar, is_representative=True)] if pillar else []
    members += [ClusterMember(keyword_text=s) for s in supports]
    return Cluster(name=name, members=tuple(members), id=cluster_id)


class TestCsv:
    def test_one_row_per_support(self):
        """Pillar "shoes" with supports a, b -> header plus two rows."""
        content = clusters_to_csv([_cluster("C", "shoes", ["a", "b"])])

        assert content == (
            "Pillar Keyword,Support Keyword,Cluster Name,Cluster ID\r\n"
            "shoes,a,C,\r\n"
            "shoes,b,C,\r\n"
        )

    def test_committed_cluster_rows_carry_name_and_id(self):
        """Pillar plus two supports in cluster "Shoes" with id "abc" -> two rows."""
        content = clusters_to_csv(
            [_cluster("Shoes", "running shoes", ["trail shoes", "road shoes"], cluster_id="abc")]
        )

        data_rows = content.split("\r\n")[1:-1]
        assert data_rows == [
            "running shoes,trail shoes,Shoes,abc",
            "running shoes,road shoes,Shoes,abc",
        ]
        assert all(row.endswith("Shoes,abc") for row in data_rows)

    def test_pillar_only_cluster_emits_one_row(self):
        content = clusters_to_csv([_cluster("Solo", "lonely", [], cluster_id="id-1")])
        rows = list(csv.reader(io.StringIO(content)))
        assert rows == [CSV_HEADER, ["lonely", "", "Solo", "id-1"]]

    def test_cluster_without_pillar(self):
        content = clusters_to_csv([_cluster("Headless", None, ["x"])])
        rows = list(csv.reader(io.StringIO(content)))
        assert rows[1] == [NO_PILLAR, "x", "Headless", ""]

    def test_special_characters_quoted(self):
        content = clusters_to_csv([_cluster('Say "hi", now', "a,b", ["line\nbreak"])])

        assert '"a,b"' in content
        assert '"Say ""hi"", now"' in content
        assert '"line\nbreak"' in content
        rows = list(csv.reader(io.StringIO(content, newline="")))
        assert rows[1] == ["a,b", "line\nbreak", 'Say "hi", now', ""]

    def test_empty_cluster_list_is_header_only(self):
        assert clusters_to_csv([]) == ",".join(CSV_HEADER) + "\r\n"

    def test_order_follows_input(self):
        content = clusters_to_csv(
            [_cluster("Second", "z", ["y"]), _cluster("First", "a", ["b"])]
        )
        rows = list(csv.reader(io.StringIO(content)))
        assert [r[2] for r in rows[1:]] == ["Second", "First"]


class TestJson:
    def test_structure(self):
        content = clusters_to_json([_cluster("Shoes", "shoes", ["a", "b"], cluster_id="c1")])

        assert json.loads(content) == [
            {
                "id": "c1",
                "name": "Shoes",
                "pillar": "shoes",
                "supports": ["a", "b"],
                "member_count": 3,
            }
        ]

    def test_unicode_kept_verbatim(self):
        content = clusters_to_json([_cluster("Café", "crème brûlée", [])])
        assert "crème brûlée" in content

    def test_pretty_printed(self):
        content = clusters_to_json([_cluster("A", "a", [])])
        assert content.startswith("[\n  {")


class TestDispatch:
    def test_export_csv_and_json(self):
        clusters = [_cluster("C", "p", ["s"])]
        assert export_clusters(clusters, "csv") == clusters_to_csv(clusters)
        assert export_clusters(clusters, "json") == clusters_to_json(clusters)

    def test_unsupported_format(self):
        with pytest.raises(InvalidInputError):
            export_clusters([], "xlsx")


class TestFilename:
    def test_deterministic_with_fixed_clock(self):
        now = datetime(2024, 3, 5, 14, 30, 15, 123000, tzinfo=timezone.utc)
        assert (
            generate_export_filename("keyword-clusters", "csv", now=now)
            == "keyword-clusters-2024-03-05T14-30-15-123000+00-00.csv"
        )

    def test_safe_characters_only(self):
        name = generate_export_filename("kc", "json")
        stem = name.rsplit(".", 1)[0]
        assert ":" not in name
        assert "." not in stem
        assert name.endswith(".json")

    def test_unsupported_format(self):
        with pytest.raises(InvalidInputError):
            generate_export_filename("kc", "pdf")
