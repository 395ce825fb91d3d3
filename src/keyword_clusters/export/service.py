"""Cluster export: pillar -> support keyword maps as CSV or JSON."""

from __future__ import annotations

import csv
import io
import json
from collections.abc import Sequence
from datetime import datetime, timezone

from keyword_clusters.clustering.types import Cluster
from keyword_clusters.exceptions import InvalidInputError

CSV_HEADER = ["Pillar Keyword", "Support Keyword", "Cluster Name", "Cluster ID"]
NO_PILLAR = "(no pillar)"
EXPORT_FORMATS = ("csv", "json")


def clusters_to_csv(clusters: Sequence[Cluster]) -> str:
    """Render clusters as RFC 4180 CSV.

    One row per (pillar, support) pair.  A cluster without supports still
    emits one row with an empty support field.  Fields containing commas,
    quotes or line breaks are quoted, embedded quotes doubled; records end
    with CRLF.
    """
    buffer = io.StringIO()
    writer = csv.writer(buffer, quoting=csv.QUOTE_MINIMAL, lineterminator="\r\n")
    writer.writerow(CSV_HEADER)

    for cluster in clusters:
        pillar = cluster.representative
        pillar_text = pillar.keyword_text if pillar is not None else NO_PILLAR
        cluster_id = cluster.id or ""

        supports = cluster.supports
        if not supports:
            writer.writerow([pillar_text, "", cluster.name, cluster_id])
        for support in supports:
            writer.writerow([pillar_text, support.keyword_text, cluster.name, cluster_id])

    return buffer.getvalue()


def cluster_to_dict(cluster: Cluster) -> dict:
    """JSON-ready summary of one cluster."""
    pillar = cluster.representative
    return {
        "id": cluster.id,
        "name": cluster.name,
        "pillar": pillar.keyword_text if pillar is not None else None,
        "supports": [m.keyword_text for m in cluster.supports],
        "member_count": len(cluster.members),
    }


def clusters_to_json(clusters: Sequence[Cluster]) -> str:
    """Render clusters as a pretty-printed JSON array, in the given order."""
    return json.dumps(
        [cluster_to_dict(c) for c in clusters],
        ensure_ascii=False,
        indent=2,
    )


def export_clusters(clusters: Sequence[Cluster], fmt: str) -> str:
    """Dispatch to the CSV or JSON renderer."""
    if fmt == "csv":
        return clusters_to_csv(clusters)
    if fmt == "json":
        return clusters_to_json(clusters)
    raise InvalidInputError(f"Unsupported export format: {fmt!r}")


def generate_export_filename(prefix: str, fmt: str, now: datetime | None = None) -> str:
    """Build ``{prefix}-{timestamp}.{fmt}``.

    The timestamp is ISO 8601 with ``:`` and ``.`` replaced by ``-`` so it
    is safe on every filesystem.  Pass ``now`` for a deterministic name.
    """
    if fmt not in EXPORT_FORMATS:
        raise InvalidInputError(f"Unsupported export format: {fmt!r}")
    if now is None:
        now = datetime.now(timezone.utc)
    timestamp = now.isoformat().replace(":", "-").replace(".", "-")
    return f"{prefix}-{timestamp}.{fmt}"
