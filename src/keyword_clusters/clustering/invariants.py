"""Structural checks on clusters.

The mutation API never produces a cluster that fails these checks; they
guard hand-built payloads (API clients, the CLI) before a commit.
"""

from __future__ import annotations

from collections.abc import Iterable

from keyword_clusters.clustering.types import Cluster
from keyword_clusters.exceptions import InvariantViolationError


def check_cluster(cluster: Cluster) -> None:
    """Raise ``InvariantViolationError`` unless the cluster is well formed.

    A well-formed cluster has at least one member, exactly one
    representative and no keyword listed twice.
    """
    if not cluster.members:
        raise InvariantViolationError(
            f"Cluster {cluster.name!r} has no members", cluster_name=cluster.name
        )

    representatives = sum(1 for m in cluster.members if m.is_representative)
    if representatives != 1:
        raise InvariantViolationError(
            f"Cluster {cluster.name!r} has {representatives} representatives, expected 1",
            cluster_name=cluster.name,
        )

    if len(cluster.keyword_texts) != len(cluster.members):
        raise InvariantViolationError(
            f"Cluster {cluster.name!r} lists the same keyword more than once",
            cluster_name=cluster.name,
        )


def check_clusters(clusters: Iterable[Cluster]) -> None:
    """Check each cluster and reject keywords shared between clusters."""
    seen: dict[str, str] = {}
    for cluster in clusters:
        check_cluster(cluster)
        for text in cluster.keyword_texts:
            if text in seen:
                raise InvariantViolationError(
                    f"Keyword {text!r} appears in clusters {seen[text]!r} and {cluster.name!r}",
                    cluster_name=cluster.name,
                )
            seen[text] = cluster.name
