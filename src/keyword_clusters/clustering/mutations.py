"""Operator edits on a cluster working set: merge, split, rename, delete.

Every function returns new values and never touches its inputs.  Each
produced cluster is non-empty and has exactly one representative; split
conserves membership (``remaining | created == original``, disjoint).
"""

from __future__ import annotations

from collections.abc import Iterable, Sequence
from dataclasses import dataclass, replace

import structlog

from keyword_clusters.clustering.clusterer import choose_representative
from keyword_clusters.clustering.invariants import check_clusters
from keyword_clusters.clustering.types import (
    Cluster,
    ClusteringResult,
    ClusterMember,
    cluster_key,
    normalize_keyword_text,
)
from keyword_clusters.exceptions import InvalidInputError, InvalidSplitError

logger = structlog.get_logger()


def _clean_name(name: str) -> str:
    cleaned = (name or "").strip()
    if not cleaned:
        raise InvalidInputError("Cluster name must be non-empty")
    return cleaned


def _with_pillar(members: Sequence[ClusterMember], pillar: int) -> tuple[ClusterMember, ...]:
    return tuple(
        m if m.is_representative == (pos == pillar) else replace(m, is_representative=(pos == pillar))
        for pos, m in enumerate(members)
    )


def _ensure_single_representative(
    members: Sequence[ClusterMember],
) -> tuple[ClusterMember, ...]:
    """Keep a lone existing pillar, otherwise elect one by the tie-break rule."""
    flagged = [pos for pos, m in enumerate(members) if m.is_representative]
    if len(flagged) == 1:
        return tuple(members)
    return _with_pillar(members, choose_representative(members))


def merge_clusters(
    clusters: Sequence[Cluster], new_name: str, representative: str | None = None
) -> Cluster:
    """Union the members of two or more clusters into one new cluster.

    The pillar of the first input cluster stays the pillar unless
    ``representative`` names another member.  A keyword listed in more than
    one input is kept once (first occurrence).

    Raises:
        InvalidInputError: Fewer than two clusters, a blank name, or a
            ``representative`` that is not in the merged set.
    """
    if len(clusters) < 2:
        raise InvalidInputError(f"Merging requires at least 2 clusters, got {len(clusters)}")
    name = _clean_name(new_name)

    members: list[ClusterMember] = []
    seen: set[str] = set()
    for cluster in clusters:
        for member in cluster.members:
            if member.normalized_text not in seen:
                seen.add(member.normalized_text)
                members.append(member)

    if not members:
        raise InvalidInputError("Cannot merge clusters that have no members")

    texts = [m.normalized_text for m in members]
    if representative is not None:
        wanted = normalize_keyword_text(representative)
        if wanted not in seen:
            raise InvalidInputError(
                f"Representative {representative!r} is not a member of the merged clusters"
            )
        pillar = texts.index(wanted)
    elif clusters[0].representative is not None:
        pillar = texts.index(clusters[0].representative.normalized_text)
    else:
        pillar = choose_representative(members)

    return Cluster(name=name, members=_with_pillar(members, pillar))


def split_cluster(
    cluster: Cluster, selected_keyword_texts: Iterable[str], new_name: str
) -> tuple[Cluster, Cluster]:
    """Move the selected keywords out of ``cluster`` into a new cluster.

    Returns ``(remaining, created)``.  ``remaining`` keeps the original
    name and id; ``created`` gets ``new_name`` and no id.  The half that
    does not inherit the original pillar gets one elected by the same rule
    as preview (highest search volume, then member order).

    Raises:
        InvalidSplitError: The selection is empty or covers every member.
        InvalidInputError: The selection names keywords outside the
            cluster, or ``new_name`` is blank.
    """
    name = _clean_name(new_name)
    selected = {normalize_keyword_text(t) for t in selected_keyword_texts}

    unknown = selected - cluster.keyword_texts
    if unknown:
        raise InvalidInputError(
            f"Keywords not in cluster {cluster.name!r}: {sorted(unknown)}"
        )

    created_members = [m for m in cluster.members if m.normalized_text in selected]
    remaining_members = [m for m in cluster.members if m.normalized_text not in selected]

    if not created_members:
        raise InvalidSplitError("Split selection is empty")
    if not remaining_members:
        raise InvalidSplitError("Split selection covers every member of the cluster")

    remaining = replace(cluster, members=_ensure_single_representative(remaining_members))
    created = Cluster(name=name, members=_ensure_single_representative(created_members))
    return remaining, created


def rename_cluster(cluster: Cluster, new_name: str) -> Cluster:
    """Return the cluster under a new name; membership is unchanged."""
    return replace(cluster, name=_clean_name(new_name))


def _index_of(clusters: Sequence[Cluster], key: str) -> int:
    for idx, cluster in enumerate(clusters):
        if cluster_key(cluster, idx) == key:
            return idx
    raise InvalidInputError(f"Unknown cluster: {key!r}")


def delete_cluster(clusters: Sequence[Cluster], key: str) -> tuple[Cluster, ...]:
    """Drop a cluster from the working set.

    Its keywords are discarded -- deleting means "reject this grouping".
    Use ``DeleteOperation(restore_keywords=True)`` to send them back to
    ``unclustered`` instead.
    """
    idx = _index_of(clusters, key)
    return tuple(clusters[:idx]) + tuple(clusters[idx + 1 :])


# ---------------------------------------------------------------------------
# Operations on a whole ClusteringResult
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class MergeOperation:
    cluster_keys: tuple[str, ...]
    new_name: str
    representative: str | None = None


@dataclass(frozen=True)
class SplitOperation:
    cluster_key: str
    keyword_texts: tuple[str, ...]
    new_name: str


@dataclass(frozen=True)
class RenameOperation:
    cluster_key: str
    new_name: str


@dataclass(frozen=True)
class DeleteOperation:
    cluster_key: str
    restore_keywords: bool = False


Operation = MergeOperation | SplitOperation | RenameOperation | DeleteOperation


def _apply_merge(result: ClusteringResult, op: MergeOperation) -> ClusteringResult:
    keys = list(dict.fromkeys(op.cluster_keys))
    if len(keys) < 2:
        raise InvalidInputError(f"Merging requires at least 2 distinct clusters, got {len(keys)}")

    indices = [_index_of(result.clusters, key) for key in keys]
    merged = merge_clusters(
        [result.clusters[i] for i in indices], op.new_name, representative=op.representative
    )

    position = min(indices)
    dropped = set(indices)
    clusters: list[Cluster] = []
    for idx, cluster in enumerate(result.clusters):
        if idx == position:
            clusters.append(merged)
        elif idx not in dropped:
            clusters.append(cluster)
    return replace(result, clusters=tuple(clusters))


def _apply_split(result: ClusteringResult, op: SplitOperation) -> ClusteringResult:
    idx = _index_of(result.clusters, op.cluster_key)
    remaining, created = split_cluster(result.clusters[idx], op.keyword_texts, op.new_name)
    clusters = result.clusters[:idx] + (remaining, created) + result.clusters[idx + 1 :]
    return replace(result, clusters=clusters)


def _apply_rename(result: ClusteringResult, op: RenameOperation) -> ClusteringResult:
    idx = _index_of(result.clusters, op.cluster_key)
    renamed = rename_cluster(result.clusters[idx], op.new_name)
    clusters = result.clusters[:idx] + (renamed,) + result.clusters[idx + 1 :]
    return replace(result, clusters=clusters)


def _apply_delete(result: ClusteringResult, op: DeleteOperation) -> ClusteringResult:
    idx = _index_of(result.clusters, op.cluster_key)
    removed = result.clusters[idx]
    unclustered = result.unclustered
    if op.restore_keywords:
        unclustered = unclustered + tuple(m.to_keyword() for m in removed.members)
    return replace(
        result,
        clusters=delete_cluster(result.clusters, op.cluster_key),
        unclustered=unclustered,
    )


_HANDLERS = {
    MergeOperation: _apply_merge,
    SplitOperation: _apply_split,
    RenameOperation: _apply_rename,
    DeleteOperation: _apply_delete,
}


def mutate(result: ClusteringResult, operation: Operation) -> ClusteringResult:
    """Apply one operator edit and return the new working set.

    Clusters are addressed by ``cluster_key`` (the id, or
    ``preview-{position}`` before commit), so preview keys refer to
    positions in *this* ``result``.
    """
    handler = _HANDLERS.get(type(operation))
    if handler is None:
        raise InvalidInputError(f"Unsupported operation: {type(operation).__name__}")

    new_result = handler(result, operation)
    check_clusters(new_result.clusters)

    logger.info(
        "cluster_mutation_applied",
        operation=type(operation).__name__,
        cluster_count=len(new_result.clusters),
        unclustered_count=len(new_result.unclustered),
    )
    return new_result
