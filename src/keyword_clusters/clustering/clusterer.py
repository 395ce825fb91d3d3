"""Keyword clusterer: union-find over SERP overlap and semantic distance.

Each keyword gets a dense index.  A pair ``(i, j)`` is unioned when it
shares at least ``overlap_threshold`` SERP URLs, OR -- with a semantic
provider enabled -- its cosine distance is at most ``distance_threshold``.
Partitions smaller than ``min_cluster_size`` are returned as
``unclustered``; every other partition becomes a ``Cluster`` with exactly
one representative.

``cluster_keywords`` is PURE; ``preview`` adds the (optional) embedding
call in front of it.
"""

from __future__ import annotations

from collections.abc import Sequence
from typing import Protocol

import structlog

from keyword_clusters.clustering.config import load_clustering_config
from keyword_clusters.clustering.overlap import build_overlap_matrix
from keyword_clusters.clustering.semantic import SemanticProvider, create_semantic_provider
from keyword_clusters.clustering.types import (
    Cluster,
    ClusteringParams,
    ClusteringResult,
    ClusterMember,
    Keyword,
)
from keyword_clusters.clustering.union_find import DisjointSet
from keyword_clusters.config.settings import get_settings
from keyword_clusters.exceptions import InvalidInputError

logger = structlog.get_logger()


class _HasSearchVolume(Protocol):
    search_volume: int | None


def choose_representative(candidates: Sequence[_HasSearchVolume]) -> int:
    """Index of the pillar among ``candidates``.

    Highest ``search_volume`` wins (missing counts as 0); ties go to the
    earliest candidate, so the choice follows input order.
    """
    if not candidates:
        raise InvalidInputError("Cannot choose a representative from no candidates")

    best = 0
    best_volume = candidates[0].search_volume or 0
    for idx, candidate in enumerate(candidates[1:], start=1):
        volume = candidate.search_volume or 0
        if volume > best_volume:
            best, best_volume = idx, volume
    return best


def default_cluster_name(pillar_text: str) -> str:
    return f"Cluster: {pillar_text}"


def validate_keywords(keywords: Sequence[Keyword]) -> None:
    """Reject an empty keyword list or duplicate (normalized) keyword texts."""
    if not keywords:
        raise InvalidInputError("At least one keyword is required")

    seen: set[str] = set()
    for keyword in keywords:
        key = keyword.normalized_text
        if key in seen:
            raise InvalidInputError(f"Duplicate keyword: {keyword.text!r}")
        seen.add(key)


def should_union(
    i: int,
    j: int,
    params: ClusteringParams,
    overlap_matrix: Sequence[Sequence[int]],
    semantic_matrix: Sequence[Sequence[float]] | None,
) -> bool:
    """Either similarity signal is sufficient to merge ``i`` and ``j``."""
    if overlap_matrix[i][j] >= params.overlap_threshold:
        return True
    if params.semantic_enabled and semantic_matrix is not None:
        return semantic_matrix[i][j] <= params.distance_threshold
    return False


def _build_cluster(keywords: Sequence[Keyword], indices: list[int]) -> Cluster:
    group = [keywords[i] for i in indices]
    rep = choose_representative(group)
    members = tuple(
        ClusterMember.from_keyword(keyword, is_representative=(pos == rep))
        for pos, keyword in enumerate(group)
    )
    return Cluster(name=default_cluster_name(group[rep].text), members=members)


def cluster_keywords(
    keywords: Sequence[Keyword],
    params: ClusteringParams,
    overlap_matrix: Sequence[Sequence[int]] | None = None,
    semantic_matrix: Sequence[Sequence[float]] | None = None,
) -> ClusteringResult:
    """Group keywords into clusters.  PURE FUNCTION -- no I/O.

    Args:
        keywords: Keywords in input order; texts must be unique after
            normalisation.
        params: Thresholds and provider selection.
        overlap_matrix: Precomputed overlap scores (built when omitted).
        semantic_matrix: Pairwise cosine distances; required when
            ``params.semantic_provider`` is not ``none``.

    Returns:
        A ``ClusteringResult``.  Clusters are ordered by their first-seen
        keyword, members and ``unclustered`` keep input order.
    """
    validate_keywords(keywords)
    n = len(keywords)

    if overlap_matrix is None:
        overlap_matrix = build_overlap_matrix(keywords)
    if params.semantic_enabled:
        if semantic_matrix is None:
            raise InvalidInputError(
                f"A semantic distance matrix is required for provider "
                f"{params.semantic_provider.value!r}"
            )
        if len(semantic_matrix) != n:
            raise InvalidInputError(
                f"Semantic matrix has {len(semantic_matrix)} rows for {n} keywords"
            )
    if len(overlap_matrix) != n:
        raise InvalidInputError(
            f"Overlap matrix has {len(overlap_matrix)} rows for {n} keywords"
        )

    forest = DisjointSet(n)
    union_count = 0
    for i in range(n):
        for j in range(i + 1, n):
            if should_union(i, j, params, overlap_matrix, semantic_matrix):
                if forest.union(i, j):
                    union_count += 1

    clusters: list[Cluster] = []
    unclustered_indices: list[int] = []
    for indices in forest.groups():
        if len(indices) < params.min_cluster_size:
            unclustered_indices.extend(indices)
        else:
            clusters.append(_build_cluster(keywords, indices))

    unclustered = tuple(keywords[i] for i in sorted(unclustered_indices))

    logger.debug(
        "clustering_unions",
        keyword_count=n,
        unions=union_count,
    )

    return ClusteringResult(clusters=tuple(clusters), unclustered=unclustered, params=params)


async def preview(
    keywords: Sequence[Keyword],
    params: ClusteringParams,
    provider: SemanticProvider | None = None,
) -> ClusteringResult:
    """Cluster keywords, fetching embeddings first when semantic scoring is on.

    No side effects beyond the embedding request; safe to call repeatedly.

    Raises:
        InvalidInputError: Empty or duplicate keywords.
        ConfigError: External provider selected without an API key.
        UpstreamError: The embedding service failed.
    """
    validate_keywords(keywords)

    semantic_matrix = None
    if params.semantic_enabled:
        if provider is None:
            settings = get_settings()
            config = load_clustering_config(settings.clustering_config_path)
            provider = create_semantic_provider(
                params.semantic_provider,
                api_key=settings.embedding_api_key,
                config=config.embedding,
            )
        semantic_matrix = await provider.build_semantic_matrix([k.text for k in keywords])

    result = cluster_keywords(
        keywords,
        params,
        overlap_matrix=build_overlap_matrix(keywords),
        semantic_matrix=semantic_matrix,
    )

    logger.info(
        "clustering_preview_complete",
        keyword_count=len(keywords),
        cluster_count=len(result.clusters),
        unclustered_count=len(result.unclustered),
        semantic_provider=params.semantic_provider.value,
    )
    return result
