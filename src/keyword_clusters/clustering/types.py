"""Immutable value types for keyword clustering.

Every value here is a frozen dataclass holding tuples, so a
``ClusteringResult`` can be handed to an operator, mutated functionally
and compared for equality without defensive copying.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from enum import Enum

from keyword_clusters.exceptions import InvalidInputError

MAX_OVERLAP = 10

_WHITESPACE_RE = re.compile(r"\s+")


def normalize_keyword_text(text: str) -> str:
    """Return the joining key for a keyword: trimmed, single-spaced, case-folded."""
    return _WHITESPACE_RE.sub(" ", text.strip()).casefold()


class SemanticProviderKind(str, Enum):
    """Closed set of semantic backends."""

    NONE = "none"
    EXTERNAL = "external"


@dataclass(frozen=True)
class Keyword:
    """A keyword with its SERP snapshot and optional metrics."""

    text: str
    serp_urls: tuple[str, ...] = ()
    serp_titles: tuple[str, ...] = ()
    id: str | None = None
    search_volume: int | None = None
    difficulty: float | None = None

    def __post_init__(self) -> None:
        # Accept lists from callers while storing tuples
        object.__setattr__(self, "serp_urls", tuple(self.serp_urls))
        object.__setattr__(self, "serp_titles", tuple(self.serp_titles))
        if not self.text or not self.text.strip():
            raise InvalidInputError("Keyword text must be non-empty")
        if self.search_volume is not None and self.search_volume < 0:
            raise InvalidInputError(
                f"search_volume must be >= 0 for keyword {self.text!r}"
            )

    @property
    def normalized_text(self) -> str:
        return normalize_keyword_text(self.text)


@dataclass(frozen=True)
class ClusteringParams:
    """Thresholds and provider selection for one clustering run.

    Attributes:
        overlap_threshold: Minimum shared SERP URLs (0..10) to union two
            keywords.
        distance_threshold: Maximum cosine distance (0..1) to union two
            keywords semantically.  Ignored when the provider is ``none``.
        min_cluster_size: Partitions smaller than this go to ``unclustered``.
        semantic_provider: ``none`` or ``external``.
    """

    overlap_threshold: int = 3
    distance_threshold: float = 0.35
    min_cluster_size: int = 2
    semantic_provider: SemanticProviderKind = SemanticProviderKind.NONE

    def __post_init__(self) -> None:
        if isinstance(self.overlap_threshold, bool) or not isinstance(
            self.overlap_threshold, int
        ):
            raise InvalidInputError("overlap_threshold must be an integer")
        if not 0 <= self.overlap_threshold <= MAX_OVERLAP:
            raise InvalidInputError(
                f"overlap_threshold must be between 0 and {MAX_OVERLAP}, "
                f"got {self.overlap_threshold}"
            )
        if isinstance(self.distance_threshold, bool) or not isinstance(
            self.distance_threshold, (int, float)
        ):
            raise InvalidInputError("distance_threshold must be a number")
        if not 0.0 <= self.distance_threshold <= 1.0:
            raise InvalidInputError(
                f"distance_threshold must be between 0 and 1, got {self.distance_threshold}"
            )
        if isinstance(self.min_cluster_size, bool) or not isinstance(
            self.min_cluster_size, int
        ):
            raise InvalidInputError("min_cluster_size must be an integer")
        if self.min_cluster_size < 1:
            raise InvalidInputError(
                f"min_cluster_size must be >= 1, got {self.min_cluster_size}"
            )
        try:
            kind = SemanticProviderKind(self.semantic_provider)
        except ValueError as e:
            raise InvalidInputError(
                f"Unknown semantic provider: {self.semantic_provider!r}"
            ) from e
        object.__setattr__(self, "semantic_provider", kind)
        object.__setattr__(self, "distance_threshold", float(self.distance_threshold))

    @property
    def semantic_enabled(self) -> bool:
        return self.semantic_provider is not SemanticProviderKind.NONE

    def to_dict(self) -> dict:
        return {
            "overlap_threshold": self.overlap_threshold,
            "distance_threshold": self.distance_threshold,
            "min_cluster_size": self.min_cluster_size,
            "semantic_provider": self.semantic_provider.value,
        }


@dataclass(frozen=True)
class ClusterMember:
    """One keyword inside a cluster.

    ``search_volume`` is carried so the representative can be re-chosen
    after a split without going back to the original ``Keyword``.
    The remaining keyword fields are carried too, so ``to_keyword`` gives
    back the original ``Keyword`` when a deleted cluster is restored.
    """

    keyword_text: str
    is_representative: bool = False
    keyword_id: str | None = None
    search_volume: int | None = None
    serp_urls: tuple[str, ...] = ()
    serp_titles: tuple[str, ...] = ()
    difficulty: float | None = None

    def __post_init__(self) -> None:
        object.__setattr__(self, "serp_urls", tuple(self.serp_urls))
        object.__setattr__(self, "serp_titles", tuple(self.serp_titles))

    @property
    def normalized_text(self) -> str:
        return normalize_keyword_text(self.keyword_text)

    @classmethod
    def from_keyword(cls, keyword: Keyword, is_representative: bool = False) -> ClusterMember:
        return cls(
            keyword_text=keyword.text,
            is_representative=is_representative,
            keyword_id=keyword.id,
            search_volume=keyword.search_volume,
            serp_urls=keyword.serp_urls,
            serp_titles=keyword.serp_titles,
            difficulty=keyword.difficulty,
        )

    def to_keyword(self) -> Keyword:
        return Keyword(
            text=self.keyword_text,
            serp_urls=self.serp_urls,
            serp_titles=self.serp_titles,
            id=self.keyword_id,
            search_volume=self.search_volume,
            difficulty=self.difficulty,
        )


@dataclass(frozen=True)
class Cluster:
    """A pillar keyword plus its support keywords.

    ``id`` stays ``None`` until the cluster is committed.
    """

    name: str
    members: tuple[ClusterMember, ...]
    id: str | None = None

    def __post_init__(self) -> None:
        object.__setattr__(self, "members", tuple(self.members))

    @property
    def representative(self) -> ClusterMember | None:
        """The pillar member, or ``None`` if no member is flagged."""
        for member in self.members:
            if member.is_representative:
                return member
        return None

    @property
    def supports(self) -> tuple[ClusterMember, ...]:
        return tuple(m for m in self.members if not m.is_representative)

    @property
    def keyword_texts(self) -> frozenset[str]:
        """Normalized texts of all members."""
        return frozenset(m.normalized_text for m in self.members)


@dataclass(frozen=True)
class ClusteringResult:
    """Output of a preview, and the working set an operator mutates."""

    clusters: tuple[Cluster, ...] = ()
    unclustered: tuple[Keyword, ...] = ()
    params: ClusteringParams = field(default_factory=ClusteringParams)

    def __post_init__(self) -> None:
        object.__setattr__(self, "clusters", tuple(self.clusters))
        object.__setattr__(self, "unclustered", tuple(self.unclustered))


def cluster_key(cluster: Cluster, index: int) -> str:
    """Address of a cluster in a working set: its id, or ``preview-{index}``."""
    return cluster.id or f"preview-{index}"
