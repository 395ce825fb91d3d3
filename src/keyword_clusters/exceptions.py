"""Error taxonomy for keyword clustering.

Caller mistakes (``InvalidInputError``, ``ConfigError``) are reported
immediately and never retried.  ``UpstreamError`` is surfaced unchanged
from the embedding service; the caller decides whether to retry.
``InvariantViolationError`` indicates a bug in the mutation layer or a
hand-built cluster payload.
"""

from __future__ import annotations


class ClusteringError(Exception):
    """Base class for all keyword clustering errors."""


class InvalidInputError(ClusteringError, ValueError):
    """Malformed keywords, thresholds, names or mutation arguments."""


class InvalidSplitError(InvalidInputError):
    """Split selection is empty or covers every member of the cluster."""


class ConfigError(ClusteringError):
    """A required setting (e.g. the embedding API key) is missing."""


class UpstreamError(ClusteringError):
    """The embedding service failed (network, timeout, non-2xx, bad payload)."""

    def __init__(
        self, message: str, service: str = "embeddings", status_code: int | None = None
    ) -> None:
        self.service = service
        self.status_code = status_code
        super().__init__(message)


class InvariantViolationError(ClusteringError):
    """A cluster is empty or does not have exactly one representative."""

    def __init__(self, message: str, cluster_name: str | None = None) -> None:
        self.cluster_name = cluster_name
        super().__init__(message)
