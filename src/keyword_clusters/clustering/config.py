"""Clustering configuration with sensible defaults.

All parameters can be overridden via ``keyword_clusters/config/clustering.yaml``
(or the file named by ``KEYWORD_CLUSTERS_CLUSTERING_CONFIG_PATH``).
If the file does not exist, defaults are used.
"""

from __future__ import annotations

from pathlib import Path

import structlog
import yaml
from pydantic import BaseModel, Field, model_validator

from keyword_clusters.clustering.types import ClusteringParams, SemanticProviderKind


class DefaultParamsConfig(BaseModel):
    """Thresholds used when a caller does not supply its own."""

    overlap_threshold: int = Field(default=3, ge=0, le=10)
    distance_threshold: float = Field(default=0.35, ge=0.0, le=1.0)
    min_cluster_size: int = Field(default=2, ge=1)
    semantic_provider: SemanticProviderKind = SemanticProviderKind.NONE

    def to_params(self) -> ClusteringParams:
        return ClusteringParams(
            overlap_threshold=self.overlap_threshold,
            distance_threshold=self.distance_threshold,
            min_cluster_size=self.min_cluster_size,
            semantic_provider=self.semantic_provider,
        )


class EmbeddingConfig(BaseModel):
    """Parameters for the external embedding service."""

    model: str = "text-embedding-3-small"
    base_url: str = "https://api.openai.com/v1"
    timeout_seconds: float = 30.0
    batch_size: int = Field(default=256, ge=1, le=2048)
    dimensions: int | None = None

    @model_validator(mode="after")
    def warn_if_timeout_is_long(self) -> "EmbeddingConfig":
        """Log a warning when the request timeout exceeds two minutes."""
        if self.timeout_seconds > 120:
            structlog.get_logger().warning(
                "embedding_timeout_long",
                timeout_seconds=self.timeout_seconds,
            )
        return self


class ExportConfig(BaseModel):
    """Naming of exported files."""

    filename_prefix: str = "keyword-clusters"


class ClusteringConfig(BaseModel):
    """Top-level clustering configuration combining all sub-configs."""

    defaults: DefaultParamsConfig = DefaultParamsConfig()
    embedding: EmbeddingConfig = EmbeddingConfig()
    export: ExportConfig = ExportConfig()


def load_clustering_config(path: Path) -> ClusteringConfig:
    """Load clustering configuration from a YAML file.

    If the file does not exist, returns a ``ClusteringConfig`` with all
    default values.  Partial overrides are supported -- only the keys
    present in the YAML file override defaults.
    """
    if not path.exists():
        return ClusteringConfig()

    with open(path) as f:
        data = yaml.safe_load(f) or {}

    return ClusteringConfig(**data)
