"""Keyword clustering engine.

Groups keywords into pillar/support clusters by SERP overlap and optional
semantic distance, and lets an operator merge, split, rename and delete
clusters before they are committed.
"""

from .clusterer import choose_representative, cluster_keywords, preview
from .mutations import (
    DeleteOperation,
    MergeOperation,
    RenameOperation,
    SplitOperation,
    delete_cluster,
    merge_clusters,
    mutate,
    rename_cluster,
    split_cluster,
)
from .types import (
    Cluster,
    ClusteringParams,
    ClusteringResult,
    ClusterMember,
    Keyword,
    SemanticProviderKind,
    cluster_key,
)

__all__ = [
    "Cluster",
    "ClusterMember",
    "ClusteringParams",
    "ClusteringResult",
    "DeleteOperation",
    "Keyword",
    "MergeOperation",
    "RenameOperation",
    "SemanticProviderKind",
    "SplitOperation",
    "choose_representative",
    "cluster_key",
    "cluster_keywords",
    "delete_cluster",
    "merge_clusters",
    "mutate",
    "preview",
    "rename_cluster",
    "split_cluster",
]
