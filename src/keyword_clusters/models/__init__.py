from keyword_clusters.models.base import Base
from keyword_clusters.models.cluster import ClusterRecord
from keyword_clusters.models.cluster_commit import ClusterCommit
from keyword_clusters.models.cluster_member import ClusterMemberRecord

__all__ = [
    "Base",
    "ClusterCommit",
    "ClusterMemberRecord",
    "ClusterRecord",
]
