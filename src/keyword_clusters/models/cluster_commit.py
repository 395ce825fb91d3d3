"""Cluster commit model -- one row per accepted clustering result."""

from __future__ import annotations

from datetime import datetime

import sqlalchemy as sa
from sqlalchemy.orm import Mapped, mapped_column

from keyword_clusters.models.base import Base


class ClusterCommit(Base):
    """Records an accepted working set for a project.

    The fingerprint is a hash of the committed clusters and params; the
    unique constraint makes re-committing the same result a no-op.
    """

    __tablename__ = "cluster_commits"

    id: Mapped[int] = mapped_column(sa.Integer, primary_key=True, autoincrement=True)
    project_id: Mapped[str] = mapped_column(sa.String, index=True)
    fingerprint: Mapped[str] = mapped_column(sa.String(64))
    params: Mapped[dict] = mapped_column(sa.JSON)
    operator: Mapped[str] = mapped_column(sa.String, default="anonymous")
    cluster_count: Mapped[int] = mapped_column(sa.Integer, default=0)
    created_at: Mapped[datetime] = mapped_column(
        sa.DateTime, server_default=sa.text("CURRENT_TIMESTAMP")
    )

    __table_args__ = (
        sa.UniqueConstraint("project_id", "fingerprint", name="uq_cluster_commits_fingerprint"),
    )
