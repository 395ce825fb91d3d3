"""Persisted keyword cluster."""

from __future__ import annotations

from datetime import datetime
from typing import TYPE_CHECKING

import sqlalchemy as sa
from sqlalchemy.orm import Mapped, mapped_column, relationship

from keyword_clusters.models.base import Base

if TYPE_CHECKING:
    from keyword_clusters.models.cluster_member import ClusterMemberRecord


class ClusterRecord(Base):
    """A committed cluster.  ``id`` is a UUID string assigned at commit."""

    __tablename__ = "clusters"

    id: Mapped[str] = mapped_column(sa.String(36), primary_key=True)
    project_id: Mapped[str] = mapped_column(sa.String, index=True)
    commit_id: Mapped[int] = mapped_column(
        sa.Integer, sa.ForeignKey("cluster_commits.id", ondelete="CASCADE")
    )
    name: Mapped[str] = mapped_column(sa.String)
    params: Mapped[dict] = mapped_column(sa.JSON)
    position: Mapped[int] = mapped_column(sa.Integer, default=0)
    created_by: Mapped[str] = mapped_column(sa.String, default="anonymous")
    created_at: Mapped[datetime] = mapped_column(
        sa.DateTime, server_default=sa.text("CURRENT_TIMESTAMP")
    )

    members: Mapped[list[ClusterMemberRecord]] = relationship(
        "ClusterMemberRecord",
        back_populates="cluster",
        cascade="all, delete-orphan",
        order_by="ClusterMemberRecord.position",
    )
