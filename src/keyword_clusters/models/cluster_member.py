"""Keywords belonging to a persisted cluster."""

from __future__ import annotations

from typing import TYPE_CHECKING

import sqlalchemy as sa
from sqlalchemy.orm import Mapped, mapped_column, relationship

from keyword_clusters.models.base import Base

if TYPE_CHECKING:
    from keyword_clusters.models.cluster import ClusterRecord


class ClusterMemberRecord(Base):
    """One keyword of a committed cluster.

    The partial unique index allows at most one representative per
    cluster at the storage level; ``commit_clusters`` guarantees at least
    one.
    """

    __tablename__ = "cluster_members"

    id: Mapped[int] = mapped_column(sa.Integer, primary_key=True, autoincrement=True)
    cluster_id: Mapped[str] = mapped_column(
        sa.String(36), sa.ForeignKey("clusters.id", ondelete="CASCADE"), index=True
    )
    keyword_id: Mapped[str | None] = mapped_column(sa.String, nullable=True)
    keyword_text: Mapped[str] = mapped_column(sa.String)
    is_representative: Mapped[bool] = mapped_column(sa.Boolean, default=False)
    search_volume: Mapped[int | None] = mapped_column(sa.Integer, nullable=True)
    difficulty: Mapped[float | None] = mapped_column(sa.Float, nullable=True)
    position: Mapped[int] = mapped_column(sa.Integer, default=0)

    cluster: Mapped[ClusterRecord] = relationship("ClusterRecord", back_populates="members")

    __table_args__ = (
        sa.UniqueConstraint("cluster_id", "keyword_text", name="uq_cluster_members_keyword"),
        sa.Index(
            "uq_cluster_members_one_representative",
            "cluster_id",
            unique=True,
            sqlite_where=sa.text("is_representative = 1"),
            postgresql_where=sa.text("is_representative"),
        ),
    )
