"""Create cluster_commits, clusters and cluster_members tables.

Revision ID: 001_cluster_tables
Revises:
Create Date: 2026-10-18
"""

from alembic import op
import sqlalchemy as sa

revision = "001_cluster_tables"
down_revision = None
branch_labels = None
depends_on = None


def upgrade() -> None:
    op.create_table(
        "cluster_commits",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("project_id", sa.String(), nullable=False),
        sa.Column("fingerprint", sa.String(64), nullable=False),
        sa.Column("params", sa.JSON(), nullable=False),
        sa.Column("operator", sa.String(), nullable=False, server_default="anonymous"),
        sa.Column("cluster_count", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("created_at", sa.DateTime(), server_default=sa.text("CURRENT_TIMESTAMP")),
        sa.UniqueConstraint("project_id", "fingerprint", name="uq_cluster_commits_fingerprint"),
    )
    op.create_index("ix_cluster_commits_project_id", "cluster_commits", ["project_id"])

    op.create_table(
        "clusters",
        sa.Column("id", sa.String(36), primary_key=True),
        sa.Column("project_id", sa.String(), nullable=False),
        sa.Column(
            "commit_id",
            sa.Integer(),
            sa.ForeignKey("cluster_commits.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column("name", sa.String(), nullable=False),
        sa.Column("params", sa.JSON(), nullable=False),
        sa.Column("position", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("created_by", sa.String(), nullable=False, server_default="anonymous"),
        sa.Column("created_at", sa.DateTime(), server_default=sa.text("CURRENT_TIMESTAMP")),
    )
    op.create_index("ix_clusters_project_id", "clusters", ["project_id"])

    op.create_table(
        "cluster_members",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column(
            "cluster_id",
            sa.String(36),
            sa.ForeignKey("clusters.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column("keyword_id", sa.String(), nullable=True),
        sa.Column("keyword_text", sa.String(), nullable=False),
        sa.Column("is_representative", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("search_volume", sa.Integer(), nullable=True),
        sa.Column("difficulty", sa.Float(), nullable=True),
        sa.Column("position", sa.Integer(), nullable=False, server_default="0"),
        sa.UniqueConstraint("cluster_id", "keyword_text", name="uq_cluster_members_keyword"),
    )
    op.create_index("ix_cluster_members_cluster_id", "cluster_members", ["cluster_id"])

    # At most one representative per cluster, enforced by the database
    op.create_index(
        "uq_cluster_members_one_representative",
        "cluster_members",
        ["cluster_id"],
        unique=True,
        postgresql_where=sa.text("is_representative"),
        sqlite_where=sa.text("is_representative = 1"),
    )


def downgrade() -> None:
    op.drop_index("uq_cluster_members_one_representative")
    op.drop_index("ix_cluster_members_cluster_id")
    op.drop_table("cluster_members")
    op.drop_index("ix_clusters_project_id")
    op.drop_table("clusters")
    op.drop_index("ix_cluster_commits_project_id")
    op.drop_table("cluster_commits")
