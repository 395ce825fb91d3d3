"""Cluster persistence.

Provides two core functions:
- ``commit_clusters``: validate an accepted working set and write all of
  its clusters and members in a single transaction.
- ``load_clusters``: read committed clusters back as domain values.
"""

from __future__ import annotations

import hashlib
import json
import uuid
from collections.abc import Sequence
from dataclasses import replace

import structlog
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from keyword_clusters.clustering.invariants import check_clusters
from keyword_clusters.clustering.types import Cluster, ClusteringParams, ClusterMember
from keyword_clusters.exceptions import InvalidInputError
from keyword_clusters.models.cluster import ClusterRecord
from keyword_clusters.models.cluster_commit import ClusterCommit
from keyword_clusters.models.cluster_member import ClusterMemberRecord

logger = structlog.get_logger()


def compute_commit_fingerprint(clusters: Sequence[Cluster], params: ClusteringParams) -> str:
    """SHA-256 over params and cluster contents (names, members, pillars).

    Cluster ids are excluded so a committed result re-submitted with its
    ids yields the same fingerprint.
    """
    payload = {
        "params": params.to_dict(),
        "clusters": [
            {
                "name": c.name,
                "members": [
                    [m.keyword_text, m.is_representative, m.keyword_id] for m in c.members
                ],
            }
            for c in clusters
        ],
    }
    encoded = json.dumps(payload, sort_keys=True, ensure_ascii=False).encode("utf-8")
    return hashlib.sha256(encoded).hexdigest()


def with_ids(clusters: Sequence[Cluster], ids: Sequence[str]) -> list[Cluster]:
    """Attach committed ids to the clusters they were assigned to."""
    if len(clusters) != len(ids):
        raise InvalidInputError(f"Got {len(ids)} ids for {len(clusters)} clusters")
    return [replace(c, id=cid) for c, cid in zip(clusters, ids)]


async def commit_clusters(
    session: AsyncSession,
    project_id: str,
    clusters: Sequence[Cluster],
    params: ClusteringParams,
    operator: str = "anonymous",
) -> list[str]:
    """Persist an accepted cluster set and return the assigned cluster ids.

    Validation happens before any write: every cluster must be non-empty
    with exactly one representative and no keyword may appear twice.  All
    rows are written inside one ``session.begin()`` block, so either the
    whole set is stored or nothing is.

    Re-committing an identical set (same params, names, members and
    pillars) for the same project returns the ids of the first commit
    without writing anything.

    Raises:
        InvalidInputError: Missing project id or empty cluster list.
        InvariantViolationError: A cluster breaks the structural invariants.
    """
    if not project_id:
        raise InvalidInputError("project_id is required")
    if not clusters:
        raise InvalidInputError("At least one cluster is required to commit")
    check_clusters(clusters)

    fingerprint = compute_commit_fingerprint(clusters, params)

    async with session.begin():
        existing_stmt = select(ClusterCommit).where(
            ClusterCommit.project_id == project_id,
            ClusterCommit.fingerprint == fingerprint,
        )
        existing = (await session.execute(existing_stmt)).scalar_one_or_none()
        if existing is not None:
            ids_stmt = (
                select(ClusterRecord.id)
                .where(ClusterRecord.commit_id == existing.id)
                .order_by(ClusterRecord.position)
            )
            existing_ids = list((await session.execute(ids_stmt)).scalars().all())
            logger.info(
                "cluster_commit_deduplicated",
                project_id=project_id,
                commit_id=existing.id,
                cluster_count=len(existing_ids),
            )
            return existing_ids

        commit = ClusterCommit(
            project_id=project_id,
            fingerprint=fingerprint,
            params=params.to_dict(),
            operator=operator,
            cluster_count=len(clusters),
        )
        session.add(commit)
        await session.flush()

        ids: list[str] = []
        for position, cluster in enumerate(clusters):
            record = ClusterRecord(
                id=str(uuid.uuid4()),
                project_id=project_id,
                commit_id=commit.id,
                name=cluster.name,
                params=params.to_dict(),
                position=position,
                created_by=operator,
            )
            session.add(record)
            ids.append(record.id)

            for member_position, member in enumerate(cluster.members):
                session.add(
                    ClusterMemberRecord(
                        cluster_id=record.id,
                        keyword_id=member.keyword_id,
                        keyword_text=member.keyword_text,
                        is_representative=member.is_representative,
                        search_volume=member.search_volume,
                        difficulty=member.difficulty,
                        position=member_position,
                    )
                )

        await session.flush()

    logger.info(
        "cluster_commit_written",
        project_id=project_id,
        commit_id=commit.id,
        cluster_count=len(ids),
        member_count=sum(len(c.members) for c in clusters),
    )
    return ids


def record_to_cluster(record: ClusterRecord) -> Cluster:
    """Convert a ``ClusterRecord`` with loaded members to a ``Cluster``."""
    return Cluster(
        id=record.id,
        name=record.name,
        members=tuple(
            ClusterMember(
                keyword_text=m.keyword_text,
                is_representative=m.is_representative,
                keyword_id=m.keyword_id,
                search_volume=m.search_volume,
                difficulty=m.difficulty,
            )
            for m in record.members
        ),
    )


async def load_clusters(session: AsyncSession, project_id: str) -> list[Cluster]:
    """Load every committed cluster of a project, oldest commit first."""
    stmt = (
        select(ClusterRecord)
        .join(ClusterCommit, ClusterRecord.commit_id == ClusterCommit.id)
        .where(ClusterRecord.project_id == project_id)
        .options(selectinload(ClusterRecord.members))
        .order_by(ClusterCommit.id, ClusterRecord.position)
    )
    result = await session.execute(stmt)
    return [record_to_cluster(r) for r in result.scalars().all()]
