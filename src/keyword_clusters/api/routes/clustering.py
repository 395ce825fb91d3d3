"""API routes for the clustering workbench: preview, mutate, export, commit."""

from __future__ import annotations

from typing import Literal

from fastapi import APIRouter, Depends, Query, Response
from sqlalchemy.ext.asyncio import AsyncSession

from keyword_clusters.api.deps import (
    ProviderFactory,
    get_clustering_config,
    get_db,
    get_provider_factory,
)
from keyword_clusters.api.schemas import (
    ClusteringResultSchema,
    ClusterSchema,
    CommitRequest,
    CommitResponse,
    ExportRequest,
    MutateRequest,
    PreviewRequest,
)
from keyword_clusters.clustering.clusterer import preview
from keyword_clusters.clustering.config import ClusteringConfig
from keyword_clusters.clustering.mutations import mutate
from keyword_clusters.export.service import export_clusters, generate_export_filename
from keyword_clusters.persistence import commit_clusters, load_clusters, with_ids

router = APIRouter(prefix="/api/clustering", tags=["clustering"])

_MEDIA_TYPES = {"csv": "text/csv; charset=utf-8", "json": "application/json"}


@router.post("/preview", response_model=ClusteringResultSchema)
async def preview_clusters(
    request: PreviewRequest,
    provider_factory: ProviderFactory = Depends(get_provider_factory),
) -> ClusteringResultSchema:
    """Cluster the submitted keywords.  No side effects."""
    params = request.params.to_domain()
    provider = provider_factory(params.semantic_provider) if params.semantic_enabled else None
    result = await preview(
        [k.to_domain() for k in request.keywords], params, provider=provider
    )
    return ClusteringResultSchema.from_domain(result)


@router.post("/mutate", response_model=ClusteringResultSchema)
async def mutate_clusters(request: MutateRequest) -> ClusteringResultSchema:
    """Apply one merge/split/rename/delete and return the new working set."""
    result = mutate(request.result.to_domain(), request.operation_to_domain())
    return ClusteringResultSchema.from_domain(result)


@router.post("/export")
async def export(
    request: ExportRequest,
    format: Literal["csv", "json"] = Query(default="csv"),
    config: ClusteringConfig = Depends(get_clustering_config),
) -> Response:
    """Render clusters as a downloadable CSV or JSON file."""
    content = export_clusters([c.to_domain() for c in request.clusters], format)
    filename = generate_export_filename(config.export.filename_prefix, format)
    return Response(
        content=content,
        media_type=_MEDIA_TYPES[format],
        headers={"Content-Disposition": f'attachment; filename="{filename}"'},
    )


@router.post("/commit", response_model=CommitResponse)
async def commit(
    request: CommitRequest,
    db: AsyncSession = Depends(get_db),
) -> CommitResponse:
    """Persist the accepted clusters atomically.

    Returns the assigned ids plus CSV and JSON exports that carry them.
    """
    clusters = [c.to_domain() for c in request.clusters]
    cluster_ids = await commit_clusters(
        db,
        project_id=request.project_id,
        clusters=clusters,
        params=request.params.to_domain(),
        operator=request.operator,
    )
    committed = with_ids(clusters, cluster_ids)
    return CommitResponse(
        cluster_ids=cluster_ids,
        clusters=[ClusterSchema.from_domain(c) for c in committed],
        csv_content=export_clusters(committed, "csv"),
        json_content=export_clusters(committed, "json"),
    )


@router.get("/projects/{project_id}/clusters", response_model=list[ClusterSchema])
async def project_clusters(
    project_id: str,
    db: AsyncSession = Depends(get_db),
) -> list[ClusterSchema]:
    """List committed clusters of a project."""
    clusters = await load_clusters(db, project_id)
    return [ClusterSchema.from_domain(c) for c in clusters]
