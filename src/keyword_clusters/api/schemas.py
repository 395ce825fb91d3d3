"""Pydantic request/response schemas for the clustering API.

Schemas mirror the immutable domain dataclasses and convert to and from
them at the route boundary.
"""

from __future__ import annotations

from typing import Annotated, Literal

from pydantic import BaseModel, Field

from keyword_clusters.clustering.mutations import (
    DeleteOperation,
    MergeOperation,
    Operation,
    RenameOperation,
    SplitOperation,
)
from keyword_clusters.clustering.types import (
    Cluster,
    ClusteringParams,
    ClusteringResult,
    ClusterMember,
    Keyword,
)


class KeywordSchema(BaseModel):
    id: str | None = None
    text: str = Field(min_length=1)
    serp_urls: list[str] = []
    serp_titles: list[str] = []
    search_volume: int | None = Field(None, ge=0)
    difficulty: float | None = None

    def to_domain(self) -> Keyword:
        return Keyword(
            id=self.id,
            text=self.text,
            serp_urls=tuple(self.serp_urls),
            serp_titles=tuple(self.serp_titles),
            search_volume=self.search_volume,
            difficulty=self.difficulty,
        )

    @classmethod
    def from_domain(cls, keyword: Keyword) -> KeywordSchema:
        return cls(
            id=keyword.id,
            text=keyword.text,
            serp_urls=list(keyword.serp_urls),
            serp_titles=list(keyword.serp_titles),
            search_volume=keyword.search_volume,
            difficulty=keyword.difficulty,
        )


class ClusteringParamsSchema(BaseModel):
    overlap_threshold: int = Field(3, ge=0, le=10)
    distance_threshold: float = Field(0.35, ge=0.0, le=1.0)
    min_cluster_size: int = Field(2, ge=1)
    semantic_provider: Literal["none", "external"] = "none"

    def to_domain(self) -> ClusteringParams:
        return ClusteringParams(
            overlap_threshold=self.overlap_threshold,
            distance_threshold=self.distance_threshold,
            min_cluster_size=self.min_cluster_size,
            semantic_provider=self.semantic_provider,
        )

    @classmethod
    def from_domain(cls, params: ClusteringParams) -> ClusteringParamsSchema:
        return cls(**params.to_dict())


class ClusterMemberSchema(BaseModel):
    keyword_text: str
    is_representative: bool = False
    keyword_id: str | None = None
    search_volume: int | None = None
    serp_urls: list[str] = []
    serp_titles: list[str] = []
    difficulty: float | None = None

    def to_domain(self) -> ClusterMember:
        return ClusterMember(
            keyword_text=self.keyword_text,
            is_representative=self.is_representative,
            keyword_id=self.keyword_id,
            search_volume=self.search_volume,
            serp_urls=tuple(self.serp_urls),
            serp_titles=tuple(self.serp_titles),
            difficulty=self.difficulty,
        )

    @classmethod
    def from_domain(cls, member: ClusterMember) -> ClusterMemberSchema:
        return cls(
            keyword_text=member.keyword_text,
            is_representative=member.is_representative,
            keyword_id=member.keyword_id,
            search_volume=member.search_volume,
            serp_urls=list(member.serp_urls),
            serp_titles=list(member.serp_titles),
            difficulty=member.difficulty,
        )


class ClusterSchema(BaseModel):
    id: str | None = None
    name: str
    members: list[ClusterMemberSchema]
    representative: str | None = None

    def to_domain(self) -> Cluster:
        return Cluster(
            id=self.id,
            name=self.name,
            members=tuple(m.to_domain() for m in self.members),
        )

    @classmethod
    def from_domain(cls, cluster: Cluster) -> ClusterSchema:
        pillar = cluster.representative
        return cls(
            id=cluster.id,
            name=cluster.name,
            members=[ClusterMemberSchema.from_domain(m) for m in cluster.members],
            representative=pillar.keyword_text if pillar is not None else None,
        )


class ClusteringResultSchema(BaseModel):
    clusters: list[ClusterSchema]
    unclustered: list[KeywordSchema] = []
    params: ClusteringParamsSchema = ClusteringParamsSchema()

    def to_domain(self) -> ClusteringResult:
        return ClusteringResult(
            clusters=tuple(c.to_domain() for c in self.clusters),
            unclustered=tuple(k.to_domain() for k in self.unclustered),
            params=self.params.to_domain(),
        )

    @classmethod
    def from_domain(cls, result: ClusteringResult) -> ClusteringResultSchema:
        return cls(
            clusters=[ClusterSchema.from_domain(c) for c in result.clusters],
            unclustered=[KeywordSchema.from_domain(k) for k in result.unclustered],
            params=ClusteringParamsSchema.from_domain(result.params),
        )


class PreviewRequest(BaseModel):
    keywords: list[KeywordSchema]
    params: ClusteringParamsSchema = ClusteringParamsSchema()


# ---------------------------------------------------------------------------
# Mutation operations (discriminated by "type")
# ---------------------------------------------------------------------------


class MergeOperationSchema(BaseModel):
    type: Literal["merge"] = "merge"
    cluster_keys: list[str]
    new_name: str
    representative: str | None = None

    def to_domain(self) -> MergeOperation:
        return MergeOperation(
            cluster_keys=tuple(self.cluster_keys),
            new_name=self.new_name,
            representative=self.representative,
        )


class SplitOperationSchema(BaseModel):
    type: Literal["split"] = "split"
    cluster_key: str
    keyword_texts: list[str]
    new_name: str

    def to_domain(self) -> SplitOperation:
        return SplitOperation(
            cluster_key=self.cluster_key,
            keyword_texts=tuple(self.keyword_texts),
            new_name=self.new_name,
        )


class RenameOperationSchema(BaseModel):
    type: Literal["rename"] = "rename"
    cluster_key: str
    new_name: str

    def to_domain(self) -> RenameOperation:
        return RenameOperation(cluster_key=self.cluster_key, new_name=self.new_name)


class DeleteOperationSchema(BaseModel):
    type: Literal["delete"] = "delete"
    cluster_key: str
    restore_keywords: bool = False

    def to_domain(self) -> DeleteOperation:
        return DeleteOperation(
            cluster_key=self.cluster_key, restore_keywords=self.restore_keywords
        )


OperationSchema = Annotated[
    MergeOperationSchema | SplitOperationSchema | RenameOperationSchema | DeleteOperationSchema,
    Field(discriminator="type"),
]


class MutateRequest(BaseModel):
    result: ClusteringResultSchema
    operation: OperationSchema

    def operation_to_domain(self) -> Operation:
        return self.operation.to_domain()


class ExportRequest(BaseModel):
    clusters: list[ClusterSchema]


class CommitRequest(BaseModel):
    project_id: str = Field(min_length=1)
    params: ClusteringParamsSchema = ClusteringParamsSchema()
    clusters: list[ClusterSchema]
    operator: str = "anonymous"


class CommitResponse(BaseModel):
    cluster_ids: list[str]
    clusters: list[ClusterSchema]
    # Exports rendered after ids are assigned, so Cluster ID columns are filled
    csv_content: str
    json_content: str
