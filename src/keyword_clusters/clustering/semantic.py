"""Pluggable semantic similarity providers.

Two variants behind one interface:

- ``NoneProvider`` -- semantic signal disabled.  Every pair of keywords is
  at the maximal distance 1.0, so nothing is ever unioned semantically.
- ``ExternalEmbeddingProvider`` -- dense embeddings from an
  OpenAI-compatible ``/embeddings`` endpoint, compared by cosine distance.

The provider is chosen once, by ``create_semantic_provider``, from the
configured ``SemanticProviderKind``.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Sequence

import httpx
import numpy as np
import structlog

from keyword_clusters.clustering.config import EmbeddingConfig
from keyword_clusters.clustering.types import SemanticProviderKind
from keyword_clusters.exceptions import ConfigError, UpstreamError

logger = structlog.get_logger()


def cosine_distance_matrix(embeddings: Sequence[Sequence[float]]) -> list[list[float]]:
    """Pairwise cosine distance ``1 - u.v / (|u||v|)``, clamped to ``[0, 1]``.

    Zero vectors have no direction and are treated as maximally distant
    from everything (including other zero vectors).  The diagonal is 0.
    """
    n = len(embeddings)
    if n == 0:
        return []

    vectors = np.asarray(embeddings, dtype=np.float64)
    if vectors.ndim != 2:
        raise ValueError("Embeddings must all have the same dimension")

    norms = np.linalg.norm(vectors, axis=1)
    zero = norms == 0
    safe_norms = np.where(zero, 1.0, norms)
    unit = vectors / safe_norms[:, None]

    distances = 1.0 - unit @ unit.T
    distances = np.clip(distances, 0.0, 1.0)
    distances[zero, :] = 1.0
    distances[:, zero] = 1.0
    np.fill_diagonal(distances, 0.0)
    return distances.tolist()


class SemanticProvider(ABC):
    """Embedding + distance contract shared by all semantic backends."""

    kind: SemanticProviderKind

    @abstractmethod
    async def embed(self, texts: Sequence[str]) -> list[list[float]]:
        """Return one vector per text, in input order."""

    def distance_matrix(self, embeddings: Sequence[Sequence[float]]) -> list[list[float]]:
        return cosine_distance_matrix(embeddings)

    async def build_semantic_matrix(self, texts: Sequence[str]) -> list[list[float]]:
        """Embed ``texts`` and return their pairwise distance matrix."""
        embeddings = await self.embed(texts)
        return self.distance_matrix(embeddings)


class NoneProvider(SemanticProvider):
    """Semantic signal disabled: zero vectors, maximal distance."""

    kind = SemanticProviderKind.NONE

    async def embed(self, texts: Sequence[str]) -> list[list[float]]:
        return [[0.0] for _ in texts]

    def distance_matrix(self, embeddings: Sequence[Sequence[float]]) -> list[list[float]]:
        n = len(embeddings)
        return [[0.0 if i == j else 1.0 for j in range(n)] for i in range(n)]


class ExternalEmbeddingProvider(SemanticProvider):
    """Embeddings from an OpenAI-compatible HTTP endpoint.

    All texts go out in as few requests as ``batch_size`` allows, each
    bounded by ``timeout_seconds``.  Failures surface as ``UpstreamError``;
    there is no retry here.
    """

    kind = SemanticProviderKind.EXTERNAL

    def __init__(
        self,
        api_key: str,
        config: EmbeddingConfig | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        if not api_key:
            raise ConfigError("An embedding API key is required for the external provider")
        self.api_key = api_key
        self.config = config or EmbeddingConfig()
        self._transport = transport

    def _client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(
            base_url=self.config.base_url,
            headers={"Authorization": f"Bearer {self.api_key}"},
            timeout=httpx.Timeout(self.config.timeout_seconds),
            transport=self._transport,
        )

    async def embed(self, texts: Sequence[str]) -> list[list[float]]:
        if not texts:
            return []

        batch_size = self.config.batch_size
        embeddings: list[list[float]] = []

        async with self._client() as client:
            for start in range(0, len(texts), batch_size):
                batch = list(texts[start : start + batch_size])
                embeddings.extend(await self._embed_batch(client, batch))

        if len({len(v) for v in embeddings}) > 1:
            raise UpstreamError("Embedding service returned vectors of differing dimensions")

        logger.info(
            "embeddings_fetched",
            model=self.config.model,
            count=len(embeddings),
            requests=(len(texts) + batch_size - 1) // batch_size,
        )
        return embeddings

    async def _embed_batch(
        self, client: httpx.AsyncClient, batch: list[str]
    ) -> list[list[float]]:
        payload: dict = {"model": self.config.model, "input": batch}
        if self.config.dimensions is not None:
            payload["dimensions"] = self.config.dimensions

        try:
            response = await client.post("/embeddings", json=payload)
        except httpx.TimeoutException as e:
            raise UpstreamError(
                f"Embedding request timed out after {self.config.timeout_seconds}s"
            ) from e
        except httpx.HTTPError as e:
            raise UpstreamError(f"Embedding request failed: {e}") from e

        if response.status_code >= 400:
            raise UpstreamError(
                f"Embedding service returned {response.status_code}: {response.text[:200]}",
                status_code=response.status_code,
            )

        try:
            items = response.json()["data"]
            ordered = sorted(items, key=lambda item: item["index"])
            vectors = [[float(x) for x in item["embedding"]] for item in ordered]
        except (ValueError, KeyError, TypeError) as e:
            raise UpstreamError(f"Malformed embedding response: {e}") from e

        if len(vectors) != len(batch):
            raise UpstreamError(
                f"Embedding service returned {len(vectors)} vectors for {len(batch)} inputs"
            )
        return vectors


def create_semantic_provider(
    kind: SemanticProviderKind | str,
    api_key: str | None = None,
    config: EmbeddingConfig | None = None,
    transport: httpx.AsyncBaseTransport | None = None,
) -> SemanticProvider:
    """Build the provider selected by configuration.

    Raises:
        ConfigError: ``external`` was selected without an API key, or
            ``kind`` names no known provider.
    """
    try:
        kind = SemanticProviderKind(kind)
    except ValueError as e:
        raise ConfigError(f"Unknown semantic provider: {kind!r}") from e
    if kind is SemanticProviderKind.NONE:
        return NoneProvider()
    return ExternalEmbeddingProvider(api_key or "", config=config, transport=transport)
