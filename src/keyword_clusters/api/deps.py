"""FastAPI dependency injection for DB sessions, config and providers."""

from collections.abc import AsyncGenerator, Callable

from sqlalchemy.ext.asyncio import AsyncSession

from keyword_clusters.clustering.config import ClusteringConfig, load_clustering_config
from keyword_clusters.clustering.semantic import SemanticProvider, create_semantic_provider
from keyword_clusters.clustering.types import SemanticProviderKind
from keyword_clusters.config.settings import get_settings
from keyword_clusters.db.session import get_session_factory

ProviderFactory = Callable[[SemanticProviderKind], SemanticProvider]


async def get_db() -> AsyncGenerator[AsyncSession, None]:
    """Yield an async DB session for request handling."""
    factory = get_session_factory()
    async with factory() as session:
        yield session


def get_clustering_config() -> ClusteringConfig:
    """Load the clustering YAML config named by the settings."""
    return load_clustering_config(get_settings().clustering_config_path)


def get_provider_factory() -> ProviderFactory:
    """Return a callable building the semantic provider for a request."""
    settings = get_settings()
    config = get_clustering_config()

    def factory(kind: SemanticProviderKind) -> SemanticProvider:
        return create_semantic_provider(
            kind, api_key=settings.embedding_api_key, config=config.embedding
        )

    return factory
