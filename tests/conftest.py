"""Shared test fixtures."""

from collections.abc import Sequence

import pytest
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

from keyword_clusters.api.app import app
from keyword_clusters.api.deps import get_db, get_provider_factory
from keyword_clusters.clustering.semantic import SemanticProvider
from keyword_clusters.clustering.types import Keyword, SemanticProviderKind
from keyword_clusters.models import Base


def make_urls(prefix: str, count: int) -> list[str]:
    """Distinct SERP URLs under one host, e.g. ``https://prefix.com/0``."""
    return [f"https://{prefix}.com/{i}" for i in range(count)]


def make_keyword(
    text: str,
    urls: Sequence[str] = (),
    volume: int | None = None,
    keyword_id: str | None = None,
) -> Keyword:
    """Create a Keyword with sensible defaults."""
    return Keyword(
        text=text,
        serp_urls=tuple(urls),
        serp_titles=tuple(f"Title {i}" for i in range(len(urls))),
        search_volume=volume,
        id=keyword_id,
    )


class FakeEmbeddingProvider(SemanticProvider):
    """Deterministic in-memory provider keyed by keyword text."""

    kind = SemanticProviderKind.EXTERNAL

    def __init__(self, vectors: dict[str, list[float]], error: Exception | None = None) -> None:
        self.vectors = vectors
        self.error = error
        self.calls: list[list[str]] = []

    async def embed(self, texts):
        self.calls.append(list(texts))
        if self.error is not None:
            raise self.error
        return [self.vectors.get(t, [0.0, 0.0]) for t in texts]


@pytest.fixture
def shoe_keywords() -> list[Keyword]:
    """Three running-shoe keywords sharing SERPs plus one unrelated keyword."""
    shared = make_urls("shoes", 4)
    return [
        make_keyword("running shoes", shared + make_urls("a", 6), volume=5000, keyword_id="k1"),
        make_keyword("best running shoes", shared + make_urls("b", 6), volume=8000, keyword_id="k2"),
        make_keyword("running shoes for men", shared[:3] + make_urls("c", 7), volume=1200, keyword_id="k3"),
        make_keyword("banana bread recipe", make_urls("bake", 10), volume=9000, keyword_id="k4"),
    ]


@pytest.fixture
async def test_engine():
    """Create an async SQLite in-memory engine for tests."""
    engine = create_async_engine("sqlite+aiosqlite:///:memory:")
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest.fixture
async def test_session_factory(test_engine) -> async_sessionmaker[AsyncSession]:
    """Create an async session factory bound to the test engine."""
    return async_sessionmaker(test_engine, expire_on_commit=False)


@pytest.fixture
def fake_provider() -> FakeEmbeddingProvider:
    return FakeEmbeddingProvider(
        {
            "sneakers": [1.0, 0.0],
            "trainers": [0.99, 0.05],
            "banana bread recipe": [0.0, 1.0],
        }
    )


@pytest.fixture
async def api_client(test_engine, test_session_factory, fake_provider):
    """Async HTTP client hitting the FastAPI app with test DB and fake embeddings."""

    async def override_get_db():
        async with test_session_factory() as session:
            yield session

    def override_provider_factory():
        return lambda kind: fake_provider

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_provider_factory] = override_provider_factory
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client
    app.dependency_overrides.clear()


@pytest.fixture
def provider_cls() -> type[FakeEmbeddingProvider]:
    """The fake provider class, for tests that need custom vectors or errors."""
    return FakeEmbeddingProvider
