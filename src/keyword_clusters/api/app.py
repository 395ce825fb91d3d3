"""FastAPI application for the keyword clustering workbench."""

from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

import structlog
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from keyword_clusters import __version__
from keyword_clusters.api.routes.clustering import router as clustering_router
from keyword_clusters.api.routes.health import router as health_router
from keyword_clusters.config.settings import get_settings
from keyword_clusters.db.session import close_db
from keyword_clusters.exceptions import (
    ConfigError,
    InvalidInputError,
    InvariantViolationError,
    UpstreamError,
)
from keyword_clusters.logging_config import configure_logging

logger = structlog.get_logger()


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    settings = get_settings()
    configure_logging(json_output=settings.log_json, log_level=settings.log_level)
    yield
    await close_db()


app = FastAPI(title="Keyword Clusters API", version=__version__, lifespan=lifespan)

# CORS for Vite dev server
app.add_middleware(
    CORSMiddleware,
    allow_origins=["http://localhost:5173", "http://localhost:5174"],
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(health_router)
app.include_router(clustering_router)


@app.exception_handler(InvalidInputError)
async def invalid_input_handler(request: Request, exc: InvalidInputError) -> JSONResponse:
    return JSONResponse(status_code=422, content={"detail": str(exc)})


@app.exception_handler(InvariantViolationError)
async def invariant_violation_handler(
    request: Request, exc: InvariantViolationError
) -> JSONResponse:
    logger.warning("cluster_invariant_violation", cluster=exc.cluster_name, detail=str(exc))
    return JSONResponse(
        status_code=422, content={"detail": str(exc), "cluster": exc.cluster_name}
    )


@app.exception_handler(ConfigError)
async def config_error_handler(request: Request, exc: ConfigError) -> JSONResponse:
    return JSONResponse(status_code=400, content={"detail": str(exc)})


@app.exception_handler(UpstreamError)
async def upstream_error_handler(request: Request, exc: UpstreamError) -> JSONResponse:
    logger.warning(
        "upstream_error", service=exc.service, status_code=exc.status_code, detail=str(exc)
    )
    return JSONResponse(
        status_code=502, content={"detail": str(exc), "service": exc.service}
    )
