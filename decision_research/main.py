"""Decision Research Service - FastAPI Application Entry Point."""

from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

import structlog
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from .api.v1.endpoints.research import router as research_router
from .core.config import settings
from .core.logging_config import configure_logging

logger = structlog.get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Application lifespan manager."""
    configure_logging(settings)
    logger.info(
        "service_starting",
        port=settings.API_PORT,
        gate=settings.RESEARCH_GATE_STRATEGY,
        search_depth=settings.TAVILY_SEARCH_DEPTH,
        decision_llm=settings.DECISION_LLM_MODEL if settings.decision_llm_enabled else None,
        log_level=settings.LOG_LEVEL,
    )

    yield

    logger.info("service_stopping")


app = FastAPI(
    title="Decision Research API",
    description="Multi-pass web research with an evidence gate for decision support",
    version="0.1.0",
    docs_url="/api/docs",
    redoc_url="/api/redoc",
    openapi_url="/api/openapi.json",
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.get("/api/v1/health", tags=["Health"])
async def health_check() -> JSONResponse:
    """Health check endpoint.

    Returns:
        JSONResponse: Service health status
    """
    return JSONResponse(
        content={
            "status": "healthy",
            "service": "decision-research",
            "version": "0.1.0",
            "environment": "development" if settings.DEBUG else "production",
        }
    )


@app.get("/", tags=["Root"])
async def root() -> JSONResponse:
    """Root endpoint with service information."""
    return JSONResponse(
        content={
            "service": "Decision Research API",
            "version": "0.1.0",
            "docs": "/api/docs",
            "health": "/api/v1/health",
            "research": "/api/v1/research",
            "status": "ready",
        }
    )


app.include_router(research_router, prefix="/api")


def run() -> None:
    """Serve the API with uvicorn on API_HOST:API_PORT."""
    import uvicorn

    uvicorn.run(
        app,
        host=settings.API_HOST,
        port=settings.API_PORT,
        log_level=settings.LOG_LEVEL.lower(),
    )


if __name__ == "__main__":
    run()
