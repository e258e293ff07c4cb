"""
CodeSage FastAPI Application.

API for submitting Python code for AI explanation and issue detection, and
for follow-up chat about an analysis.
"""

import logging
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from codesage import __version__
from codesage.api.errors import register_exception_handlers
from codesage.api.routes import analysis, chat, upload
from codesage.api.schemas import HealthResponse
from codesage.config import Settings, settings
from codesage.logging_config import setup_logging
from codesage.oracle import CodeOracle, create_oracle
from codesage.store import SessionStore

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Lifespan context manager for FastAPI application.

    Initializes logging on startup and tears the session store down on
    shutdown. The oracle API key is not checked here.
    """
    config: Settings = app.state.settings
    try:
        setup_logging(context="api", config=config)
    except PermissionError as e:
        logging.basicConfig(level=config.log_level.upper())
        logger.warning(f"File logging disabled: {e}")

    logger.info(
        f"CodeSage API starting (environment={config.environment}, "
        f"oracle={config.oracle_provider})"
    )

    yield

    logger.info("Application shutdown initiated...")
    app.state.store.close()
    logger.info("Application shutdown complete")


def create_app(
    config: Optional[Settings] = None,
    store: Optional[SessionStore] = None,
    oracle: Optional[CodeOracle] = None,
) -> FastAPI:
    """Create and configure the FastAPI application.

    Args:
        config: Settings (defaults to the global settings)
        store: SessionStore instance (a fresh one is created if omitted)
        oracle: CodeOracle instance (built from settings if omitted)

    Returns:
        Configured FastAPI application
    """
    config = config or settings

    app = FastAPI(
        lifespan=lifespan,
        title="CodeSage API",
        description="AI-assisted Python code explanation and review",
        version=__version__,
        docs_url="/docs",
        redoc_url="/redoc",
    )

    app.state.settings = config
    app.state.store = store if store is not None else SessionStore()
    app.state.oracle = oracle if oracle is not None else create_oracle(config)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=config.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    register_exception_handlers(app)

    @app.get("/")
    async def root() -> dict[str, str]:
        """Root endpoint - API health check."""
        return {
            "status": "ok",
            "message": "CodeSage API is running",
            "version": __version__,
        }

    @app.get("/health", response_model=HealthResponse)
    async def health() -> HealthResponse:
        """Health check endpoint with store record counts."""
        stats = app.state.store.stats()
        return HealthResponse(
            status="healthy",
            oracle_provider=config.oracle_provider,
            analyses=stats["analyses"],
            chat_messages=stats["chat_messages"],
        )

    app.include_router(upload.router, prefix="/api/upload", tags=["upload"])
    app.include_router(analysis.router, prefix="/api", tags=["analysis"])
    app.include_router(chat.router, prefix="/api/chat", tags=["chat"])

    return app


app = create_app()
