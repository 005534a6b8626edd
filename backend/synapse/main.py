"""Synapse API: main entry point."""

from contextlib import asynccontextmanager

import structlog
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.staticfiles import StaticFiles
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError

from synapse.config import settings
from synapse.core.database import async_session_factory, engine
from synapse.core.middleware import RequestLoggingMiddleware

logger = structlog.get_logger()


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan: startup and shutdown events."""
    logger.info("Starting Synapse API", env=settings.app_env)
    yield
    logger.info("Shutting down Synapse API")
    await engine.dispose()


app = FastAPI(
    title="Synapse API",
    description="Collaborative problem solving with an AI assistant and a knowledge graph",
    version="0.1.0",
    docs_url="/docs",
    redoc_url="/redoc",
    lifespan=lifespan,
    # Trailing slash redirects (307/308) drop the Authorization header behind the frontend proxy.
    redirect_slashes=False,
)

# ── Middleware ─────────────────────────────────────
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins_list,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)
app.add_middleware(RequestLoggingMiddleware)


# ── Health Check ──────────────────────────────────
@app.get("/health", tags=["system"])
async def health_check():
    """Liveness probe: healthy whenever the process is running."""
    return {"status": "healthy", "version": "0.1.0"}


@app.get("/ready", tags=["system"])
async def readiness_check():
    """Readiness probe: checks DB connectivity."""
    checks = {"database": "unknown", "api": "ok"}
    try:
        async with async_session_factory() as session:
            await session.execute(text("SELECT 1"))
            checks["database"] = "ok"
    except (SQLAlchemyError, OSError) as e:
        logger.warning("readiness_db_error", error=str(e))
        checks["database"] = f"error: {e}"
        return {"status": "degraded", "checks": checks}

    return {"status": "ready", "checks": checks}


# ── API Routes ────────────────────────────────────
from synapse.api.v1 import ai, artifacts, chat, conjectures, criticisms, graph, problems, users  # noqa: E402

app.include_router(users.router, prefix="/api/v1/users", tags=["users"])
app.include_router(chat.router, prefix="/api/v1", tags=["chat"])
app.include_router(problems.router, prefix="/api/v1/problems", tags=["problems"])
app.include_router(conjectures.router, prefix="/api/v1/conjectures", tags=["conjectures"])
app.include_router(criticisms.router, prefix="/api/v1/criticisms", tags=["criticisms"])
app.include_router(artifacts.router, prefix="/api/v1/artifacts", tags=["artifacts"])
app.include_router(graph.router, prefix="/api/v1/graph", tags=["graph"])
app.include_router(ai.router, prefix="/api/v1/ai", tags=["ai"])

# ── Uploaded files ────────────────────────────────
app.mount(
    settings.upload_url_prefix,
    StaticFiles(directory=settings.upload_dir, check_dir=False),
    name="uploads",
)
