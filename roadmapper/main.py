"""
Roadmapper: Learning Roadmap API
================================
FastAPI entry point.
  • Domain errors → JSON envelope with a per-kind status code
  • Global exception handler: never crashes, always returns JSON
  • /api/v1/roadmap: AI roadmap generation + node editing
  • /api/v1/auth: credentials and federated sign-in
  • One lazily-opened MongoDB connection per process
"""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from roadmapper.api.v1.endpoints import auth, roadmap
from roadmapper.core.config import settings
from roadmapper.core.database import ConnectionCache
from roadmapper.core.errors import RoadmapError
from roadmapper.schemas.common import ErrorResponse

# ── Logging ──────────────────────────────────────────────────────────────────
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s │ %(levelname)-8s │ %(name)s │ %(message)s",
)
logger = logging.getLogger(__name__)


# ── Lifespan ─────────────────────────────────────────────────────────────────
@asynccontextmanager
async def lifespan(app: FastAPI):
    if settings.mongodb_uri:
        app.state.db = ConnectionCache()
    else:
        app.state.db = None
        logger.warning("[DB] ✗ MONGODB_URI missing, auth endpoints are disabled")
    yield
    if app.state.db is not None:
        await app.state.db.close()


# ── App ──────────────────────────────────────────────────────────────────────
app = FastAPI(
    title="Roadmapper: Learning Roadmap API",
    description=(
        "Personalized learning roadmaps.\n"
        "Send a topic, level and style → receive an ordered, laid-out tree of learning nodes."
    ),
    version="1.0.0",
    lifespan=lifespan,
    responses={
        400: {"model": ErrorResponse},
        429: {"model": ErrorResponse},
        500: {"model": ErrorResponse},
        502: {"model": ErrorResponse},
    },
)


# ── Exception Handlers ───────────────────────────────────────────────────────
@app.exception_handler(RoadmapError)
async def roadmap_error_handler(request: Request, exc: RoadmapError):
    logger.warning(f"[{exc.kind.value}] {request.url.path}: {exc.message}")
    body = ErrorResponse(
        status="error",
        kind=exc.kind.value,
        message=exc.message,
        detail=exc.detail,
    )
    return JSONResponse(status_code=exc.status_code, content=body.model_dump())


@app.exception_handler(Exception)
async def global_exception_handler(request: Request, exc: Exception):
    """Catch-all: every unhandled exception returns a clean JSON envelope."""
    logger.error(f"Unhandled exception on {request.url.path}: {exc}", exc_info=True)
    body = ErrorResponse(
        status="error",
        message="An internal server error occurred.",
        detail=str(exc),
    )
    return JSONResponse(status_code=500, content=body.model_dump())


# ── CORS ─────────────────────────────────────────────────────────────────────
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


# ── Health Check ─────────────────────────────────────────────────────────────
@app.get("/", tags=["System"])
async def health_check():
    return {
        "status": "operational",
        "service": "Roadmapper",
        "version": app.version,
        "ai_provider": settings.AI_PROVIDER,
        "environment": settings.ENVIRONMENT,
    }


# ── Routers ──────────────────────────────────────────────────────────────────
app.include_router(roadmap.router, prefix="/api/v1")
app.include_router(auth.router, prefix="/api/v1")
