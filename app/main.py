"""Main FastAPI application."""

import logging
import os
import time
import psutil
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from app.core.config import get_settings
from app.api.routes import analyses, health, kpis
from src.analytics import NarrativeConfigurationError

# Get settings
settings = get_settings()

logging.basicConfig(
    level=settings.log_level.upper(),
    format="%(asctime)s %(levelname)s [%(name)s] %(message)s"
)
logger = logging.getLogger(__name__)

# Initialize FastAPI app
app = FastAPI(
    title=settings.app_name,
    description=settings.app_description,
    version=settings.app_version,
    docs_url="/docs",
    redoc_url="/redoc",
)

# Configure CORS
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.allowed_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


# Performance logging middleware
@app.middleware("http")
async def log_performance(request: Request, call_next):
    """Log request execution time and memory usage."""
    process = psutil.Process(os.getpid())

    start_time = time.perf_counter()
    start_memory = process.memory_info().rss / 1024 / 1024  # MB

    response = await call_next(request)

    duration_ms = (time.perf_counter() - start_time) * 1000
    end_memory = process.memory_info().rss / 1024 / 1024  # MB
    memory_used = end_memory - start_memory

    level = logging.WARNING if duration_ms >= 500 else logging.INFO
    logger.log(
        level,
        "[PERF] %-6s %-40s | %d | %7.2fms | %+.2fMB | RSS: %.1fMB",
        request.method,
        request.url.path,
        response.status_code,
        duration_ms,
        memory_used,
        end_memory,
    )

    return response


@app.exception_handler(NarrativeConfigurationError)
async def narrative_unavailable(request: Request, exc: NarrativeConfigurationError):
    """AI narratives need a configured Gemini key."""
    logger.warning("Narrative request rejected: %s", exc)
    return JSONResponse(status_code=503, content={"detail": str(exc)})


# Event handlers
@app.on_event("startup")
async def startup_event():
    logger.info("%s v%s started", settings.app_name, settings.app_version)
    logger.info("API docs available at /docs")
    if not settings.gemini_api_key:
        logger.warning("GEMINI_API_KEY is not set; narrative endpoints will return 503")


@app.on_event("shutdown")
async def shutdown_event():
    logger.info("%s shutting down", settings.app_name)


# Include routers
app.include_router(health.router, tags=["Health"])
app.include_router(kpis.router, prefix="/api", tags=["KPIs"])
app.include_router(analyses.router, prefix="/api", tags=["Analyses"])
