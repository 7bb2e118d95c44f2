"""
Main FastAPI application for the rail control center.
"""
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.middleware.gzip import GZipMiddleware
from fastapi.responses import JSONResponse
import asyncio
import logging
import time
from contextlib import asynccontextmanager, suppress

from app.core.config import settings
from app.core.state import create_dashboard_state
from app.api.routes import trains, scheduling, predictions, metrics
from app.services.metrics.simulator import run_ticker

# Configure logging
logging.basicConfig(
    level=settings.log_level,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan manager."""
    logger.info("Starting rail control center...")

    if not hasattr(app.state, "dashboard"):
        app.state.dashboard = create_dashboard_state(settings)
    if not settings.ai_model_endpoint:
        logger.warning("AI_MODEL_ENDPOINT is not set; recommendations will be synthetic")

    ticker = asyncio.create_task(
        run_ticker(app.state.dashboard.metrics, settings.metrics_tick_seconds)
    )

    yield

    ticker.cancel()
    with suppress(asyncio.CancelledError):
        await ticker
    logger.info("Shutting down rail control center...")


# Create FastAPI application
app = FastAPI(
    title=settings.project_name,
    version=settings.version,
    description="Rail traffic control center with AI scheduling recommendations",
    docs_url="/docs",
    redoc_url="/redoc",
    openapi_url="/openapi.json",
    lifespan=lifespan
)

# Add middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.add_middleware(GZipMiddleware, minimum_size=1000)


# Request timing middleware
@app.middleware("http")
async def add_process_time_header(request: Request, call_next):
    """Add processing time to response headers."""
    start_time = time.time()
    response = await call_next(request)
    process_time = time.time() - start_time
    response.headers["X-Process-Time"] = str(process_time)
    return response


# Exception handlers
@app.exception_handler(Exception)
async def global_exception_handler(request: Request, exc: Exception):
    """Global exception handler."""
    logger.error(f"Global exception on {request.url}: {str(exc)}")
    return JSONResponse(
        status_code=500,
        content={
            "detail": "Internal server error",
            "path": str(request.url),
            "timestamp": time.time()
        }
    )


# Include API routes
app.include_router(
    trains.router,
    prefix=f"{settings.api_v1_prefix}/trains",
    tags=["trains"]
)

app.include_router(
    scheduling.router,
    prefix=f"{settings.api_v1_prefix}/scheduling",
    tags=["scheduling"]
)

app.include_router(
    predictions.router,
    prefix=f"{settings.api_v1_prefix}/predictions",
    tags=["predictions"]
)

app.include_router(
    metrics.router,
    prefix=f"{settings.api_v1_prefix}/metrics",
    tags=["metrics"]
)


# Health check endpoints
@app.get("/health")
async def health_check():
    """Health check endpoint."""
    return {
        "status": "healthy",
        "timestamp": time.time(),
        "version": settings.version,
        "ai_model_configured": bool(settings.ai_model_endpoint)
    }


@app.get("/")
async def root():
    """Root endpoint with API information."""
    return {
        "message": "Rail Control Center - AI Scheduling",
        "version": settings.version,
        "docs_url": "/docs",
        "health_url": "/health",
        "api_prefix": settings.api_v1_prefix
    }


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(
        "app.main:app",
        host="0.0.0.0",
        port=8000,
        reload=True,
        log_level="info"
    )
