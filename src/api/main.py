"""FastAPI application for the YouTube Video Summarizer.

Exposes the summarization pipeline over HTTP. Pipeline runs are serialized
because they share one browser session.
"""

import asyncio
import os
from datetime import UTC, datetime
from pathlib import Path

from dotenv import load_dotenv
from fastapi import Depends, FastAPI, HTTPException
from fastapi.middleware.cors import CORSMiddleware
from pydantic import BaseModel, ConfigDict, Field

from src.utils.logging import get_logger
from src.video_summarizer.config import get_config, resolve_provider_config
from src.video_summarizer.pipeline import VideoSummaryPipeline
from src.video_summarizer.schemas import SummaryResponse

logger = get_logger(__name__)

# Check if we're in production
is_production = os.getenv("ENVIRONMENT") == "production"

if not is_production:
    # Development: prioritize .env file
    project_root = Path(__file__).resolve().parent.parent.parent
    dotenv_path = project_root / ".env"
    load_dotenv(dotenv_path, override=True)
else:
    # Production: use cloud platform env vars only
    load_dotenv()

# Pipeline initialized in lifespan
pipeline: VideoSummaryPipeline | None = None
run_lock = asyncio.Lock()


# ==============================================================================
# Lifespan Management
# ==============================================================================


async def lifespan(app: FastAPI):  # type: ignore[misc]
    """Lifecycle manager for the FastAPI application.

    Resolves the AI provider before serving; missing credentials abort
    startup. The browser is closed again on shutdown.
    """
    global pipeline

    logger.info("application_startup_started")

    try:
        config = get_config()
        provider = resolve_provider_config(config)
        pipeline = VideoSummaryPipeline(config)

        logger.info("application_startup_completed", provider=provider.name, model=provider.model)

    except Exception:
        logger.exception("application_startup_failed")
        raise

    yield  # Application runs here

    logger.info("application_shutdown_started")

    if pipeline:
        await pipeline.aclose()
        pipeline = None

    logger.info("application_shutdown_completed")


# ==============================================================================
# FastAPI Application Setup
# ==============================================================================

app = FastAPI(
    title="YouTube Video Summarizer API",
    description="Summarize the latest video of a YouTube channel, or any single video",
    version="1.0.0",
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


# ==============================================================================
# Request Models
# ==============================================================================


class SummarizeRequest(BaseModel):
    """Request model for the combined summarize endpoint."""

    model_config = ConfigDict(populate_by_name=True)

    channel: str | None = None
    video_url: str | None = Field(default=None, alias="videoUrl")


class VideoRequest(BaseModel):
    """Request model for the single-video endpoint."""

    url: str


# ==============================================================================
# Dependencies
# ==============================================================================


def get_pipeline() -> VideoSummaryPipeline:
    """Return the pipeline created at startup.

    Raises:
        HTTPException: If the application has not finished starting.
    """
    if pipeline is None:
        logger.error("pipeline_not_initialized")
        raise HTTPException(status_code=503, detail="Pipeline not initialized")
    return pipeline


# ==============================================================================
# API Endpoints
# ==============================================================================


@app.get("/", response_model=SummaryResponse, response_model_exclude_none=True)
async def root():
    """Service information and available endpoints."""
    return SummaryResponse.ok(
        {
            "message": "YouTube Video Summarizer API",
            "version": app.version,
            "endpoints": {
                "health": "GET /health",
                "summarize": "POST /summarize",
                "summarizeVideo": "POST /summarize/video",
            },
        }
    )


@app.get("/health")
async def health_check():
    """Health check endpoint.

    Returns:
        Health status and timestamp.
    """
    return {
        "status": "healthy",
        "timestamp": datetime.now(UTC).isoformat(),
        "services": {
            "pipeline": pipeline is not None,
            "browser": pipeline is not None and pipeline.session.is_running,
        },
    }


@app.post(
    "/summarize",
    response_model=SummaryResponse,
    response_model_by_alias=True,
    response_model_exclude_none=True,
)
async def summarize(
    request: SummarizeRequest,
    pipeline: VideoSummaryPipeline = Depends(get_pipeline),
):
    """Summarize a specific video, or the latest video of a channel.

    ``videoUrl`` takes precedence when both fields are given.
    """
    if not request.video_url and not request.channel:
        logger.warning("summarize_request_rejected", reason="missing_input")
        return SummaryResponse.fail("Either channel name/URL or video URL is required")

    logger.info(
        "summarize_request_started",
        mode="video" if request.video_url else "channel",
        channel=request.channel,
        video_url=request.video_url,
    )

    async with run_lock:
        if request.video_url:
            response = await pipeline.summarize_video(request.video_url)
        else:
            response = await pipeline.summarize_channel(request.channel)

    logger.info("summarize_request_completed", success=response.success)
    return response


@app.post(
    "/summarize/video",
    response_model=SummaryResponse,
    response_model_by_alias=True,
    response_model_exclude_none=True,
)
async def summarize_video(
    request: VideoRequest,
    pipeline: VideoSummaryPipeline = Depends(get_pipeline),
):
    """Summarize one specific video by URL."""
    logger.info("summarize_video_request_started", video_url=request.url)

    async with run_lock:
        response = await pipeline.summarize_video(request.url)

    logger.info("summarize_video_request_completed", success=response.success)
    return response
