"""
API FastAPI pour l'analyse de playlists YouTube.

Expose the playlist browsing endpoints, the background playlist analysis
(start + status polling) and the synchronous single-video analysis.
"""
from typing import List
import logging

from fastapi import Depends, FastAPI, HTTPException, Path, Query, Request, Response, status
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from .config import get_settings
from .constants import JOB_ID_MIN_LENGTH, RateLimitScope
from .core.analysis_queue import AnalysisQueue, get_analysis_queue
from .core.auth import Credential, enforce_rate_limit, require_credential
from .core.jobs import JobRegistry, get_job_registry
from .core.workflow import analyze_single_video
from .db import init_db
from .schemas import (
    HealthResponse,
    JobStatusResponse,
    Playlist,
    PlaylistAnalysisRequest,
    PlaylistAnalysisResponse,
    Video,
    VideoAnalysisRequest,
    VideoAnalysisResponse,
)
from .services.analysis_cache import CachedAnalyzer, get_cached_analyzer
from .services.youtube import YouTubeClient, get_youtube_client
from .utils.api_helpers import UpstreamAPIError, VideoNotFoundError
from .utils.async_helpers import run_in_executor
from .utils.youtube import normalize_playlist, normalize_playlist_video

settings = get_settings()

# Configuration du logging
logging.basicConfig(
    level=settings.log_level.upper(),
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)
logger = logging.getLogger(__name__)


app = FastAPI(
    title="YouTube Playlist Analyzer API",
    description="Analyse des vidéos et playlists YouTube avec un modèle de langage, avec cache et file de tâches",
    version="1.0.0"
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.allowed_origins_list,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.on_event("startup")
def on_startup() -> None:
    init_db()


_VALIDATION_MESSAGES = {
    "body": "Invalid request body",
    "path": "Invalid path parameters",
    "query": "Invalid query params",
}


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    """Malformed input is a 400 carrying one issue per failed field."""
    errors = exc.errors()
    issues = [
        {
            "path": list(err.get("loc", ())),
            "message": err.get("msg", ""),
            "code": err.get("type", ""),
        }
        for err in errors
    ]
    location = errors[0]["loc"][0] if errors and errors[0].get("loc") else "body"
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content=jsonable_encoder({
            "detail": _VALIDATION_MESSAGES.get(location, "Bad Request"),
            "issues": issues,
        }),
    )


def _upstream_http_error(error: Exception, context: str) -> HTTPException:
    if isinstance(error, UpstreamAPIError) and error.status_code == status.HTTP_401_UNAUTHORIZED:
        return HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Unauthorized")
    logger.exception("Error %s", context)
    return HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail="Internal Server Error")


@app.get("/")
async def root():
    """Endpoint racine pour vérifier que l'API fonctionne."""
    return {
        "message": "YouTube Playlist Analyzer API",
        "version": "1.0.0",
        "endpoints": {
            "playlists": "/api/youtube/playlists",
            "videos": "/api/youtube/videos?playlistId=...",
            "analyze_playlist": "/api/analysis/playlist",
            "job_status": "/api/analysis/status/{job_id}",
            "analyze_video": "/api/analysis/video",
            "docs": "/docs",
        }
    }


@app.get("/health", response_model=HealthResponse)
async def health_check(
    registry: JobRegistry = Depends(get_job_registry),
    queue: AnalysisQueue = Depends(get_analysis_queue),
):
    """Endpoint de santé pour vérifier que l'API est opérationnelle."""
    return HealthResponse(
        status="healthy",
        openai_configured=bool(get_settings().openai_api_key),
        jobs=len(registry),
        jobs_in_flight=queue.in_flight,
    )


@app.get("/api/youtube/playlists", response_model=List[Playlist])
async def list_playlists(
    credential: Credential = Depends(require_credential),
    youtube: YouTubeClient = Depends(get_youtube_client),
):
    """Playlists of the signed-in user."""
    try:
        items = await run_in_executor(youtube.list_playlists, credential.access_token)
    except Exception as e:
        raise _upstream_http_error(e, "fetching playlists")

    return [playlist for playlist in map(normalize_playlist, items) if playlist is not None]


@app.get("/api/youtube/videos", response_model=List[Video])
async def list_playlist_videos(
    playlist_id: str = Query(..., alias="playlistId", min_length=1),
    credential: Credential = Depends(require_credential),
    youtube: YouTubeClient = Depends(get_youtube_client),
):
    """Videos of a playlist; entries without a video id are skipped."""
    try:
        items = await run_in_executor(youtube.list_playlist_items, credential.access_token, playlist_id)
    except Exception as e:
        raise _upstream_http_error(e, f"fetching videos for playlist {playlist_id}")

    return [video for video in map(normalize_playlist_video, items) if video is not None]


@app.post(
    "/api/analysis/playlist",
    response_model=PlaylistAnalysisResponse,
    status_code=status.HTTP_202_ACCEPTED,
)
async def start_playlist_analysis(
    request: PlaylistAnalysisRequest,
    response: Response,
    credential: Credential = Depends(require_credential),
    queue: AnalysisQueue = Depends(get_analysis_queue),
):
    """
    Lance l'analyse d'une playlist en tâche de fond.

    Returns immediately with the job id; progress is read from
    GET /api/analysis/status/{job_id}.
    """
    enforce_rate_limit(RateLimitScope.PLAYLIST_ANALYSIS, credential, response)
    job_id = queue.enqueue_playlist(credential.access_token, request.playlist_id)
    return PlaylistAnalysisResponse(job_id=job_id)


@app.get("/api/analysis/status/{job_id}", response_model=JobStatusResponse)
async def get_job_status(
    job_id: str = Path(..., min_length=JOB_ID_MIN_LENGTH, pattern=r"^[A-Za-z0-9_-]+$"),
    registry: JobRegistry = Depends(get_job_registry),
):
    """Snapshot of a playlist job; poll until status is done or error."""
    job = registry.get(job_id)
    if job is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Job not found")
    return JobStatusResponse.model_validate(job.model_dump())


@app.post("/api/analysis/video", response_model=VideoAnalysisResponse)
async def analyze_video(
    request: VideoAnalysisRequest,
    response: Response,
    credential: Credential = Depends(require_credential),
    youtube: YouTubeClient = Depends(get_youtube_client),
    analyzer: CachedAnalyzer = Depends(get_cached_analyzer),
):
    """
    Analyse une vidéo YouTube et retourne le résultat (mis en cache).

    Raises:
        HTTPException 404: Si la vidéo n'existe pas sur YouTube
        HTTPException 500: Pour toute autre erreur
    """
    enforce_rate_limit(RateLimitScope.VIDEO_ANALYSIS, credential, response)
    try:
        outcome = await analyze_single_video(credential.access_token, request.video_id, youtube, analyzer)
    except VideoNotFoundError:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Video not found")
    except Exception as e:
        raise _upstream_http_error(e, f"analyzing video {request.video_id}")

    return VideoAnalysisResponse(analysis=outcome.summary, cached=outcome.cached)
