"""
Synchronous (request/response) analysis of a single YouTube video.

Unlike playlist jobs, the caller waits for the result. The video snippet is
fetched first so that the prompt carries title and description, then the
analysis goes through the same persistent cache as the playlist jobs.
"""
from datetime import datetime
from typing import Any, Dict, Optional
import logging

from ..constants import AnalysisPath
from ..prompts import build_video_prompt
from ..services.analysis_cache import AnalysisOutcome, CachedAnalyzer, VideoMetadata
from ..services.youtube import YouTubeClient
from ..utils.api_helpers import VideoNotFoundError
from ..utils.async_helpers import run_in_executor

logger = logging.getLogger(__name__)


def _published_epoch(snippet: Dict[str, Any]) -> Optional[int]:
    published = snippet.get("publishedAt")
    if not isinstance(published, str):
        return None
    try:
        return int(datetime.fromisoformat(published.replace("Z", "+00:00")).timestamp())
    except ValueError:
        return None


async def analyze_single_video(
    access_token: str,
    video_id: str,
    youtube: YouTubeClient,
    analyzer: CachedAnalyzer,
) -> AnalysisOutcome:
    """
    Analyze one video and return its (possibly cached) summary.

    Args:
        access_token: OAuth token of the caller
        video_id: YouTube video id
        youtube: YouTube Data API client
        analyzer: Memoized analysis step

    Returns:
        AnalysisOutcome with the stored summary and whether it was cached

    Raises:
        VideoNotFoundError: If YouTube has no such video
        Exception: Any upstream or storage failure, unchanged
    """
    video = await run_in_executor(youtube.get_video, access_token, video_id)
    if video is None:
        raise VideoNotFoundError(video_id)

    snippet = video.get("snippet") or {}
    prompt = build_video_prompt(video_id, snippet.get("title"), snippet.get("description"))
    metadata = VideoMetadata(
        title=snippet.get("title"),
        channel_id=snippet.get("channelId"),
        published_at=_published_epoch(snippet),
    )

    outcome = await analyzer.analyze(video_id, prompt, AnalysisPath.VIDEO, metadata=metadata)
    logger.info("Video %s analyzed (cached=%s)", video_id, outcome.cached)
    return outcome
