"""
Background queue for playlist analyses.

`enqueue_playlist` registers a job and returns its id at once; the work runs
as an independent asyncio task that resolves the playlist, analyzes each
video through the persistent cache, and reports progress only through the
job registry.
"""
import asyncio
import logging
from functools import lru_cache
from typing import Optional, Set

from ..config import Settings, get_settings
from ..constants import AnalysisPath, UNKNOWN_ERROR_MESSAGE
from ..prompts import build_playlist_video_prompt
from ..services.analysis_cache import CachedAnalyzer, get_cached_analyzer
from ..services.youtube import YouTubeClient, get_youtube_client
from ..utils.async_helpers import run_in_executor
from ..utils.youtube import resolve_video_ids
from .jobs import Job, JobRegistry, get_job_registry

logger = logging.getLogger(__name__)


class AnalysisQueue:
    """
    Runs one task per playlist job.

    Args:
        registry: Job table shared with the status endpoint
        youtube: Client used to list the playlist members
        analyzer: Memoized per-video analysis step
        settings: Source of the pacing delay between videos
    """

    def __init__(
        self,
        registry: JobRegistry,
        youtube: YouTubeClient,
        analyzer: CachedAnalyzer,
        settings: Optional[Settings] = None,
    ):
        self.registry = registry
        self.youtube = youtube
        self.analyzer = analyzer
        self.settings = settings or get_settings()
        # strong references so running tasks are not garbage collected
        self._tasks: Set[asyncio.Task] = set()

    @property
    def in_flight(self) -> int:
        return len(self._tasks)

    def enqueue_playlist(self, access_token: str, playlist_id: str) -> str:
        """
        Register a job for a playlist and schedule its processing.

        Must be called from a running event loop. Returns the job id without
        waiting for any of the work.
        """
        job = self.registry.create(playlist_id)
        task = asyncio.get_running_loop().create_task(
            self._run_job(job.id, access_token, playlist_id),
            name=f"playlist-job-{job.id}",
        )
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)
        logger.info("Job %s queued for playlist %s", job.id, playlist_id)
        return job.id

    def get_job(self, job_id: str) -> Optional[Job]:
        return self.registry.get(job_id)

    async def wait_idle(self) -> None:
        """Wait until every job scheduled so far reached a terminal state."""
        while self._tasks:
            await asyncio.gather(*list(self._tasks), return_exceptions=True)

    async def analyze_video(self, video_id: str) -> str:
        prompt = build_playlist_video_prompt(video_id)
        outcome = await self.analyzer.analyze(video_id, prompt, AnalysisPath.PLAYLIST)
        return outcome.summary

    async def _run_job(self, job_id: str, access_token: str, playlist_id: str) -> None:
        try:
            self.registry.mark_running(job_id)

            items = await run_in_executor(self.youtube.list_playlist_items, access_token, playlist_id)
            video_ids = resolve_video_ids(items)
            self.registry.set_total(job_id, len(video_ids))
            logger.info(
                "Job %s: playlist %s resolved to %d videos (%d raw items)",
                job_id, playlist_id, len(video_ids), len(items or []),
            )

            delay = self.settings.job_pacing_delay_seconds
            for index, video_id in enumerate(video_ids):
                summary = await self.analyze_video(video_id)
                self.registry.record_result(job_id, video_id, summary)

                # Small delay to be polite with the model API
                if delay and index < len(video_ids) - 1:
                    await asyncio.sleep(delay)

            self.registry.mark_done(job_id)
            logger.info("Job %s done (%d videos)", job_id, len(video_ids))

        except Exception as e:
            logger.exception("Job %s failed", job_id)
            self.registry.mark_error(job_id, str(e) or UNKNOWN_ERROR_MESSAGE)


@lru_cache(maxsize=1)
def get_analysis_queue() -> AnalysisQueue:
    return AnalysisQueue(get_job_registry(), get_youtube_client(), get_cached_analyzer())
