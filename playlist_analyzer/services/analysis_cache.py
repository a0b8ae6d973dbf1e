"""
Memoized video analysis.

Looks a (video, model, prompt) triple up in the persistent cache and only
calls the model on a miss. Both the playlist jobs and the single-video
endpoint go through `CachedAnalyzer.analyze`, so two paths asking for the
same prompt converge on one stored summary.
"""
from dataclasses import dataclass
from functools import lru_cache
from typing import Optional
import logging

from ..config import Settings, get_settings
from ..constants import AnalysisPath, ANALYSIS_SOURCE
from ..db import get_engine
from ..utils.async_helpers import run_in_executor
from ..utils.hashing import compute_prompt_hash
from .llm import AnalysisGenerator
from .storage import AnalysisRepository, CacheKey

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class AnalysisOutcome:
    summary: str
    cached: bool


@dataclass
class VideoMetadata:
    """Optional snippet fields stored when the video row is first created."""
    title: Optional[str] = None
    channel_id: Optional[str] = None
    published_at: Optional[int] = None
    owner_id: Optional[str] = None


class CachedAnalyzer:
    def __init__(
        self,
        repository: AnalysisRepository,
        generator: AnalysisGenerator,
        settings: Optional[Settings] = None,
    ):
        self.repository = repository
        self.generator = generator
        self.settings = settings or get_settings()

    def cache_key(self, video_row_id: str, prompt: str) -> CacheKey:
        model = self.generator.model
        return CacheKey(
            video_id=video_row_id,
            model=model,
            prompt_hash=compute_prompt_hash(model, prompt, self.settings.prompt_version),
        )

    async def analyze(
        self,
        youtube_id: str,
        prompt: str,
        path: AnalysisPath,
        metadata: Optional[VideoMetadata] = None,
    ) -> AnalysisOutcome:
        """
        Return the stored analysis for a prompt, generating it on a cache miss.

        Every step (video row, lookup, generation, insert) is awaited in the
        executor. Failures propagate unchanged and nothing is retried.
        """
        metadata = metadata or VideoMetadata()
        video = await run_in_executor(
            self.repository.ensure_video,
            youtube_id,
            title=metadata.title,
            channel_id=metadata.channel_id,
            published_at=metadata.published_at,
            owner_id=metadata.owner_id,
        )
        key = self.cache_key(video.id, prompt)

        cached = await run_in_executor(self.repository.find_analysis, key)
        if cached is not None:
            logger.debug("Cache hit for video %s (%s)", youtube_id, path.value)
            return AnalysisOutcome(summary=cached.summary, cached=True)

        logger.debug("Cache miss for video %s (%s), generating", youtube_id, path.value)
        result = await run_in_executor(self.generator.generate, prompt)

        stored = await run_in_executor(
            self.repository.upsert_analysis,
            key,
            result.text,
            prompt_version=self.settings.prompt_version,
            insights={"source": ANALYSIS_SOURCE, "path": path.value},
            tokens_in=result.tokens_in,
            tokens_out=result.tokens_out,
        )
        return AnalysisOutcome(summary=stored.summary, cached=False)


@lru_cache(maxsize=1)
def get_cached_analyzer() -> CachedAnalyzer:
    return CachedAnalyzer(AnalysisRepository(get_engine()), AnalysisGenerator())
