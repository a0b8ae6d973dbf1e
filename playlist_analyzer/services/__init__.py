"""
Services Package.

Collaborators of the analysis core: persistent cache, YouTube Data API
client, OpenAI generator, and the memoized analysis step built on them.
"""

from .storage import AnalysisRepository, CacheKey
from .youtube import YouTubeClient, get_youtube_client
from .llm import AnalysisGenerator, GenerationResult
from .analysis_cache import AnalysisOutcome, CachedAnalyzer, VideoMetadata, get_cached_analyzer

__all__ = [
    "AnalysisRepository",
    "CacheKey",
    "YouTubeClient",
    "get_youtube_client",
    "AnalysisGenerator",
    "GenerationResult",
    "AnalysisOutcome",
    "CachedAnalyzer",
    "VideoMetadata",
    "get_cached_analyzer",
]
