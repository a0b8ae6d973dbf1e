"""
Application Constants Package.

All constants are re-exported from this __init__.py for convenience.
You can import either from the main package or specific modules:

    from playlist_analyzer.constants import JobStatus, YOUTUBE_PAGE_SIZE
    from playlist_analyzer.constants.enums import JobStatus
"""

# ============================================================================
# ENUMERATIONS
# ============================================================================

from .enums import (
    JobStatus,
    AnalysisPath,
    RateLimitScope,
)

# ============================================================================
# API & NETWORK
# ============================================================================

from .api import (
    # Pagination
    YOUTUBE_PAGE_SIZE,
    YOUTUBE_MAX_PLAYLISTS,
    YOUTUBE_MAX_PLAYLIST_ITEMS,
    YOUTUBE_WATCH_URL,

    # HTTP edge
    ANONYMOUS_CALLER_KEY,
    CALLER_KEY_LENGTH,
    JOB_ID_MIN_LENGTH,
    VIDEO_ID_MIN_LENGTH,
    UNKNOWN_ERROR_MESSAGE,
)

# ============================================================================
# LLM CONFIGURATION
# ============================================================================

from .llm import (
    OPENAI_MODEL_FAST,
    LLM_TEMP_VIDEO_ANALYSIS,
    ANALYSIS_SOURCE,
)

__all__ = [
    "JobStatus",
    "AnalysisPath",
    "RateLimitScope",
    "YOUTUBE_PAGE_SIZE",
    "YOUTUBE_MAX_PLAYLISTS",
    "YOUTUBE_MAX_PLAYLIST_ITEMS",
    "YOUTUBE_WATCH_URL",
    "ANONYMOUS_CALLER_KEY",
    "CALLER_KEY_LENGTH",
    "JOB_ID_MIN_LENGTH",
    "VIDEO_ID_MIN_LENGTH",
    "UNKNOWN_ERROR_MESSAGE",
    "OPENAI_MODEL_FAST",
    "LLM_TEMP_VIDEO_ANALYSIS",
    "ANALYSIS_SOURCE",
]
