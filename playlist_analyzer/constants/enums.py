"""
Enumeration classes for the application.

All enum types used throughout the application for type safety and validation.
"""

from enum import Enum


class JobStatus(str, Enum):
    """
    Lifecycle of a playlist analysis job.

    - QUEUED: Job registered, background task not started yet
    - RUNNING: Playlist resolution started, videos being analyzed
    - DONE: Every resolved video has a result (terminal)
    - ERROR: Processing stopped on an exception (terminal)
    """
    QUEUED = "queued"
    RUNNING = "running"
    DONE = "done"
    ERROR = "error"

    @property
    def is_terminal(self) -> bool:
        return self in (JobStatus.DONE, JobStatus.ERROR)


class AnalysisPath(str, Enum):
    """Code path that produced a cached analysis (stored in insights_json)."""
    PLAYLIST = "playlist"
    VIDEO = "video"


class RateLimitScope(str, Enum):
    """Limiter namespaces, one per endpoint family."""
    PLAYLIST_ANALYSIS = "analysis:playlist"
    VIDEO_ANALYSIS = "analysis:video"
