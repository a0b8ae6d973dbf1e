"""
API and Network Configuration Constants.

Pagination policy for the YouTube Data API and identifiers used at the HTTP edge.
"""

# ============================================================================
# YOUTUBE PAGINATION
# ============================================================================

YOUTUBE_PAGE_SIZE = 50
"""maxResults sent with every list call (API maximum)."""

YOUTUBE_MAX_PLAYLISTS = 500
"""Hard ceiling on playlists accumulated across pages."""

YOUTUBE_MAX_PLAYLIST_ITEMS = 1000
"""Hard ceiling on playlist members accumulated across pages."""

YOUTUBE_WATCH_URL = "https://www.youtube.com/watch?v={video_id}"
"""Canonical watch URL embedded in analysis prompts."""


# ============================================================================
# HTTP EDGE
# ============================================================================

ANONYMOUS_CALLER_KEY = "anonymous"
"""Rate-limit key used when no caller identity can be derived."""

CALLER_KEY_LENGTH = 16
"""Number of hex chars of the token fingerprint used as caller key."""

JOB_ID_MIN_LENGTH = 8
"""Shortest job identifier accepted by the status endpoint."""

VIDEO_ID_MIN_LENGTH = 5
"""Shortest video identifier accepted by the single-video endpoint."""

UNKNOWN_ERROR_MESSAGE = "Unknown error"
"""Fallback job error when an exception carries no message."""
