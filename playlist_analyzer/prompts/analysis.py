"""
Video analysis prompt templates.

The rendered prompt text is hashed into the cache key, so any edit to these
templates must come with a bump of the PROMPT_VERSION setting.
"""
from typing import Optional

from ..constants import YOUTUBE_WATCH_URL

ANALYST_PREAMBLE = (
    "Act as a world-class strategic analyst. Your analysis should be deep, "
    "insightful, and structured for clarity."
)

ANALYSIS_POINTS = """1) Core thesis (1 sentence)
2) 3-5 key pillars supporting the thesis
3) Hook deconstruction (quote + psychological trigger)
4) Most tweetable moment as a blockquote
5) Audience & purpose"""


def build_playlist_video_prompt(video_id: str) -> str:
    """Prompt used by playlist jobs, built from the video id alone."""
    return (
        f"{ANALYST_PREAMBLE}\n\n"
        f"Analyze this video and provide:\n{ANALYSIS_POINTS}\n\n"
        f"Video: {YOUTUBE_WATCH_URL.format(video_id=video_id)}"
    )


def build_video_prompt(video_id: str, title: Optional[str], description: Optional[str]) -> str:
    """Prompt used by the single-video endpoint, enriched with snippet metadata."""
    return (
        f"{ANALYST_PREAMBLE}\n\n"
        f"Video: {YOUTUBE_WATCH_URL.format(video_id=video_id)}\n"
        f"Title: {title or '(untitled)'}\n"
        f"Description: {description or '(no description)'}\n\n"
        f"Provide:\n{ANALYSIS_POINTS}\n"
    )
