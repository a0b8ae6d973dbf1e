"""
Prompts Package.

Centralized location for the analysis prompt templates.
"""

from .analysis import (
    ANALYST_PREAMBLE,
    ANALYSIS_POINTS,
    build_playlist_video_prompt,
    build_video_prompt,
)

__all__ = [
    "ANALYST_PREAMBLE",
    "ANALYSIS_POINTS",
    "build_playlist_video_prompt",
    "build_video_prompt",
]
