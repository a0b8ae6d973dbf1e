"""
LLM (Large Language Model) Configuration Constants.

Model names, temperature settings, and other LLM-specific parameters.
"""

OPENAI_MODEL_FAST = "gpt-4o-mini"
"""Default model for video analyses."""

LLM_TEMP_VIDEO_ANALYSIS = 0.4
"""Temperature for video analysis generation."""

ANALYSIS_SOURCE = "openai"
"""Provider recorded in the insights of every cached analysis."""
