"""
Generation of video analyses with the OpenAI chat completions API.
"""
from dataclasses import dataclass
from typing import Optional
import logging

import httpx
from openai import OpenAI

from ..config import Settings, get_settings
from ..constants import LLM_TEMP_VIDEO_ANALYSIS
from ..utils.api_helpers import GenerationError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class GenerationResult:
    text: str
    tokens_in: Optional[int] = None
    tokens_out: Optional[int] = None


class AnalysisGenerator:
    """
    Blocking wrapper around the OpenAI client.

    The client is created lazily so that a missing API key only fails the
    calls that actually need the model.
    """

    def __init__(self, settings: Optional[Settings] = None, client: Optional[OpenAI] = None):
        self.settings = settings or get_settings()
        self._client = client

    @property
    def model(self) -> str:
        return self.settings.openai_model

    def _get_client(self) -> OpenAI:
        if self._client is None:
            if not self.settings.openai_api_key:
                raise ValueError("OPENAI_API_KEY not configured in environment variables")
            http_client = httpx.Client(timeout=self.settings.openai_timeout)
            self._client = OpenAI(api_key=self.settings.openai_api_key, http_client=http_client)
        return self._client

    def generate(self, prompt: str) -> GenerationResult:
        """
        Generate the analysis text for a prompt.

        Raises:
            ValueError: If no OpenAI API key is configured
            GenerationError: If the model answers with empty content
        """
        client = self._get_client()
        response = client.chat.completions.create(
            model=self.model,
            messages=[{"role": "user", "content": prompt}],
            temperature=LLM_TEMP_VIDEO_ANALYSIS,
        )

        text = (response.choices[0].message.content or "").strip() if response.choices else ""
        if not text:
            raise GenerationError("Model returned an empty analysis", service="OpenAI")

        usage = getattr(response, "usage", None)
        return GenerationResult(
            text=text,
            tokens_in=getattr(usage, "prompt_tokens", None),
            tokens_out=getattr(usage, "completion_tokens", None),
        )
