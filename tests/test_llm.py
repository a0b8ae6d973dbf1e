"""Tests for the OpenAI analysis generator."""
from types import SimpleNamespace
from unittest.mock import MagicMock

import pytest

from playlist_analyzer.config import Settings
from playlist_analyzer.services.llm import AnalysisGenerator
from playlist_analyzer.utils.api_helpers import GenerationError


def completion(content, prompt_tokens=5, completion_tokens=7):
    return SimpleNamespace(
        choices=[SimpleNamespace(message=SimpleNamespace(content=content))],
        usage=SimpleNamespace(prompt_tokens=prompt_tokens, completion_tokens=completion_tokens),
    )


@pytest.fixture
def openai_client():
    return MagicMock()


@pytest.fixture
def generator(settings, openai_client):
    return AnalysisGenerator(settings=settings, client=openai_client)


def test_generate_returns_text_and_usage(generator, openai_client):
    openai_client.chat.completions.create.return_value = completion("  An analysis.  ")

    result = generator.generate("Analyze this")

    assert result.text == "An analysis."
    assert result.tokens_in == 5
    assert result.tokens_out == 7
    kwargs = openai_client.chat.completions.create.call_args.kwargs
    assert kwargs["model"] == "gpt-test-model"
    assert kwargs["messages"] == [{"role": "user", "content": "Analyze this"}]


@pytest.mark.parametrize("content", [None, "", "   "])
def test_empty_completion_raises(generator, openai_client, content):
    openai_client.chat.completions.create.return_value = completion(content)

    with pytest.raises(GenerationError):
        generator.generate("Analyze this")


def test_missing_api_key_fails_on_use():
    generator = AnalysisGenerator(settings=Settings(_env_file=None, openai_api_key=None))

    assert generator.model
    with pytest.raises(ValueError, match="OPENAI_API_KEY"):
        generator.generate("Analyze this")
