"""Pytest configuration and fixtures."""
import os

# Settings are read at import time by the API module.
TEST_ENV_VARS = {
    "DATABASE_URL": "sqlite://",
    "OPENAI_API_KEY": "test-openai-key",
    "OPENAI_MODEL": "gpt-test-model",
    "JOB_PACING_DELAY_SECONDS": "0",
    "LOG_LEVEL": "WARNING",
}
for _key, _value in TEST_ENV_VARS.items():
    os.environ[_key] = _value

from unittest.mock import MagicMock

import pytest
from sqlmodel import Session, select

from playlist_analyzer.config import Settings
from playlist_analyzer.core.analysis_queue import AnalysisQueue
from playlist_analyzer.core.jobs import JobRegistry
from playlist_analyzer.db.session import build_engine, init_db
from playlist_analyzer.models import VideoAnalysis
from playlist_analyzer.services.analysis_cache import CachedAnalyzer
from playlist_analyzer.services.llm import AnalysisGenerator, GenerationResult
from playlist_analyzer.services.storage import AnalysisRepository
from playlist_analyzer.services.youtube import YouTubeClient


class FakeClock:
    """Manually advanced monotonic clock."""

    def __init__(self, start: float = 1000.0):
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


def playlist_item(video_id):
    return {"snippet": {"resourceId": {"videoId": video_id}}}


def count_analyses(engine) -> int:
    with Session(engine) as session:
        return len(session.exec(select(VideoAnalysis)).all())


@pytest.fixture
def settings():
    return Settings(
        _env_file=None,
        database_url="sqlite://",
        openai_api_key="test-openai-key",
        openai_model="gpt-test-model",
        job_pacing_delay_seconds=0,
        prompt_version=1,
    )


@pytest.fixture
def engine(tmp_path):
    """File-backed SQLite so concurrent executor threads get their own connections."""
    db_engine = build_engine(f"sqlite:///{tmp_path / 'cache.db'}")
    init_db(db_engine)
    yield db_engine
    db_engine.dispose()


@pytest.fixture
def repository(engine):
    return AnalysisRepository(engine)


@pytest.fixture
def generator():
    mock = MagicMock(spec=AnalysisGenerator)
    mock.model = "gpt-test-model"
    mock.generate.return_value = GenerationResult(text="Test analysis", tokens_in=12, tokens_out=34)
    return mock


@pytest.fixture
def youtube():
    mock = MagicMock(spec=YouTubeClient)
    mock.list_playlist_items.return_value = []
    return mock


@pytest.fixture
def analyzer(repository, generator, settings):
    return CachedAnalyzer(repository, generator, settings)


@pytest.fixture
def registry():
    return JobRegistry()


@pytest.fixture
def queue(registry, youtube, analyzer, settings):
    return AnalysisQueue(registry, youtube, analyzer, settings)
