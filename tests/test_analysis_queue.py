"""Tests for the background playlist analysis queue."""
import asyncio
import json
import time

import pytest

from playlist_analyzer.constants import JobStatus
from playlist_analyzer.core import analysis_queue as analysis_queue_module
from playlist_analyzer.core.analysis_queue import AnalysisQueue
from playlist_analyzer.db import build_engine, init_db
from playlist_analyzer.prompts import build_playlist_video_prompt
from playlist_analyzer.services.analysis_cache import CachedAnalyzer
from playlist_analyzer.services.llm import GenerationResult
from playlist_analyzer.services.storage import AnalysisRepository
from playlist_analyzer.utils.api_helpers import StorageError, UpstreamAPIError

from conftest import count_analyses, playlist_item


def run_job(queue, access_token="test-token", playlist_id="PL123"):
    """Enqueue one job, wait for it to finish, return (initial, final) snapshots."""
    async def scenario():
        job_id = queue.enqueue_playlist(access_token, playlist_id)
        initial = queue.get_job(job_id)
        await queue.wait_idle()
        return initial, queue.get_job(job_id)

    return asyncio.run(scenario())


def test_enqueue_returns_before_any_work(queue, youtube):
    youtube.list_playlist_items.return_value = [playlist_item("vid1")]

    initial, final = run_job(queue)

    assert initial.status == JobStatus.QUEUED
    assert initial.total == 0
    assert initial.completed == 0
    assert final.status == JobStatus.DONE
    assert queue.in_flight == 0


def test_single_video_playlist(queue, youtube, generator, repository):
    youtube.list_playlist_items.return_value = [playlist_item("vid1")]

    _, job = run_job(queue)

    assert job.status == JobStatus.DONE
    assert job.total == 1
    assert job.completed == 1
    assert job.results == {"vid1": "Test analysis"}
    assert job.error is None
    youtube.list_playlist_items.assert_called_once_with("test-token", "PL123")
    generator.generate.assert_called_once_with(build_playlist_video_prompt("vid1"))

    video = repository.get_video_by_youtube_id("vid1")
    stored = repository.find_analysis(queue.analyzer.cache_key(video.id, build_playlist_video_prompt("vid1")))
    assert stored.summary == "Test analysis"
    assert stored.tokens_in == 12
    assert json.loads(stored.insights_json) == {"source": "openai", "path": "playlist"}


def test_cached_analysis_skips_generation(queue, youtube, generator, repository, analyzer):
    video = repository.ensure_video("vid2")
    key = analyzer.cache_key(video.id, build_playlist_video_prompt("vid2"))
    repository.upsert_analysis(key, "Cached analysis")
    youtube.list_playlist_items.return_value = [playlist_item("vid2")]

    _, job = run_job(queue)

    assert job.status == JobStatus.DONE
    assert job.results == {"vid2": "Cached analysis"}
    generator.generate.assert_not_called()


def test_results_keep_playlist_order(queue, youtube, generator):
    youtube.list_playlist_items.return_value = [playlist_item(v) for v in ("c", "a", "b")]
    generator.generate.side_effect = [
        GenerationResult(text=f"summary {n}") for n in range(3)
    ]

    _, job = run_job(queue)

    assert list(job.results) == ["c", "a", "b"]
    assert job.results == {"c": "summary 0", "a": "summary 1", "b": "summary 2"}


def test_malformed_items_are_skipped(queue, youtube, generator):
    youtube.list_playlist_items.return_value = [
        playlist_item("vid1"),
        {"snippet": {"resourceId": {}}},
        None,
        {"snippet": {"title": "no id anywhere"}},
        {"contentDetails": {"videoId": "vid2"}},
    ]

    _, job = run_job(queue)

    assert job.status == JobStatus.DONE
    assert job.total == 2
    assert job.completed == 2
    assert list(job.results) == ["vid1", "vid2"]


def test_repeated_video_counted_once(queue, youtube, generator):
    youtube.list_playlist_items.return_value = [
        playlist_item("vid1"), playlist_item("vid2"), playlist_item("vid1"),
    ]

    _, job = run_job(queue)

    assert job.status == JobStatus.DONE
    assert job.total == job.completed == 2
    assert generator.generate.call_count == 2


def test_empty_playlist_completes(queue, youtube, generator):
    youtube.list_playlist_items.return_value = []

    _, job = run_job(queue)

    assert job.status == JobStatus.DONE
    assert job.total == 0
    assert job.results == {}
    generator.generate.assert_not_called()


def test_generation_failure_keeps_partial_results(queue, youtube, generator):
    youtube.list_playlist_items.return_value = [playlist_item(v) for v in ("v1", "v2", "v3")]
    generator.generate.side_effect = [
        GenerationResult(text="first"),
        RuntimeError("model down"),
        GenerationResult(text="never reached"),
    ]

    _, job = run_job(queue)

    assert job.status == JobStatus.ERROR
    assert job.error == "model down"
    assert job.total == 3
    assert job.completed == 1
    assert job.results == {"v1": "first"}
    assert generator.generate.call_count == 2


def test_cache_write_failure_stops_job(queue, youtube, generator, repository, monkeypatch):
    youtube.list_playlist_items.return_value = [playlist_item(v) for v in ("v1", "v2", "v3")]
    real_upsert = repository.upsert_analysis
    writes = []

    def upsert(key, summary, **kwargs):
        writes.append(key)
        if len(writes) == 2:
            raise StorageError("Failed to upsert analysis")
        return real_upsert(key, summary, **kwargs)

    monkeypatch.setattr(repository, "upsert_analysis", upsert)

    _, job = run_job(queue)

    assert job.status == JobStatus.ERROR
    assert job.error == "Failed to upsert analysis"
    assert job.total == 3
    assert job.completed == 1
    assert job.results == {"v1": "Test analysis"}
    assert generator.generate.call_count == 2


def test_playlist_fetch_failure(queue, youtube, generator):
    youtube.list_playlist_items.side_effect = UpstreamAPIError("YouTube API Failed", service="YouTube")

    _, job = run_job(queue)

    assert job.status == JobStatus.ERROR
    assert job.error == "YouTube API Failed"
    assert job.total == 0
    assert job.completed == 0
    generator.generate.assert_not_called()


def test_error_without_message_uses_fallback(queue, youtube):
    youtube.list_playlist_items.side_effect = RuntimeError()

    _, job = run_job(queue)

    assert job.status == JobStatus.ERROR
    assert job.error == "Unknown error"


def test_progress_is_monotonic(queue, youtube, generator, registry):
    youtube.list_playlist_items.return_value = [playlist_item(f"vid{n}") for n in range(4)]
    observed = []

    def generate(prompt):
        job = registry.list_jobs()[0]
        observed.append((job.status, job.completed, job.total))
        return GenerationResult(text="ok")

    generator.generate.side_effect = generate

    _, job = run_job(queue)

    assert job.completed == 4
    assert [completed for _, completed, _ in observed] == [0, 1, 2, 3]
    assert all(status == JobStatus.RUNNING and total == 4 for status, _, total in observed)


def test_pacing_only_between_videos(queue, youtube, monkeypatch):
    queue.settings = queue.settings.model_copy(update={"job_pacing_delay_seconds": 0.05})
    youtube.list_playlist_items.return_value = [playlist_item(v) for v in ("v1", "v2", "v3")]
    delays = []

    async def fake_sleep(delay):
        delays.append(delay)

    monkeypatch.setattr(analysis_queue_module.asyncio, "sleep", fake_sleep)

    _, job = run_job(queue)

    assert job.status == JobStatus.DONE
    assert delays == [0.05, 0.05]


def test_concurrent_jobs_share_one_cached_analysis(queue, youtube, generator, engine):
    youtube.list_playlist_items.return_value = [playlist_item("vid1")]
    generator.generate.side_effect = [
        GenerationResult(text="first writer"),
        GenerationResult(text="second writer"),
    ]

    async def scenario():
        first = queue.enqueue_playlist("token-a", "PL123")
        second = queue.enqueue_playlist("token-b", "PL123")
        assert first != second
        await queue.wait_idle()
        return queue.get_job(first), queue.get_job(second)

    first, second = asyncio.run(scenario())

    assert first.status == second.status == JobStatus.DONE
    assert first.results["vid1"] == second.results["vid1"]
    assert first.results["vid1"] in {"first writer", "second writer"}
    assert count_analyses(engine) == 1


def test_analyze_video_uses_playlist_prompt(queue, generator):
    summary = asyncio.run(queue.analyze_video("vid9"))

    assert summary == "Test analysis"
    generator.generate.assert_called_once_with(build_playlist_video_prompt("vid9"))


def test_enqueue_requires_running_loop(queue):
    with pytest.raises(RuntimeError):
        queue.enqueue_playlist("token", "PL123")


def test_concurrent_jobs_on_in_memory_database(youtube, generator, registry, settings):
    engine = build_engine("sqlite://")
    init_db(engine)
    analyzer = CachedAnalyzer(AnalysisRepository(engine), generator, settings)
    queue = AnalysisQueue(registry, youtube, analyzer, settings)
    video_ids = [f"vid{n}" for n in range(20)]
    youtube.list_playlist_items.return_value = [playlist_item(v) for v in video_ids]

    def generate(prompt):
        time.sleep(0.002)
        return GenerationResult(text="shared analysis")

    generator.generate.side_effect = generate

    async def scenario():
        job_ids = [queue.enqueue_playlist(f"token-{n}", "PL123") for n in range(8)]
        await queue.wait_idle()
        return [queue.get_job(job_id) for job_id in job_ids]

    try:
        jobs = asyncio.run(scenario())

        assert [(job.status, job.error) for job in jobs] == [(JobStatus.DONE, None)] * 8
        assert all(job.completed == 20 for job in jobs)
        assert all(set(job.results.values()) == {"shared analysis"} for job in jobs)
        assert count_analyses(engine) == 20
    finally:
        engine.dispose()
