"""
Playlist analysis jobs and their in-memory registry.

The registry owns every Job record for the lifetime of the process (no
eviction). Only the task running a job mutates its record, through the
transition methods below; readers always receive deep copies.
"""
import threading
import uuid
from datetime import datetime, timezone
from functools import lru_cache
from typing import Dict, List, Optional

from pydantic import BaseModel, Field

from ..constants import JobStatus


class InvalidJobTransition(RuntimeError):
    """A mutation that would break the job state machine or its counters."""
    pass


ALLOWED_TRANSITIONS = {
    JobStatus.QUEUED: {JobStatus.RUNNING, JobStatus.ERROR},
    JobStatus.RUNNING: {JobStatus.DONE, JobStatus.ERROR},
    JobStatus.DONE: set(),
    JobStatus.ERROR: set(),
}


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def new_job_id() -> str:
    return uuid.uuid4().hex


class Job(BaseModel):
    """
    Progress and results of one playlist analysis request.

    `total` stays 0 until the playlist is resolved; `completed` always equals
    `len(results)`; `error` is only set once the job is in ERROR.
    """
    id: str = Field(default_factory=new_job_id)
    playlist_id: str
    status: JobStatus = JobStatus.QUEUED
    created_at: datetime = Field(default_factory=_utcnow)
    updated_at: datetime = Field(default_factory=_utcnow)
    total: int = 0
    completed: int = 0
    results: Dict[str, str] = Field(default_factory=dict)
    error: Optional[str] = None


class JobRegistry:
    """Process-wide table of jobs keyed by id."""

    def __init__(self):
        self._jobs: Dict[str, Job] = {}
        self._lock = threading.Lock()

    def __len__(self) -> int:
        return len(self._jobs)

    def __contains__(self, job_id: str) -> bool:
        return job_id in self._jobs

    def create(self, playlist_id: str) -> Job:
        job = Job(playlist_id=playlist_id)
        with self._lock:
            while job.id in self._jobs:
                job.id = new_job_id()
            self._jobs[job.id] = job
            return job.model_copy(deep=True)

    def get(self, job_id: str) -> Optional[Job]:
        """Snapshot of a job, or None for an unknown id."""
        with self._lock:
            job = self._jobs.get(job_id)
            return job.model_copy(deep=True) if job else None

    def list_jobs(self) -> List[Job]:
        with self._lock:
            return [job.model_copy(deep=True) for job in self._jobs.values()]

    # ------------------------------------------------------------------
    # Transitions (job runner only)
    # ------------------------------------------------------------------

    def _require(self, job_id: str) -> Job:
        job = self._jobs.get(job_id)
        if job is None:
            raise KeyError(f"Unknown job {job_id}")
        return job

    @staticmethod
    def _touch(job: Job) -> None:
        # updated_at never moves backwards, even if the wall clock does
        job.updated_at = max(_utcnow(), job.updated_at)

    def _transition(self, job: Job, status: JobStatus) -> None:
        if status not in ALLOWED_TRANSITIONS[job.status]:
            raise InvalidJobTransition(
                f"Job {job.id}: {job.status.value} -> {status.value} is not allowed"
            )
        job.status = status
        self._touch(job)

    def mark_running(self, job_id: str) -> None:
        with self._lock:
            self._transition(self._require(job_id), JobStatus.RUNNING)

    def set_total(self, job_id: str, total: int) -> None:
        with self._lock:
            job = self._require(job_id)
            if job.status is not JobStatus.RUNNING:
                raise InvalidJobTransition(f"Job {job.id}: total can only be set while running")
            if total < job.completed:
                raise InvalidJobTransition(f"Job {job.id}: total {total} below completed {job.completed}")
            job.total = total
            self._touch(job)

    def record_result(self, job_id: str, video_id: str, summary: str) -> None:
        """Store one video's analysis and advance `completed` in the same step."""
        with self._lock:
            job = self._require(job_id)
            if job.status is not JobStatus.RUNNING:
                raise InvalidJobTransition(f"Job {job.id}: results can only be recorded while running")
            if job.completed >= job.total:
                raise InvalidJobTransition(f"Job {job.id}: all {job.total} videos already completed")
            if video_id in job.results:
                raise InvalidJobTransition(f"Job {job.id}: video {video_id} already has a result")
            job.results[video_id] = summary
            job.completed += 1
            self._touch(job)

    def mark_done(self, job_id: str) -> None:
        with self._lock:
            self._transition(self._require(job_id), JobStatus.DONE)

    def mark_error(self, job_id: str, message: str) -> None:
        with self._lock:
            job = self._require(job_id)
            self._transition(job, JobStatus.ERROR)
            job.error = message


@lru_cache(maxsize=1)
def get_job_registry() -> JobRegistry:
    """The registry shared by the queue and the status endpoint."""
    return JobRegistry()
