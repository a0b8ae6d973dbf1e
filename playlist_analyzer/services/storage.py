"""
Persistent analysis cache.

Stores one analysis per (video, model, prompt hash). Rows are never updated:
writes are idempotent inserts that fall back to re-reading the existing row
when the unique constraint rejects a concurrent duplicate.
"""
import json
import logging
from dataclasses import dataclass
from typing import Any, Dict, Optional

from sqlalchemy.engine import Engine
from sqlalchemy.exc import IntegrityError
from sqlmodel import Session, select

from ..db import engine_lock
from ..models import Video, VideoAnalysis
from ..utils.api_helpers import StorageError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CacheKey:
    """Natural key of a cached analysis."""
    video_id: str
    model: str
    prompt_hash: str


class AnalysisRepository:
    """
    Read/write access to the videos and video_analyses tables.

    Every method opens its own short session and returns detached rows,
    so instances can be shared between threads. Sessions are serialized
    when the engine shares one connection across threads (in-memory SQLite).
    """

    def __init__(self, engine: Engine):
        self.engine = engine

    def get_video_by_youtube_id(self, youtube_id: str) -> Optional[Video]:
        with engine_lock(self.engine), Session(self.engine) as session:
            return session.exec(select(Video).where(Video.youtube_id == youtube_id)).first()

    def ensure_video(
        self,
        youtube_id: str,
        title: Optional[str] = None,
        channel_id: Optional[str] = None,
        published_at: Optional[int] = None,
        owner_id: Optional[str] = None,
    ) -> Video:
        """
        Return the local row for a YouTube video, creating it if absent.

        Idempotent on youtube_id: a concurrent creator losing the race on the
        unique constraint re-reads the winner's row.

        Raises:
            StorageError: If the row can neither be created nor loaded
        """
        existing = self.get_video_by_youtube_id(youtube_id)
        if existing:
            return existing

        with engine_lock(self.engine), Session(self.engine) as session:
            session.add(Video(
                youtube_id=youtube_id,
                title=title,
                channel_id=channel_id,
                published_at=published_at,
                owner_id=owner_id,
            ))
            try:
                session.commit()
            except IntegrityError:
                session.rollback()
                logger.debug("Video %s created concurrently, reloading", youtube_id)

        created = self.get_video_by_youtube_id(youtube_id)
        if created is None:
            raise StorageError("Failed to create or load video row")
        return created

    def find_analysis(self, key: CacheKey) -> Optional[VideoAnalysis]:
        with engine_lock(self.engine), Session(self.engine) as session:
            statement = (
                select(VideoAnalysis)
                .where(VideoAnalysis.video_id == key.video_id)
                .where(VideoAnalysis.model == key.model)
                .where(VideoAnalysis.prompt_hash == key.prompt_hash)
                .limit(1)
            )
            return session.exec(statement).first()

    def upsert_analysis(
        self,
        key: CacheKey,
        summary: str,
        prompt_version: int = 1,
        insights: Optional[Dict[str, Any]] = None,
        tokens_in: Optional[int] = None,
        tokens_out: Optional[int] = None,
    ) -> VideoAnalysis:
        """
        Insert an analysis unless one already exists for the key.

        Never overwrites: the returned row is whatever is stored after the
        attempt, which is the pre-existing row when another writer won.

        Raises:
            StorageError: If no row exists for the key after the insert
        """
        with engine_lock(self.engine), Session(self.engine) as session:
            session.add(VideoAnalysis(
                video_id=key.video_id,
                model=key.model,
                prompt_version=prompt_version,
                prompt_hash=key.prompt_hash,
                summary=summary,
                insights_json=json.dumps(insights or {}, ensure_ascii=False),
                tokens_in=tokens_in,
                tokens_out=tokens_out,
            ))
            try:
                session.commit()
            except IntegrityError:
                session.rollback()
                logger.info(
                    "Analysis already cached for video=%s model=%s, keeping stored row",
                    key.video_id, key.model,
                )

        stored = self.find_analysis(key)
        if stored is None:
            raise StorageError("Failed to upsert analysis")
        return stored
