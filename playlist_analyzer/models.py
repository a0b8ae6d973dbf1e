import uuid
from datetime import datetime, timezone
from typing import Optional
from sqlalchemy import UniqueConstraint
from sqlmodel import SQLModel, Field


def _new_id() -> str:
    return uuid.uuid4().hex


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class Video(SQLModel, table=True):
    __tablename__ = "videos"

    id: str = Field(default_factory=_new_id, primary_key=True)
    youtube_id: str = Field(index=True, unique=True)
    title: Optional[str] = None
    channel_id: Optional[str] = None
    # unix epoch seconds
    published_at: Optional[int] = None
    owner_id: Optional[str] = None


class VideoAnalysis(SQLModel, table=True):
    __tablename__ = "video_analyses"
    # one analysis per (video, model, prompt)
    __table_args__ = (
        UniqueConstraint("video_id", "model", "prompt_hash", name="video_analyses_unique"),
    )

    id: str = Field(default_factory=_new_id, primary_key=True)
    video_id: str = Field(foreign_key="videos.id", index=True)
    model: str
    prompt_version: int = Field(default=1)
    prompt_hash: str
    summary: str
    # JSON string for portability across SQLite/Postgres
    insights_json: str = Field(default="{}")
    tokens_in: Optional[int] = None
    tokens_out: Optional[int] = None
    created_at: datetime = Field(default_factory=_utcnow)
