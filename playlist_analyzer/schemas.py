from datetime import datetime
from typing import Dict, Optional
from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

from .constants import JobStatus, VIDEO_ID_MIN_LENGTH
from .utils.youtube import normalize_video_reference


class CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class PlaylistAnalysisRequest(CamelModel):
    playlist_id: str = Field(min_length=1)

    @field_validator("playlist_id")
    @classmethod
    def strip_playlist_id(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("playlistId is required")
        return value


class PlaylistAnalysisResponse(CamelModel):
    job_id: str


class VideoAnalysisRequest(CamelModel):
    video_id: str

    @field_validator("video_id")
    @classmethod
    def normalize_video_id(cls, value: str) -> str:
        value = normalize_video_reference(value)
        if len(value) < VIDEO_ID_MIN_LENGTH:
            raise ValueError(f"videoId must be at least {VIDEO_ID_MIN_LENGTH} characters")
        return value


class VideoAnalysisResponse(CamelModel):
    analysis: str
    cached: bool = False


class JobStatusResponse(CamelModel):
    id: str
    status: JobStatus
    created_at: datetime
    updated_at: datetime
    total: int
    completed: int
    results: Dict[str, str]
    error: Optional[str] = None


class Thumbnail(BaseModel):
    url: str
    width: int
    height: int


class Thumbnails(BaseModel):
    default: Optional[Thumbnail] = None
    medium: Optional[Thumbnail] = None
    high: Optional[Thumbnail] = None


class Playlist(CamelModel):
    id: str
    title: str
    item_count: Optional[int] = None
    thumbnails: Thumbnails


class Video(CamelModel):
    id: str
    title: str
    description: Optional[str] = None
    thumbnails: Thumbnails


class HealthResponse(BaseModel):
    status: str
    openai_configured: bool
    jobs: int
    jobs_in_flight: int
