"""
YouTube Data API v3 client.

Authenticates every call with the caller's OAuth access token. List calls
follow `nextPageToken` until the API stops returning one or the configured
item ceiling is reached.
"""
from functools import lru_cache
from typing import Any, Dict, List, Optional
import logging

import requests

from ..config import Settings, get_settings
from ..constants import (
    YOUTUBE_PAGE_SIZE,
    YOUTUBE_MAX_PLAYLISTS,
    YOUTUBE_MAX_PLAYLIST_ITEMS,
)
from ..utils.api_helpers import raise_for_upstream

logger = logging.getLogger(__name__)

SERVICE_NAME = "YouTube"


class YouTubeClient:
    """Thin, stateless wrapper over the playlists, playlistItems and videos resources."""

    def __init__(self, settings: Optional[Settings] = None, session: Optional[requests.Session] = None):
        self.settings = settings or get_settings()
        self.session = session or requests.Session()

    def _get(self, access_token: str, resource: str, params: Dict[str, Any]) -> Dict[str, Any]:
        query = dict(params)
        if self.settings.youtube_api_key:
            query["key"] = self.settings.youtube_api_key

        response = self.session.get(
            f"{self.settings.youtube_api_base_url.rstrip('/')}/{resource}",
            params=query,
            headers={"Authorization": f"Bearer {access_token}", "Accept": "application/json"},
            timeout=self.settings.youtube_timeout,
        )
        raise_for_upstream(response, SERVICE_NAME)
        return response.json()

    def _paginate(
        self,
        access_token: str,
        resource: str,
        params: Dict[str, Any],
        max_items: int,
    ) -> List[Dict[str, Any]]:
        """
        Accumulate `items` across pages.

        Stops when no continuation token is returned or once `max_items`
        items have been collected (the result is truncated to that ceiling).
        """
        items: List[Any] = []
        page_token: Optional[str] = None

        while True:
            page_params = {**params, "maxResults": YOUTUBE_PAGE_SIZE}
            if page_token:
                page_params["pageToken"] = page_token

            data = self._get(access_token, resource, page_params)
            page_items = data.get("items") or []
            items.extend(page_items)
            logger.debug("%s page: %d items (total %d)", resource, len(page_items), len(items))

            page_token = data.get("nextPageToken")
            if not page_token or len(items) >= max_items:
                break

        return items[:max_items]

    def list_playlists(self, access_token: str) -> List[Dict[str, Any]]:
        """Playlists owned by the authenticated user."""
        return self._paginate(
            access_token,
            "playlists",
            {"mine": "true", "part": "snippet,contentDetails"},
            YOUTUBE_MAX_PLAYLISTS,
        )

    def list_playlist_items(self, access_token: str, playlist_id: str) -> List[Dict[str, Any]]:
        """Raw playlistItems entries of a playlist, in playlist order."""
        return self._paginate(
            access_token,
            "playlistItems",
            {"playlistId": playlist_id, "part": "snippet,contentDetails"},
            YOUTUBE_MAX_PLAYLIST_ITEMS,
        )

    def get_video(self, access_token: str, video_id: str) -> Optional[Dict[str, Any]]:
        """Video resource with its snippet, or None when YouTube does not know the id."""
        data = self._get(access_token, "videos", {"id": video_id, "part": "snippet"})
        items = data.get("items") or []
        video = items[0] if items else None
        if not isinstance(video, dict) or not video.get("snippet"):
            return None
        return video


@lru_cache(maxsize=1)
def get_youtube_client() -> YouTubeClient:
    return YouTubeClient()
