"""
Parsing helpers for YouTube URLs and YouTube Data API payloads.

API responses are loosely shaped: any nested field may be missing or null.
Every helper here returns None (or drops the item) instead of raising.
"""
import re
from typing import Any, Dict, Iterable, List, Optional
from urllib.parse import urlparse, parse_qs


def extract_video_id(youtube_url: str) -> Optional[str]:
    parsed = urlparse(youtube_url)
    if parsed.hostname in {"www.youtube.com", "youtube.com", "m.youtube.com"}:
        qs = parse_qs(parsed.query)
        if "v" in qs:
            return qs["v"][0]
        # short urls like /embed/<id> or /shorts/<id>
        match = re.match(r"^/(?:embed|shorts)/([\w-]{11})$", parsed.path)
        if match:
            return match.group(1)
    if parsed.hostname in {"youtu.be"}:
        match = re.match(r"^/([\w-]{11})$", parsed.path)
        if match:
            return match.group(1)
    return None


def normalize_video_reference(value: str) -> str:
    """Accept either a bare video id or a watch URL and return the id."""
    value = value.strip()
    if value.startswith(("http://", "https://")):
        return extract_video_id(value) or value
    return value


def _dig(data: Any, *path: str) -> Any:
    for key in path:
        if not isinstance(data, dict):
            return None
        data = data.get(key)
    return data


def _non_empty_str(value: Any) -> Optional[str]:
    if isinstance(value, str) and value:
        return value
    return None


def extract_playlist_item_video_id(item: Any) -> Optional[str]:
    """
    Video id of one playlistItems entry, or None when the item has none.

    Lookup order: snippet.resourceId.videoId, contentDetails.videoId, id.
    """
    if not isinstance(item, dict):
        return None
    return (
        _non_empty_str(_dig(item, "snippet", "resourceId", "videoId"))
        or _non_empty_str(_dig(item, "contentDetails", "videoId"))
        or _non_empty_str(item.get("id"))
    )


def resolve_video_ids(items: Optional[Iterable[Any]]) -> List[str]:
    """
    Ordered, de-duplicated video ids of a raw playlistItems list.

    Malformed entries are dropped silently; a repeated video keeps its first
    position only.
    """
    video_ids: List[str] = []
    seen = set()
    for item in items or []:
        video_id = extract_playlist_item_video_id(item)
        if video_id is None or video_id in seen:
            continue
        seen.add(video_id)
        video_ids.append(video_id)
    return video_ids


def to_thumbnail(raw: Any) -> Optional[Dict[str, Any]]:
    """Keep a thumbnail only when url, width and height are all present."""
    if not isinstance(raw, dict):
        return None
    url, width, height = raw.get("url"), raw.get("width"), raw.get("height")
    if not url or not width or not height:
        return None
    return {"url": url, "width": width, "height": height}


def to_thumbnails(snippet: Any) -> Dict[str, Optional[Dict[str, Any]]]:
    thumbnails = _dig(snippet, "thumbnails") or {}
    return {size: to_thumbnail(thumbnails.get(size)) for size in ("default", "medium", "high")}


def normalize_playlist(item: Any) -> Optional[Dict[str, Any]]:
    if not isinstance(item, dict) or not _non_empty_str(item.get("id")):
        return None
    snippet = item.get("snippet") or {}
    return {
        "id": item["id"],
        "title": _dig(snippet, "title") or "",
        "item_count": _dig(item, "contentDetails", "itemCount"),
        "thumbnails": to_thumbnails(snippet),
    }


def normalize_playlist_video(item: Any) -> Optional[Dict[str, Any]]:
    video_id = extract_playlist_item_video_id(item)
    if video_id is None:
        return None
    snippet = item.get("snippet") or {}
    return {
        "id": video_id,
        "title": _dig(snippet, "title") or "",
        "description": _dig(snippet, "description") or None,
        "thumbnails": to_thumbnails(snippet),
    }
