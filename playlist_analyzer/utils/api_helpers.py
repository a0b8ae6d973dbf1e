"""
Exceptions and helpers for calls to external collaborators.

Upstream failures are categorised once here so the job runner can record a
readable message and the HTTP layer can map them to status codes.
"""
from typing import Optional
import logging

import requests

logger = logging.getLogger(__name__)


class APIError(Exception):
    """Base exception for collaborator errors."""
    pass


class UpstreamAPIError(APIError):
    """Non-success answer from an upstream HTTP API."""

    def __init__(self, message: str, service: str = "upstream", status_code: Optional[int] = None):
        super().__init__(message)
        self.service = service
        self.status_code = status_code


class RateLimitError(UpstreamAPIError):
    """Upstream quota or rate limit exceeded."""
    pass


class GenerationError(UpstreamAPIError):
    """The language model returned no usable text."""
    pass


class VideoNotFoundError(APIError):
    """The video-hosting API has no video with the requested id."""

    def __init__(self, video_id: str):
        super().__init__(f"Video not found: {video_id}")
        self.video_id = video_id


class StorageError(APIError):
    """A cache row could not be created or reloaded."""
    pass


def _error_reason(response: requests.Response) -> str:
    """Extract the most specific message from a Google-style error body."""
    try:
        payload = response.json()
    except ValueError:
        return response.text[:200] or response.reason or ""

    error = payload.get("error") if isinstance(payload, dict) else None
    if isinstance(error, dict):
        errors = error.get("errors") or []
        reason = errors[0].get("reason") if errors and isinstance(errors[0], dict) else None
        message = error.get("message") or ""
        return f"{message} ({reason})" if reason else message
    if isinstance(error, str):
        return error
    return response.reason or ""


def raise_for_upstream(response: requests.Response, service: str) -> None:
    """
    Raise the matching UpstreamAPIError subclass for a non-2xx response.

    Args:
        response: Response returned by requests
        service: Human-readable collaborator name used in messages

    Raises:
        RateLimitError: On 429, or 403 carrying a quota/rate reason
        UpstreamAPIError: On any other non-2xx status
    """
    if response.ok:
        return

    reason = _error_reason(response)
    message = f"{service} API error {response.status_code}: {reason}".rstrip(": ")
    logger.warning(message)

    if response.status_code == 429 or (
        response.status_code == 403 and ("quota" in reason.lower() or "ratelimit" in reason.lower())
    ):
        raise RateLimitError(message, service=service, status_code=response.status_code)
    raise UpstreamAPIError(message, service=service, status_code=response.status_code)
