"""Searches stock video footage on Pexels for chunk keywords."""

import logging
from typing import Any, Dict, List, Optional

import requests

from .exceptions import ConfigurationError, VideoSearchError
from .interfaces import ClipSearch
from .models import VideoClip

logger = logging.getLogger(__name__)

PEXELS_VIDEO_SEARCH_URL = "https://api.pexels.com/videos/search"
ORIENTATIONS = ("landscape", "portrait", "square")


def _best_video_file(files: List[Dict[str, Any]]) -> Optional[Dict[str, Any]]:
    """Picks the highest-resolution MP4 rendition, falling back to any file with a link."""
    candidates = [f for f in files if f.get("link")]
    mp4 = [f for f in candidates if f.get("file_type") == "video/mp4"]
    if mp4:
        candidates = mp4
    if not candidates:
        return None
    return max(candidates, key=lambda f: (f.get("width") or 0) * (f.get("height") or 0))


def parse_search_response(data: Dict[str, Any]) -> List[VideoClip]:
    """Converts a Pexels /videos/search payload into VideoClip descriptors."""
    clips = []
    for video in data.get("videos", []):
        best = _best_video_file(video.get("video_files", []))
        if best is None:
            logger.debug(f"Skipping Pexels video {video.get('id')} without downloadable files")
            continue
        user = video.get("user") or {}
        clips.append(VideoClip(
            id=str(video.get("id")),
            url=best["link"],
            page_url=video.get("url"),
            thumbnail=video.get("image"),
            duration=float(video["duration"]) if video.get("duration") is not None else None,
            width=best.get("width") or video.get("width"),
            height=best.get("height") or video.get("height"),
            attribution=user.get("name"),
            attribution_url=user.get("url"),
        ))
    return clips


class PexelsClient(ClipSearch):
    """Thin client for the Pexels video search API."""

    def __init__(
        self,
        api_key: str,
        timeout: float = 20,
        orientation: Optional[str] = None,
        session: Optional[requests.Session] = None
    ):
        """
        Args:
            api_key: Pexels API key, sent in the Authorization header.
            timeout: Request timeout in seconds.
            orientation: Optional "landscape", "portrait" or "square" filter.
            session: Optional pre-built session (connection reuse, testing).

        Raises:
            ConfigurationError: If the API key is missing or the orientation is unknown.
        """
        if not api_key:
            raise ConfigurationError("A Pexels API key is required for clip search.")
        if orientation is not None and orientation not in ORIENTATIONS:
            raise ConfigurationError(f"Invalid orientation '{orientation}'. Choose one of {', '.join(ORIENTATIONS)}.")
        self.timeout = timeout
        self.orientation = orientation
        self.session = session or requests.Session()
        self.session.headers.update({"Authorization": api_key})

    def search(self, query: str, per_page: int = 10) -> List[VideoClip]:
        """
        Searches Pexels for videos matching the query.

        Raises:
            ValueError: If the query is blank.
            VideoSearchError: If the request fails or the response is not valid JSON.
        """
        query = query.strip()
        if not query:
            raise ValueError("Search query cannot be empty.")

        params: Dict[str, Any] = {"query": query, "per_page": per_page}
        if self.orientation:
            params["orientation"] = self.orientation

        try:
            response = self.session.get(PEXELS_VIDEO_SEARCH_URL, params=params, timeout=self.timeout)
            response.raise_for_status()
            data = response.json()
        except requests.RequestException as e:
            logger.error(f"Pexels request failed for query '{query}': {e}")
            raise VideoSearchError(f"Pexels search failed for '{query}': {e}") from e
        except ValueError as e:
            raise VideoSearchError(f"Pexels returned invalid JSON for '{query}': {e}") from e

        try:
            clips = parse_search_response(data)
        except (ValueError, TypeError, KeyError, AttributeError) as e:
            logger.error(f"Unexpected Pexels payload for query '{query}': {e}")
            raise VideoSearchError(f"Pexels returned an unexpected payload for '{query}': {e}") from e

        logger.info(f"Pexels query '{query}' returned {len(clips)} clips")
        return clips
