"""Video reference helpers.

Leaf categories reference videos hosted on YouTube. Accepted URL forms:

- https://www.youtube.com/watch?v=VIDEO_ID
- https://youtu.be/VIDEO_ID
- https://www.youtube.com/shorts/VIDEO_ID
- https://www.youtube.com/embed/VIDEO_ID
- https://www.youtube.com/live/VIDEO_ID
"""

import re
from urllib.parse import parse_qs, urlparse

from catalog_admin.errors import ValidationError

YOUTUBE_HOSTS = ("youtube.com", "www.youtube.com", "m.youtube.com")
SHORT_HOSTS = ("youtu.be", "www.youtu.be")
EMBED_BASE = "https://www.youtube.com/embed/"

_VIDEO_ID_RE = re.compile(r"^[A-Za-z0-9_-]+$")
_PATH_PREFIXES = ("shorts", "embed", "live")


def extract_video_id(url: str) -> str | None:
    """Extract the video ID from a YouTube URL.

    Returns:
        Video ID, or None when the URL is not a recognized YouTube link
    """
    parsed = urlparse(url.strip())
    if parsed.scheme not in ("http", "https"):
        return None

    hostname = (parsed.hostname or "").lower()
    segments = [part for part in parsed.path.split("/") if part]

    if hostname in SHORT_HOSTS:
        candidate = segments[0] if len(segments) == 1 else None
    elif hostname in YOUTUBE_HOSTS:
        if segments == ["watch"]:
            candidate = parse_qs(parsed.query).get("v", [None])[0]
        elif len(segments) == 2 and segments[0] in _PATH_PREFIXES:
            candidate = segments[1]
        else:
            candidate = None
    else:
        candidate = None

    if candidate and _VIDEO_ID_RE.match(candidate):
        return candidate
    return None


def validate_video_url(url: str) -> str:
    """Check that url references a YouTube video.

    Returns:
        The URL stripped of surrounding whitespace

    Raises:
        ValidationError: If the URL is not a recognized YouTube link
    """
    if extract_video_id(url) is None:
        raise ValidationError("Please enter a valid YouTube URL")
    return url.strip()


def embed_url(url: str) -> str:
    """Convert a YouTube link to its embeddable form.

    Unrecognized URLs are returned unchanged.
    """
    video_id = extract_video_id(url)
    if video_id is None:
        return url
    return f"{EMBED_BASE}{video_id}"
