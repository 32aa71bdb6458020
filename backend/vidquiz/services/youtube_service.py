import re
from typing import Optional

VIDEO_ID_LENGTH = 11

# youtu.be/<id>, /v/<id>, /u/<x>/<id>, /embed/<id>, watch?v=<id>, &v=<id>
VIDEO_URL_PATTERN = re.compile(r"^.*(youtu.be/|v/|u/\w/|embed/|watch\?v=|&v=)([^#&?]*).*", re.ASCII)


def extract_video_id(url: str) -> Optional[str]:
    """
    Extracts the 11-character video ID from a YouTube URL.
    Returns None when the URL does not match or the captured ID has the wrong length.
    """
    match = VIDEO_URL_PATTERN.match(url)
    if match and len(match.group(2)) == VIDEO_ID_LENGTH:
        return match.group(2)
    return None


def watch_url(video_id: str) -> str:
    return f"https://www.youtube.com/watch?v={video_id}"
