import json
import logging
import os
import re
import tempfile
from typing import Any, Dict, List, Optional, Tuple

import webvtt
import yt_dlp

from ..errors import TranscriptUnavailable
from .youtube_service import watch_url

logger = logging.getLogger("vidquiz.services.ytdlp_transcript_service")

SUBTITLE_FORMATS = ("json3", "vtt")


def _pick_track(info: Dict[str, Any], languages: Optional[List[str]]) -> Tuple[str, bool]:
    """
    Choose a subtitle language from the extracted info.
    Manual subtitles win over automatic captions. Without language hints the
    first available track is used.
    Returns (language, is_automatic).
    """
    manual = info.get("subtitles") or {}
    automatic = info.get("automatic_captions") or {}

    if languages:
        for lang in languages:
            if lang in manual:
                return lang, False
            if lang in automatic:
                return lang, True
        raise TranscriptUnavailable(f"No subtitles in {languages} for video {info.get('id')}")

    if manual:
        return next(iter(manual)), False
    if automatic:
        return next(iter(automatic)), True
    raise TranscriptUnavailable(f"No subtitles available for video {info.get('id')}")


def _parse_json3(path: str) -> List[str]:
    with open(path, "r", encoding="utf-8") as f:
        data = json.load(f)

    fragments = []
    for event in data.get("events", []):
        text = "".join(seg.get("utf8", "") for seg in event.get("segs") or [])
        text = re.sub(r"\s+", " ", text).strip()
        if text:
            fragments.append(text)
    return fragments


def _parse_vtt(path: str) -> List[str]:
    fragments = []
    for caption in webvtt.read(path):
        text = re.sub(r"<[^>]+>", "", caption.text).strip()
        if text:
            fragments.append(text)
    return fragments


def fetch_transcript_ytdlp(video_id: str, languages: Optional[List[str]] = None) -> List[str]:
    """
    Fetches caption fragments with yt-dlp by downloading the subtitle file.
    Blocking; callers run it in the threadpool.
    """
    video_url = watch_url(video_id)

    with tempfile.TemporaryDirectory() as temp_dir:
        ydl_opts = {
            "skip_download": True,
            "subtitlesformat": "/".join(SUBTITLE_FORMATS),
            "outtmpl": os.path.join(temp_dir, f"{video_id}.%(ext)s"),
            "quiet": True,
            "no_warnings": True,
        }

        try:
            with yt_dlp.YoutubeDL(ydl_opts) as ydl:
                info = ydl.extract_info(video_url, download=False)

            lang, automatic = _pick_track(info, languages)
            ydl_opts.update({
                "subtitleslangs": [lang],
                "writesubtitles": not automatic,
                "writeautomaticsub": automatic,
            })
            with yt_dlp.YoutubeDL(ydl_opts) as ydl:
                ydl.download([video_url])
        except yt_dlp.utils.DownloadError as e:
            raise TranscriptUnavailable(f"Failed to download subtitles: {e}") from e

        subtitle_files = sorted(f for f in os.listdir(temp_dir) if f.endswith(SUBTITLE_FORMATS))
        if not subtitle_files:
            raise TranscriptUnavailable(f"Subtitle file not created for video {video_id}")

        subtitle_path = os.path.join(temp_dir, subtitle_files[0])
        logger.info(f"Parsing subtitles for {video_id} ({lang}, automatic={automatic})")

        if subtitle_path.endswith(".json3"):
            fragments = _parse_json3(subtitle_path)
        else:
            fragments = _parse_vtt(subtitle_path)

    if not fragments:
        raise TranscriptUnavailable("No transcript content found in subtitle file")
    return fragments
