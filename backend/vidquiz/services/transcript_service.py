import logging
from typing import Any, Callable, Dict, List, Optional

from fastapi.concurrency import run_in_threadpool
from youtube_transcript_api import YouTubeTranscriptApi

from ..core.config import Settings
from ..errors import TranscriptUnavailable
from .ytdlp_transcript_service import fetch_transcript_ytdlp

logger = logging.getLogger("vidquiz.services.transcript_service")

# Maps (video_id, language hints or None) to caption fragments. Blocking.
TranscriptFetcher = Callable[[str, Optional[List[str]]], List[str]]

# Demonstration transcript used when both fetch attempts fail
FALLBACK_TRANSCRIPT = """
Welcome to this educational video about the Solar System.
The Solar System consists of the Sun and the objects that orbit it.
There are eight planets in our solar system. Starting from the closest to the Sun, they are Mercury, Venus, Earth, Mars, Jupiter, Saturn, Uranus, and Neptune.
The Sun contains 99.86% of the system's known mass and dominates it gravitationally.
Jupiter and Saturn are gas giants, while Uranus and Neptune are ice giants.
Earth is the only planet known to harbor life. Mars is often called the Red Planet because of its reddish appearance.
"""

SOURCE_YOUTUBE = "youtube"
SOURCE_RETRY = "youtube_retry"
SOURCE_FALLBACK = "fallback"
SOURCE_NONE = "none"


def fetch_transcript_youtube(video_id: str, languages: Optional[List[str]] = None) -> List[str]:
    """
    Fetches caption fragments with youtube-transcript-api.
    With language hints the first matching track is used; without them the
    first listed track (manual before generated) in any language.
    """
    ytt_api = YouTubeTranscriptApi()
    if languages:
        fetched = ytt_api.fetch(video_id, languages=languages)
    else:
        transcript = next(iter(ytt_api.list(video_id)), None)
        if transcript is None:
            raise TranscriptUnavailable(f"No transcripts listed for video {video_id}")
        fetched = transcript.fetch()
    return [snippet.text for snippet in fetched]


def get_transcript_fetcher(settings: Settings) -> TranscriptFetcher:
    if settings.TRANSCRIPT_BACKEND == "yt_dlp":
        return fetch_transcript_ytdlp
    return fetch_transcript_youtube


class TranscriptService:
    """Transcript retrieval with one locale-free retry and a demonstration fallback."""

    def __init__(
        self,
        fetcher: TranscriptFetcher,
        languages: Optional[List[str]] = None,
        fallback_enabled: bool = True,
    ):
        self.fetcher = fetcher
        self.languages = languages
        self.fallback_enabled = fallback_enabled

    async def _fetch_text(self, video_id: str, languages: Optional[List[str]]) -> str:
        fragments = await run_in_threadpool(self.fetcher, video_id, languages)
        return " ".join(fragments)

    async def get_transcript(self, video_id: str) -> Dict[str, Any]:
        """
        Returns {'video_id', 'transcript_text', 'source'}.
        Fetch failures never propagate; the source tells which path produced the text.
        """
        try:
            text = await self._fetch_text(video_id, self.languages)
            return {"video_id": video_id, "transcript_text": text, "source": SOURCE_YOUTUBE}
        except Exception as e:
            logger.error(f"Error fetching transcript for {video_id}: {e}")

        try:
            logger.info(f"Retrying transcript for {video_id} without language hints")
            text = await self._fetch_text(video_id, None)
            return {"video_id": video_id, "transcript_text": text, "source": SOURCE_RETRY}
        except Exception as e:
            logger.error(f"Transcript retry failed for {video_id}: {e}")

        if not self.fallback_enabled:
            return {"video_id": video_id, "transcript_text": "", "source": SOURCE_NONE}

        logger.warning(f"Transcript fetch failed for {video_id}, using demonstration transcript")
        return {"video_id": video_id, "transcript_text": FALLBACK_TRANSCRIPT, "source": SOURCE_FALLBACK}


def build_transcript_service(settings: Settings) -> TranscriptService:
    return TranscriptService(
        fetcher=get_transcript_fetcher(settings),
        languages=settings.transcript_languages,
        fallback_enabled=settings.TRANSCRIPT_FALLBACK_ENABLED,
    )
