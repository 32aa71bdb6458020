import json
import logging
from typing import Any, Dict, Optional, Tuple

from fastapi import Depends

from ..core.config import Settings, get_settings
from ..errors import BadRequest, GenerationFailed, InternalError, NotFound
from ..schemas.quiz import QuizOptions
from .llm_client import LLMProvider, clean_json_response, get_llm_provider
from .transcript_service import TranscriptService, build_transcript_service
from .youtube_service import extract_video_id

logger = logging.getLogger("vidquiz.services.quiz_service")

QUIZ_SYSTEM_PROMPT = """You are a senior K-12 education expert who turns video content into engaging classroom multiple-choice questions.
Based on the provided video transcript, generate {count} multiple-choice questions.
Language: {language}.
Grade level: {grade}.

Output rules: respond with strict JSON only, an object containing an array named "quizzes".
Each question contains:
- q: the question (at most 95 characters)
- o: an array of 4 answer options (strings)
- a: index of the correct option (integer 0-3)
- t: countdown timer in seconds (default 20)

Quality: every question must be grounded in the video content and the wrong options must be plausible distractors."""

QUIZ_USER_PROMPT = """Video transcript:

{transcript}"""


def build_prompts(transcript: str, options: QuizOptions, max_chars: int = 15000) -> Tuple[str, str]:
    """Returns (system_prompt, user_prompt) for the given transcript and options."""
    resolved = options.resolved()
    system_prompt = QUIZ_SYSTEM_PROMPT.format(
        count=resolved.count,
        language=resolved.language,
        grade=resolved.grade,
    )
    user_prompt = QUIZ_USER_PROMPT.format(transcript=transcript[:max_chars])
    return system_prompt, user_prompt


def parse_quiz_response(content: Optional[str]) -> Any:
    """Parse model output; the shape of each quiz is trusted as returned."""
    if not content:
        raise InternalError("No content generated")

    try:
        return json.loads(content)
    except json.JSONDecodeError:
        pass

    # Some providers wrap the object in a markdown fence despite JSON mode
    try:
        return json.loads(clean_json_response(content))
    except json.JSONDecodeError:
        logger.error(f"Failed to parse JSON. Raw output: {content[:500]}")
        raise GenerationFailed()


class QuizService:
    """Turns a video URL into a quiz: transcript, prompt, one generation call."""

    def __init__(self, transcripts: TranscriptService, llm_provider: LLMProvider, max_chars: int = 15000):
        self.transcripts = transcripts
        self.llm_provider = llm_provider
        self.max_chars = max_chars

    async def generate(self, url: Optional[str], options: Optional[QuizOptions] = None) -> Tuple[Any, str]:
        """
        Returns (quiz_set, transcript_source).
        Raises BadRequest, NotFound, GenerationFailed or InternalError.
        """
        if not url:
            raise BadRequest("URL is required")

        video_id = extract_video_id(url)
        if not video_id:
            raise BadRequest("Invalid YouTube URL")

        transcript = await self.transcripts.get_transcript(video_id)
        if not transcript["transcript_text"].strip():
            raise NotFound("NO_TRANSCRIPT")

        system_prompt, user_prompt = build_prompts(
            transcript["transcript_text"], options or QuizOptions(), self.max_chars
        )

        logger.info(f"Generating quiz for {video_id} (transcript source: {transcript['source']})")
        # Built only once the request is known to be valid
        llm = self.llm_provider()
        content = await llm.complete_json(system_prompt, user_prompt)
        result = parse_quiz_response(content)

        return result, transcript["source"]


def get_transcript_service(settings: Settings = Depends(get_settings)) -> TranscriptService:
    return build_transcript_service(settings)


def get_quiz_service(
    settings: Settings = Depends(get_settings),
    transcripts: TranscriptService = Depends(get_transcript_service),
    llm_provider: LLMProvider = Depends(get_llm_provider),
) -> QuizService:
    return QuizService(transcripts, llm_provider, max_chars=settings.TRANSCRIPT_MAX_CHARS)


def describe_quiz(result: Dict[str, Any]) -> str:
    quizzes = result.get("quizzes") if isinstance(result, dict) else None
    return f"{len(quizzes)} questions" if isinstance(quizzes, list) else "unexpected shape"
