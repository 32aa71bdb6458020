from functools import lru_cache
from typing import List, Optional

from pydantic import field_validator
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Process-wide settings read from the environment (after load_dotenv)."""

    # ── Generation ────────────────────────────────────────────────────────────
    LLM_PROVIDER: str = "openai"

    @field_validator("LLM_PROVIDER")
    @classmethod
    def validate_llm_provider(cls, v: str) -> str:
        allowed = {"openai", "gemini"}
        if v.lower() not in allowed:
            raise ValueError(f"LLM_PROVIDER must be one of {allowed}, got '{v}'")
        return v.lower()

    # Any OpenAI-compatible endpoint; base URL allows provider substitution
    OPENAI_API_KEY: Optional[str] = None
    OPENAI_BASE_URL: Optional[str] = None
    OPENAI_MODEL: str = "gpt-4o-mini"

    GEMINI_API_KEY: Optional[str] = None
    GEMINI_BASE_URL: Optional[str] = None
    GEMINI_MODEL: str = "gemini-2.0-flash"

    # ── Transcripts ───────────────────────────────────────────────────────────
    TRANSCRIPT_BACKEND: str = "youtube_transcript_api"

    @field_validator("TRANSCRIPT_BACKEND")
    @classmethod
    def validate_transcript_backend(cls, v: str) -> str:
        allowed = {"youtube_transcript_api", "yt_dlp"}
        if v.lower() not in allowed:
            raise ValueError(f"TRANSCRIPT_BACKEND must be one of {allowed}, got '{v}'")
        return v.lower()

    TRANSCRIPT_LANGUAGE: str = "en"
    TRANSCRIPT_COUNTRY: Optional[str] = "US"
    TRANSCRIPT_MAX_CHARS: int = 15000
    TRANSCRIPT_FALLBACK_ENABLED: bool = True

    # ── Core ──────────────────────────────────────────────────────────────────
    LOG_LEVEL: str = "INFO"
    CORS_ORIGINS: List[str] = ["*"]

    model_config = {
        "extra": "ignore",
        "env_ignore_empty": True,
        "frozen": True,
    }

    @property
    def transcript_languages(self) -> List[str]:
        """Locale hints for the first transcript attempt, most specific first."""
        languages = []
        if self.TRANSCRIPT_COUNTRY:
            languages.append(f"{self.TRANSCRIPT_LANGUAGE}-{self.TRANSCRIPT_COUNTRY}")
        languages.append(self.TRANSCRIPT_LANGUAGE)
        return languages


@lru_cache
def get_settings() -> Settings:
    return Settings()
