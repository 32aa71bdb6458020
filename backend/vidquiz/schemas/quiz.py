from typing import List, Optional

from pydantic import BaseModel, Field


DEFAULT_COUNT = 10
DEFAULT_LANGUAGE = "English"
DEFAULT_GRADE = "Any"


# ── Request ──────────────────────────────────────────────────────────────────

class QuizOptions(BaseModel):
    """Generation options; missing or empty values use the defaults."""
    count: Optional[int] = Field(default=None, description="Number of questions", examples=[10])
    language: Optional[str] = Field(default=None, description="Quiz language", examples=["English"])
    grade: Optional[str] = Field(default=None, description="Target grade level", examples=["Any"])

    def resolved(self) -> "QuizOptions":
        return QuizOptions(
            count=self.count or DEFAULT_COUNT,
            language=self.language or DEFAULT_LANGUAGE,
            grade=self.grade or DEFAULT_GRADE,
        )


class GenerateRequest(BaseModel):
    """Request body for POST /api/generate."""
    url: Optional[str] = Field(default=None, examples=["https://www.youtube.com/watch?v=dQw4w9WgXcQ"])
    options: Optional[QuizOptions] = None


# ── Response ─────────────────────────────────────────────────────────────────

class QuizItem(BaseModel):
    """One multiple-choice question as produced by the model."""
    q: str = Field(..., max_length=95, description="Question text")
    o: List[str] = Field(..., min_length=4, max_length=4, description="Four answer options")
    a: int = Field(..., ge=0, le=3, description="Index of the correct option")
    t: int = Field(default=20, description="Countdown timer in seconds")


class QuizSet(BaseModel):
    """Full quiz payload returned to the client."""
    quizzes: List[QuizItem]


class ErrorResponse(BaseModel):
    error: str
