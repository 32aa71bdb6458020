import json

import pytest
from fastapi.testclient import TestClient

from vidquiz.errors import TranscriptUnavailable
from vidquiz.main import app
from vidquiz.services.llm_client import get_llm_provider
from vidquiz.services.quiz_service import get_transcript_service
from vidquiz.services.transcript_service import TranscriptService

VIDEO_ID = "dQw4w9WgXcQ"
VIDEO_URL = f"https://www.youtube.com/watch?v={VIDEO_ID}"

SAMPLE_QUIZ = {
    "quizzes": [
        {
            "q": "Which planet is called the Red Planet?",
            "o": ["Venus", "Mars", "Jupiter", "Mercury"],
            "a": 1,
            "t": 20,
        }
    ]
}


class FakeLLM:
    model = "fake-model"

    def __init__(self, content=None, error=None):
        self.content = json.dumps(SAMPLE_QUIZ) if content is None else content
        self.error = error
        self.calls = []

    async def complete_json(self, system_prompt, user_prompt):
        self.calls.append((system_prompt, user_prompt))
        if self.error:
            raise self.error
        return self.content


class FakeFetcher:
    """Replays one outcome per call: a list of fragments or an exception."""

    def __init__(self, *outcomes):
        self.outcomes = list(outcomes)
        self.calls = []

    def __call__(self, video_id, languages=None):
        self.calls.append((video_id, languages))
        outcome = self.outcomes[min(len(self.calls), len(self.outcomes)) - 1]
        if isinstance(outcome, Exception):
            raise outcome
        return outcome


def failing():
    return TranscriptUnavailable("Transcripts are disabled for this video")


@pytest.fixture
def fake_llm():
    return FakeLLM()


@pytest.fixture
def fetcher():
    return FakeFetcher(["Mars is often called", "the Red Planet."])


@pytest.fixture
def make_client(fake_llm):
    def _make(fetcher, fallback_enabled=True, llm=None):
        transcripts = TranscriptService(fetcher, ["en-US", "en"], fallback_enabled)
        app.dependency_overrides[get_transcript_service] = lambda: transcripts
        generation_client = llm or fake_llm
        app.dependency_overrides[get_llm_provider] = lambda: lambda: generation_client
        return TestClient(app)

    yield _make
    app.dependency_overrides.clear()


@pytest.fixture
def client(make_client, fetcher):
    return make_client(fetcher)
