from fastapi.testclient import TestClient

from conftest import SAMPLE_QUIZ, VIDEO_ID, VIDEO_URL, FakeFetcher, FakeLLM, failing
from vidquiz.main import app
from vidquiz.services.llm_client import get_llm_client
from vidquiz.services.quiz_service import get_transcript_service
from vidquiz.services.transcript_service import TranscriptService


def test_missing_url_returns_400(client):
    response = client.post("/api/generate", json={"options": {"count": 10}})
    assert response.status_code == 400
    assert response.json() == {"error": "URL is required"}


def test_empty_url_returns_400(client):
    response = client.post("/api/generate", json={"url": ""})
    assert response.status_code == 400
    assert response.json() == {"error": "URL is required"}


def test_invalid_url_returns_400(client, fetcher):
    response = client.post("/api/generate", json={"url": "https://vimeo.com/123456789"})
    assert response.status_code == 400
    assert response.json() == {"error": "Invalid YouTube URL"}
    assert fetcher.calls == []


def test_short_video_id_returns_400(client):
    response = client.post("/api/generate", json={"url": "https://youtu.be/abcdefghij"})
    assert response.status_code == 400
    assert response.json() == {"error": "Invalid YouTube URL"}


def test_malformed_body_returns_400(client):
    response = client.post(
        "/api/generate",
        content="not json",
        headers={"Content-Type": "application/json"},
    )
    assert response.status_code == 400
    assert response.json() == {"error": "Invalid request body"}


def test_generates_quiz_from_transcript(client, fetcher, fake_llm):
    response = client.post("/api/generate", json={"url": VIDEO_URL})

    assert response.status_code == 200
    assert response.json() == SAMPLE_QUIZ
    assert response.headers["X-Transcript-Source"] == "youtube"
    assert fetcher.calls == [(VIDEO_ID, ["en-US", "en"])]

    system_prompt, user_prompt = fake_llm.calls[0]
    assert "10 multiple-choice questions" in system_prompt
    assert "Language: English." in system_prompt
    assert "Grade level: Any." in system_prompt
    assert "Mars is often called the Red Planet." in user_prompt


def test_options_reach_the_prompt(client, fake_llm):
    response = client.post("/api/generate", json={
        "url": VIDEO_URL,
        "options": {"count": 15, "language": "Spanish", "grade": "University"},
    })

    assert response.status_code == 200
    system_prompt, _ = fake_llm.calls[0]
    assert "15 multiple-choice questions" in system_prompt
    assert "Language: Spanish." in system_prompt
    assert "Grade level: University." in system_prompt


def test_retries_without_language_hints(make_client):
    fetcher = FakeFetcher(failing(), ["Bonjour"])
    client = make_client(fetcher)

    response = client.post("/api/generate", json={"url": VIDEO_URL})

    assert response.status_code == 200
    assert response.headers["X-Transcript-Source"] == "youtube_retry"
    assert fetcher.calls == [(VIDEO_ID, ["en-US", "en"]), (VIDEO_ID, None)]


def test_falls_back_to_demo_transcript(make_client, fake_llm):
    fetcher = FakeFetcher(failing())
    client = make_client(fetcher)

    response = client.post("/api/generate", json={"url": "https://youtu.be/zzzzzzzzzzz"})

    assert response.status_code == 200
    assert response.json() == SAMPLE_QUIZ
    assert response.headers["X-Transcript-Source"] == "fallback"
    assert len(fetcher.calls) == 2
    _, user_prompt = fake_llm.calls[0]
    assert "Solar System" in user_prompt


def test_no_transcript_when_fallback_disabled(make_client, fake_llm):
    client = make_client(FakeFetcher(failing()), fallback_enabled=False)

    response = client.post("/api/generate", json={"url": VIDEO_URL})

    assert response.status_code == 404
    assert response.json() == {"error": "NO_TRANSCRIPT"}
    assert fake_llm.calls == []


def test_empty_transcript_returns_404(make_client):
    client = make_client(FakeFetcher(["", "  "]))

    response = client.post("/api/generate", json={"url": VIDEO_URL})

    assert response.status_code == 404
    assert response.json() == {"error": "NO_TRANSCRIPT"}


def test_non_json_model_output_returns_500(make_client, fetcher):
    llm = FakeLLM(content="Here are your questions: 1. What is Mars?")
    client = make_client(fetcher, llm=llm)

    response = client.post("/api/generate", json={"url": VIDEO_URL})

    assert response.status_code == 500
    assert response.json() == {"error": "AI_GENERATION_FAILED"}
    assert len(llm.calls) == 1


def test_empty_model_output_returns_500(make_client, fetcher):
    client = make_client(fetcher, llm=FakeLLM(content=""))

    response = client.post("/api/generate", json={"url": VIDEO_URL})

    assert response.status_code == 500
    assert response.json() == {"error": "No content generated"}


def test_generation_error_message_is_surfaced(make_client, fetcher):
    llm = FakeLLM(error=RuntimeError("Rate limit reached"))
    client = make_client(fetcher, llm=llm)

    response = client.post("/api/generate", json={"url": VIDEO_URL})

    assert response.status_code == 500
    assert response.json() == {"error": "Rate limit reached"}
    assert len(llm.calls) == 1


def test_fenced_model_output_is_accepted(make_client, fetcher):
    llm = FakeLLM(content='```json\n{"quizzes": []}\n```')
    client = make_client(fetcher, llm=llm)

    response = client.post("/api/generate", json={"url": VIDEO_URL})

    assert response.status_code == 200
    assert response.json() == {"quizzes": []}


def test_model_output_is_returned_verbatim(make_client, fetcher):
    payload = '{"quizzes": [{"q": "Q?", "o": ["a", "b"], "a": 7}], "extra": true}'
    client = make_client(fetcher, llm=FakeLLM(content=payload))

    response = client.post("/api/generate", json={"url": VIDEO_URL})

    assert response.status_code == 200
    assert response.json() == {"quizzes": [{"q": "Q?", "o": ["a", "b"], "a": 7}], "extra": True}


def test_index_serves_form(client):
    response = client.get("/")
    assert response.status_code == 200
    assert "VidQuiz" in response.text
    assert "/api/generate" in response.text


def test_api_banner(client):
    response = client.get("/api")
    assert response.status_code == 200
    assert response.json()["docs"] == "/docs"


def test_rejected_requests_never_build_the_generation_client(monkeypatch, fetcher):
    monkeypatch.delenv("OPENAI_API_KEY", raising=False)
    get_llm_client.cache_clear()
    transcripts = TranscriptService(fetcher, ["en-US", "en"])
    app.dependency_overrides[get_transcript_service] = lambda: transcripts
    try:
        client = TestClient(app)

        missing = client.post("/api/generate", json={})
        invalid = client.post("/api/generate", json={"url": "https://vimeo.com/123456789"})
    finally:
        app.dependency_overrides.clear()

    assert missing.status_code == 400
    assert missing.json() == {"error": "URL is required"}
    assert invalid.status_code == 400
    assert invalid.json() == {"error": "Invalid YouTube URL"}
    assert get_llm_client.cache_info().currsize == 0
