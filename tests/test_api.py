from tldr_ai.core.errors import ProviderError
from tldr_ai.schemas.inputs import MAX_TEXT_CHARS

from conftest import SAMPLE_TEXT, FakeLLM


def _fields(body):
    return {(e["field"], e["constraint"]) for e in body["errors"]}


def test_health(client):
    response = client.get("/health")
    assert response.status_code == 200
    assert response.json() == {"status": "ok"}


def test_analyze_returns_summary_and_key_points(client):
    response = client.post("/api/analyze", json={"text": SAMPLE_TEXT})

    assert response.status_code == 200
    body = response.json()
    assert set(body) == {"summary", "keyPoints"}
    assert body["summary"]
    assert 3 <= len(body["keyPoints"]) <= 5


def test_analyze_empty_text_is_400_citing_required(client, fake_llm):
    response = client.post("/api/analyze", json={"text": ""})

    assert response.status_code == 400
    body = response.json()
    assert body["message"] == "Invalid input"
    assert _fields(body) == {("text", "required")}
    assert fake_llm.calls == []


def test_analyze_too_long_text_is_400_citing_max_length(client, fake_llm):
    response = client.post("/api/analyze", json={"text": "x" * (MAX_TEXT_CHARS + 1)})

    assert response.status_code == 400
    assert _fields(response.json()) == {("text", "max_length")}
    assert fake_llm.calls == []


def test_analyze_malformed_json_is_400(client):
    response = client.post(
        "/api/analyze",
        content=b'{"text": ',
        headers={"Content-Type": "application/json"},
    )

    assert response.status_code == 400
    assert ("body", "invalid") in _fields(response.json())


def test_analyze_missing_body_is_400(client):
    response = client.post("/api/analyze")

    assert response.status_code == 400
    assert _fields(response.json()) == {("body", "required")}


def test_analyze_adapter_failure_is_500_with_message(make_client):
    client = make_client(FakeLLM(error=ProviderError("503 UNAVAILABLE: model overloaded")))

    response = client.post("/api/analyze", json={"text": SAMPLE_TEXT})

    assert response.status_code == 500
    assert response.json() == {
        "message": "Failed to analyze text: 503 UNAVAILABLE: model overloaded"
    }


def test_analyze_bad_model_shape_is_500(make_client):
    client = make_client(FakeLLM(json_out={"summary": "S.", "keyPoints": ["only one"]}))

    response = client.post("/api/analyze", json={"text": SAMPLE_TEXT})

    assert response.status_code == 500
    assert response.json()["message"].startswith("Failed to analyze text:")
    assert "errors" not in response.json()


def test_ask_returns_answer(client, fake_llm):
    response = client.post(
        "/api/ask",
        json={"originalText": SAMPLE_TEXT, "question": "What color is the sky?"},
    )

    assert response.status_code == 200
    assert response.json() == {"answer": "The sky is blue."}
    assert "What color is the sky?" in fake_llm.calls[0]["prompt"]


def test_ask_without_allow_related_defaults_to_true(client, fake_llm):
    response = client.post(
        "/api/ask",
        json={"originalText": SAMPLE_TEXT, "question": "Why is the sky blue?"},
    )

    assert response.status_code == 200
    assert "reasoning from what the context states" in fake_llm.calls[0]["prompt"]


def test_ask_with_allow_related_false_uses_strict_prompt(client, fake_llm):
    response = client.post(
        "/api/ask",
        json={
            "originalText": SAMPLE_TEXT,
            "question": "Why is the sky blue?",
            "allowRelatedQuestions": False,
        },
    )

    assert response.status_code == 200
    assert "stated explicitly" in fake_llm.calls[0]["prompt"]


def test_ask_missing_question_is_400(client, fake_llm):
    response = client.post("/api/ask", json={"originalText": SAMPLE_TEXT})

    assert response.status_code == 400
    body = response.json()
    assert body["message"] == "Invalid input"
    assert any(e["field"] == "question" for e in body["errors"])
    assert fake_llm.calls == []


def test_ask_lists_every_violation(client):
    response = client.post(
        "/api/ask",
        json={"originalText": "", "question": "", "allowRelatedQuestions": "no"},
    )

    assert response.status_code == 400
    assert _fields(response.json()) == {
        ("originalText", "required"),
        ("question", "required"),
        ("allowRelatedQuestions", "type"),
    }


def test_ask_empty_model_answer_is_500_not_empty_answer(make_client):
    client = make_client(FakeLLM(text_out="   "))

    response = client.post(
        "/api/ask",
        json={"originalText": SAMPLE_TEXT, "question": "What color is the sky?"},
    )

    assert response.status_code == 500
    body = response.json()
    assert "answer" not in body
    assert body["message"] == "Failed to answer question: Empty response from Gemini model"


def test_missing_api_key_surfaces_as_adapter_failure(make_client, mocker):
    from tldr_ai.services.llm_client import GeminiLLM

    factory = mocker.patch("tldr_ai.services.llm_client.genai.Client")
    client = make_client(GeminiLLM(api_key=None, model="gemini-2.5-flash", temperature=0.2))

    response = client.post("/api/analyze", json={"text": SAMPLE_TEXT})

    assert response.status_code == 500
    assert "GEMINI_API_KEY is missing" in response.json()["message"]
    factory.assert_not_called()


def test_unexpected_errors_are_generic_500(make_client):
    from tldr_ai.dependencies import get_analyst
    from tldr_ai.main import app

    client = make_client(FakeLLM())

    def _explode():
        raise RuntimeError("dependency wiring broke")

    app.dependency_overrides[get_analyst] = _explode

    response = client.post(
        "/api/ask",
        json={"originalText": SAMPLE_TEXT, "question": "What color is the sky?"},
    )

    assert response.status_code == 500
    assert response.json() == {"message": "Internal server error"}


def test_analyst_is_shared_across_requests(mocker):
    from tldr_ai.core.settings import Settings
    from tldr_ai.dependencies import get_analyst

    mocker.patch(
        "tldr_ai.dependencies.get_settings",
        return_value=Settings(gemini_api_key="test-key"),
    )
    get_analyst.cache_clear()
    try:
        first = get_analyst()
        second = get_analyst()
    finally:
        get_analyst.cache_clear()

    assert first is second
    assert first.llm is second.llm
    assert first.llm.api_key == "test-key"
