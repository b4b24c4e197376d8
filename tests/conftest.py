import pytest
from fastapi.testclient import TestClient

from tldr_ai.core.settings import Settings
from tldr_ai.dependencies import get_analyst, get_settings_dependency
from tldr_ai.main import app
from tldr_ai.services.analyst import TextAnalyst

SAMPLE_TEXT = "The sky is blue. Grass is green."

SAMPLE_ANALYSIS = {
    "summary": "The text states the colors of the sky and of grass.",
    "keyPoints": [
        "The sky is blue.",
        "Grass is green.",
        "The text describes natural colors.",
    ],
}


class FakeLLM:
    """Stands in for GeminiLLM: records every call and replays canned output."""

    def __init__(self, json_out=None, text_out="", error=None):
        self.json_out = json_out
        self.text_out = text_out
        self.error = error
        self.calls = []

    def generate_json(self, system, user, schema):
        self.calls.append({"system": system, "user": user, "schema": schema})
        if self.error:
            raise self.error
        return self.json_out

    def generate_text(self, prompt, system=None):
        self.calls.append({"prompt": prompt, "system": system})
        if self.error:
            raise self.error
        return self.text_out


@pytest.fixture
def settings():
    return Settings(gemini_api_key="test-key")


@pytest.fixture
def fake_llm():
    return FakeLLM(json_out=dict(SAMPLE_ANALYSIS), text_out="  The sky is blue.  ")


@pytest.fixture
def analyst(settings, fake_llm):
    return TextAnalyst(settings, llm=fake_llm)


@pytest.fixture
def make_client(settings):
    """Build a TestClient whose analyst talks to the given fake LLM."""

    def _make(llm, app_settings=None):
        app.dependency_overrides[get_analyst] = lambda: TextAnalyst(settings, llm=llm)
        if app_settings is not None:
            app.dependency_overrides[get_settings_dependency] = lambda: app_settings
        return TestClient(app, raise_server_exceptions=False)

    yield _make
    app.dependency_overrides.clear()


@pytest.fixture
def client(make_client, fake_llm):
    return make_client(fake_llm)
