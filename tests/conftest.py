"""Pytest configuration and shared fixtures."""
import pytest
from fastapi.testclient import TestClient
from google.genai import types

from main import create_app
from settings import Settings
from storage import MemoryStore

SYSTEM_PROMPT = "You are a test assistant."


def make_response(text):
    """Build a Gemini response object carrying a single text part."""
    return types.GenerateContentResponse(
        candidates=[
            types.Candidate(content=types.Content(role="model", parts=[types.Part(text=text)]))
        ]
    )


class StubModel:
    """Stands in for the Gemini gateway and records every payload it receives."""

    def __init__(self, reply="Hi! Ask me anything about Rhythia.", error=None, response=None):
        self.reply = reply
        self.error = error
        self.response = response
        self.calls = []

    def generate(self, contents):
        self.calls.append(contents)
        if self.error is not None:
            raise self.error
        if self.response is not None:
            return self.response
        return make_response(self.reply)


@pytest.fixture
def prompt_file(tmp_path):
    path = tmp_path / "system_instruction.txt"
    path.write_text(SYSTEM_PROMPT + "\n", encoding="utf-8")
    return path


@pytest.fixture
def settings(prompt_file):
    return Settings(API_KEY="test-key", LOG_LEVEL="WARNING", SYSTEM_INSTRUCTION_PATH=str(prompt_file))


@pytest.fixture
def store():
    return MemoryStore()


@pytest.fixture
def stub_model():
    return StubModel()


@pytest.fixture
def client(settings, store, stub_model):
    app = create_app(settings=settings, store=store, model=stub_model)
    return TestClient(app)
