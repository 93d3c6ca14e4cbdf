import pytest
from typing import List, Optional

from pravis.core.config import settings
from pravis.core.errors import LLMError
from pravis.services.chat.parser import ResponseParser
from pravis.services.chat.service import AssistantService
from pravis.tools.base import RecordingNavigator, SessionContext
from pravis.tools.registry import ToolRegistry

TEST_CONFIG = {
    "system_prompts": {"en": {"persona": "You are Pravis (test persona)."}},
    "tool_responses": {"en": {"acknowledged": "Understood. I will handle that request for you."}},
    "tools": {},
}


class FakeLLM:
    """
    Stand-in for LLMClient: returns queued outputs and records prompts.
    An Exception instance in the queue is raised instead of returned.
    """
    def __init__(self, *outputs):
        self.outputs = list(outputs)
        self.prompts: List[str] = []
        self.images: List[Optional[List[str]]] = []

    def generate_text(self, prompt: str, images: Optional[List[str]] = None) -> str:
        self.prompts.append(prompt)
        self.images.append(images)
        out = self.outputs.pop(0) if self.outputs else ""
        if isinstance(out, Exception):
            raise out
        return out


@pytest.fixture(autouse=True)
def no_session_log_files(monkeypatch):
    monkeypatch.setattr(settings, "enable_session_logs", False)


@pytest.fixture
def registry():
    return ToolRegistry({})


@pytest.fixture
def parser(registry):
    return ResponseParser(registry)


@pytest.fixture
def navigator():
    return RecordingNavigator()


@pytest.fixture
def ctx(navigator):
    return SessionContext(navigator=navigator, conversation_id="conv-test", locale="en")


@pytest.fixture
def make_service():
    def _make(*outputs):
        llm = FakeLLM(*outputs)
        return AssistantService(llm, config=dict(TEST_CONFIG)), llm
    return _make


@pytest.fixture
def upstream_down():
    return LLMError("OpenRouter API error: 503 Service Unavailable")
