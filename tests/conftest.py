"""
Core pytest configuration and fixtures for Autoscript testing.

This module provides shared test fixtures, a scripted LLM provider and
configuration that support the pillar-based testing architecture.
"""

from typing import Any, Dict, List

import pytest
from autoscript.config import Settings
from autoscript.llm import LLM
from autoscript.models import (
    ASSISTANT_ROLE,
    USER_ROLE,
    ArtifactBundle,
    ChatMessage,
    RequestSpec,
)


class ScriptedLLM(LLM):
    """Replays canned replies in order; the last one repeats forever.

    A reply that is an exception is raised from ``generate_response``; a dict
    is returned as the raw response; anything else becomes the message content.
    """

    def __init__(self, *replies: Any):
        self.replies = list(replies)
        self.calls: List[Dict[str, Any]] = []

    def generate_response(self, messages, model=None, credential=None, **kwargs):
        self.calls.append(
            {"messages": messages, "model": model, "credential": credential, **kwargs}
        )
        reply = self.replies.pop(0) if len(self.replies) > 1 else self.replies[0]
        if isinstance(reply, Exception):
            raise reply
        if isinstance(reply, dict):
            return reply
        return {"choices": [{"message": {"content": reply}}]}

    def extract_content(self, response: Any) -> str:
        return response["choices"][0]["message"]["content"]


# ===== TEST DATA FIXTURES =====


@pytest.fixture
def sample_messages() -> List[ChatMessage]:
    """Two prior exchanges of a design conversation."""
    return [
        ChatMessage(role=USER_ROLE, content="I want to rename photos by date."),
        ChatMessage(
            role=ASSISTANT_ROLE,
            content="Which folder should be scanned, and which date format?",
        ),
        ChatMessage(role=USER_ROLE, content="~/Pictures, and YYYY-MM-DD."),
        ChatMessage(role=ASSISTANT_ROLE, content="Great, the plan is ready."),
    ]


@pytest.fixture
def sample_bundle() -> ArtifactBundle:
    return ArtifactBundle(
        primary_file="print('old')",
        manifest="requests==2.32.3",
        docs="# Old",
        source_conversation_snapshot="user: rename photos",
    )


@pytest.fixture
def sample_request() -> RequestSpec:
    return RequestSpec(
        model_id="test-model",
        credential="test-key",
        messages=[{"role": "user", "content": "Hello"}],
        max_output_tokens=100,
        temperature=0.5,
    )


# ===== MOCK FIXTURES =====


@pytest.fixture
def scripted_llm():
    """Factory for ScriptedLLM instances."""
    return ScriptedLLM


@pytest.fixture
def sleeps() -> List[float]:
    """Records backoff waits instead of sleeping."""
    return []


@pytest.fixture
def settings(monkeypatch) -> Settings:
    monkeypatch.delenv("OPENROUTER_API_KEY", raising=False)
    return Settings(_env_file=None, api_key="test-key", model="test-model")


# ===== APP FIXTURES =====


@pytest.fixture
def make_session(settings, sleeps):
    """Builds an Autoscript session over the given LLM that never really sleeps."""
    from autoscript import Autoscript
    from autoscript.executor import Executor

    def _make(llm, **kwargs):
        executor = kwargs.pop(
            "executor",
            Executor(llm, policy=settings.retry_policy(), sleep=sleeps.append),
        )
        return Autoscript(llm=llm, executor=executor, settings=settings, **kwargs)

    return _make


# ===== CONFIGURATION =====


def pytest_configure(config):
    """Pytest configuration."""
    config.addinivalue_line("markers", "integration: marks tests as integration tests")
    config.addinivalue_line("markers", "slow: marks tests as slow-running")


def pytest_collection_modifyitems(config, items):
    """Automatically mark tests based on location."""
    for item in items:
        if "integration" in str(item.fspath):
            item.add_marker(pytest.mark.integration)
