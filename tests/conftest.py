"""Shared fixtures and markers for the test suite."""

from __future__ import annotations

import json
import threading
from typing import Any

import pytest

from xraylens.llm import ModelAdapter
from xraylens.templating import RenderedPrompt


def pytest_configure(config):
    config.addinivalue_line(
        "markers",
        "integration: marks tests that require live services (Ollama)",
    )


def is_ollama_available() -> bool:
    """Check if the Ollama server is reachable and has a model."""
    try:
        import ollama

        models = ollama.list().get("models", [])
        return len(models) > 0
    except Exception:
        return False


class FakeCapability:
    """Deterministic stand-in for the model.

    ``responses`` maps a prompt name to a dict (returned as JSON), a raw
    string, or an exception instance to raise. Every rendered prompt is
    recorded in ``calls``.
    """

    def __init__(self, responses: dict[str, Any]) -> None:
        self.responses = responses
        self.calls: list[RenderedPrompt] = []
        self.schemas: dict[str, dict[str, Any]] = {}
        self._lock = threading.Lock()

    def complete(self, prompt: RenderedPrompt, output_schema: dict[str, Any]) -> str:
        with self._lock:
            self.calls.append(prompt)
            self.schemas[prompt.name] = output_schema
        response = self.responses[prompt.name]
        if isinstance(response, Exception):
            raise response
        if isinstance(response, str):
            return response
        return json.dumps(response)

    @property
    def called_names(self) -> list[str]:
        return [call.name for call in self.calls]

    def prompt_for(self, name: str) -> RenderedPrompt:
        return next(call for call in self.calls if call.name == name)


SAMPLE_ANALYSIS = (
    "Scan type: PA chest radiograph. Body part: chest. Findings: transverse "
    "fracture of the right 5th rib with mild displacement; lungs clear."
)


@pytest.fixture
def sample_photo_url() -> str:
    return "data:image/png;base64,AAAA"


@pytest.fixture
def sample_analysis() -> str:
    return SAMPLE_ANALYSIS


@pytest.fixture
def fake_responses() -> dict[str, Any]:
    return {
        "analyzeXrayImagePrompt": {"analysis": SAMPLE_ANALYSIS, "severity": "moderate"},
        "summarizeAnalysisResultsPrompt": {"summary": "A broken rib on the right side."},
        "generateAnalysisSummaryPrompt": {"summary": "One rib is fractured."},
        "visualizeAnalysisResultsPrompt": {
            "visualizedImageUrl": "https://images.example.com/annotated.png"
        },
    }


@pytest.fixture
def fake_capability(fake_responses: dict[str, Any]) -> FakeCapability:
    return FakeCapability(fake_responses)


@pytest.fixture
def fake_adapter(fake_capability: FakeCapability) -> ModelAdapter:
    return ModelAdapter(fake_capability)
