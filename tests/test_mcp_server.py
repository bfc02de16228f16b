"""Unit tests for xraylens.mcp_server: MCP tool functions."""

from __future__ import annotations

import json
from unittest.mock import patch

import pytest

from tests.conftest import FakeCapability
from xraylens.errors import ModelInvocationError
from xraylens.llm import ModelAdapter
from xraylens.mcp_server import (
    analyze_xray,
    mcp,
    run_xray_pipeline,
    summarize_analysis,
    visualize_analysis,
)

PHOTO_URL = "data:image/png;base64,AAAA"


@pytest.fixture
def patched_adapter(fake_adapter):
    """Route every tool through the fake capability."""
    with (
        patch("xraylens.flows.default_adapter", return_value=fake_adapter),
        patch("xraylens.agent.graph.default_adapter", return_value=fake_adapter),
    ):
        yield fake_adapter


class TestServer:
    def test_server_name(self):
        assert mcp.name == "XRayLens Imaging Server"


class TestAnalyzeTool:
    def test_returns_json(self, patched_adapter, sample_analysis):
        data = json.loads(analyze_xray(PHOTO_URL))
        assert data == {"analysis": sample_analysis, "severity": "moderate"}

    def test_reports_failure(self):
        capability = FakeCapability(
            {"analyzeXrayImagePrompt": ModelInvocationError("Ollama unreachable")}
        )
        with patch("xraylens.flows.default_adapter", return_value=ModelAdapter(capability)):
            text = analyze_xray(PHOTO_URL)
        assert text.startswith("ModelInvocationError:")
        assert "Ollama unreachable" in text


class TestSummarizeTool:
    def test_returns_json(self, patched_adapter, fake_capability):
        data = json.loads(summarize_analysis("Rib fracture"))
        assert data == {"summary": "A broken rib on the right side."}
        assert fake_capability.called_names == ["summarizeAnalysisResultsPrompt"]

    def test_honors_summary_flow_setting(self, patched_adapter, fake_capability):
        with patch("xraylens.mcp_server.settings.summary_flow", "generate"):
            data = json.loads(summarize_analysis("Rib fracture"))
        assert data == {"summary": "One rib is fractured."}


class TestVisualizeTool:
    def test_returns_camel_case_json(self, patched_adapter):
        data = json.loads(visualize_analysis(PHOTO_URL, "Rib fracture"))
        assert data == {"visualizedImageUrl": "https://images.example.com/annotated.png"}

    def test_reports_bad_output(self):
        capability = FakeCapability({"visualizeAnalysisResultsPrompt": {"url": "x"}})
        with patch("xraylens.flows.default_adapter", return_value=ModelAdapter(capability)):
            text = visualize_analysis(PHOTO_URL, "Rib fracture")
        assert text.startswith("OutputValidationError:")


class TestPipelineTool:
    def test_returns_all_fields(self, patched_adapter):
        data = json.loads(run_xray_pipeline(PHOTO_URL))
        assert set(data) == {"analysis", "severity", "summary", "visualizedImageUrl"}
        assert data["severity"] == "moderate"

    def test_reports_failure_without_partial_result(self, fake_responses):
        fake_responses["analyzeXrayImagePrompt"] = "not json"
        capability = FakeCapability(fake_responses)
        with patch(
            "xraylens.agent.graph.default_adapter", return_value=ModelAdapter(capability)
        ):
            text = run_xray_pipeline(PHOTO_URL)
        assert text.startswith("OutputValidationError:")
        assert capability.called_names == ["analyzeXrayImagePrompt"]
