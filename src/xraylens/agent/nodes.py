"""Processing nodes for the X-ray pipeline graph.

Each node receives the current ``PipelineState`` and returns a dict with the
keys it wants to update. Stage inputs are mapped field by field from the
state and validated by the adapter.
"""

from __future__ import annotations

import logging
from typing import Any

from xraylens.agent.state import PipelineState
from xraylens.flows import (
    SUMMARY_FLOWS,
    analyze_xray_image,
    visualize_analysis_results,
)
from xraylens.llm import ModelAdapter

logger = logging.getLogger(__name__)


class PipelineNodes:
    """Bind the stage flows to one adapter for the lifetime of a run."""

    def __init__(self, adapter: ModelAdapter, summary_flow: str = "summarize") -> None:
        if summary_flow not in SUMMARY_FLOWS:
            raise ValueError(
                f"Unknown summary flow '{summary_flow}'. "
                f"Expected one of: {', '.join(sorted(SUMMARY_FLOWS))}"
            )
        self._adapter = adapter
        self._summarize = SUMMARY_FLOWS[summary_flow]

    def analyze(self, state: PipelineState) -> dict[str, Any]:
        """Analyze the X-ray image and record findings plus severity."""
        logger.info("Analyzing X-ray image")
        result = analyze_xray_image({"photo_url": state["photo_url"]}, self._adapter)
        return {"analysis": result.analysis, "severity": result.severity}

    def summarize(self, state: PipelineState) -> dict[str, Any]:
        """Summarize the analysis for doctors and patients."""
        logger.info("Summarizing analysis results")
        result = self._summarize({"analysis_results": state["analysis"]}, self._adapter)
        return {"summary": result.summary}

    def visualize(self, state: PipelineState) -> dict[str, Any]:
        """Request an annotated version of the X-ray image."""
        logger.info("Visualizing analysis results")
        result = visualize_analysis_results(
            {
                "xray_image_url": state["photo_url"],
                "analysis_results": state["analysis"],
            },
            self._adapter,
        )
        return {"visualized_image_url": result.visualized_image_url}
