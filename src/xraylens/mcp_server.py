"""MCP server exposing the X-ray pipeline stages as tools.

A presentation shell (chat client, web UI bridge...) calls these tools with
a data URL or remote URL for the image and receives JSON strings back.
"""

from __future__ import annotations

import json
import logging
import sys

from mcp.server.fastmcp import FastMCP
from pydantic import BaseModel

from xraylens.agent.graph import run_pipeline
from xraylens.config import settings
from xraylens.errors import XRayLensError
from xraylens.flows import (
    SUMMARY_FLOWS,
    analyze_xray_image,
    visualize_analysis_results,
)
from xraylens.logging_config import configure_logging
from xraylens.schemas import AnalysisRequest, SummaryRequest, VisualizationInput

logger = logging.getLogger(__name__)

mcp = FastMCP("XRayLens Imaging Server")


def _to_json(result: BaseModel) -> str:
    return json.dumps(result.model_dump(by_alias=True), ensure_ascii=False, indent=2)


def _format_error(exc: XRayLensError) -> str:
    return f"{type(exc).__name__}: {exc}"


# ------------------------------------------------------------------
# MCP Tools
# ------------------------------------------------------------------


@mcp.tool()
def analyze_xray(photo_url: str) -> str:
    """Analyze an X-ray image for fractures and abnormalities.

    Accepts a data URL (``data:image/png;base64,...``) or a remote image URL.
    Returns a JSON object with ``analysis`` and ``severity``.
    """
    try:
        result = analyze_xray_image(AnalysisRequest(photo_url=photo_url))
    except XRayLensError as exc:
        logger.error("analyze_xray failed: %s", exc)
        return _format_error(exc)
    return _to_json(result)


@mcp.tool()
def summarize_analysis(analysis_results: str) -> str:
    """Summarize X-ray analysis text for doctors and patients.

    Returns a JSON object with ``summary``.
    """
    flow = SUMMARY_FLOWS[settings.summary_flow]
    try:
        result = flow(SummaryRequest(analysis_results=analysis_results))
    except XRayLensError as exc:
        logger.error("summarize_analysis failed: %s", exc)
        return _format_error(exc)
    return _to_json(result)


@mcp.tool()
def visualize_analysis(xray_image_url: str, analysis_results: str) -> str:
    """Produce an annotated X-ray image highlighting areas of concern.

    Very large inputs are sent without the analysis text. Returns a JSON
    object with ``visualizedImageUrl``.
    """
    try:
        result = visualize_analysis_results(
            VisualizationInput(
                xray_image_url=xray_image_url,
                analysis_results=analysis_results,
            )
        )
    except XRayLensError as exc:
        logger.error("visualize_analysis failed: %s", exc)
        return _format_error(exc)
    return _to_json(result)


@mcp.tool()
def run_xray_pipeline(photo_url: str) -> str:
    """Run analysis, summary and visualization for one X-ray image.

    Returns a JSON object with ``analysis``, ``severity``, ``summary`` and
    ``visualizedImageUrl``.
    """
    try:
        result = run_pipeline(photo_url)
    except XRayLensError as exc:
        logger.error("run_xray_pipeline failed: %s", exc)
        return _format_error(exc)
    return _to_json(result)


# ------------------------------------------------------------------
# Entry point
# ------------------------------------------------------------------

if __name__ == "__main__":
    configure_logging(settings.log_level, stream=sys.stderr)
    mcp.run()
