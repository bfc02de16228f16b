"""The three pipeline stages: analyze, summarize and visualize.

Each stage owns its prompt template and its schemas, and makes exactly one
call through a ``ModelAdapter``. When no adapter is passed a fresh one is
built from the configured settings.
"""

from __future__ import annotations

import logging
from typing import Any, Mapping

from xraylens.llm import ModelAdapter, default_adapter, validate_input
from xraylens.schemas import (
    AnalysisRequest,
    AnalysisResult,
    SummaryRequest,
    SummaryResult,
    VisualizationInput,
    VisualizationRequest,
    VisualizationResult,
)

logger = logging.getLogger(__name__)

# Character budget for the Visualize prompt inputs, with a safety margin
# below the model's context window.
TOKEN_LIMIT = 900_000

# ---------------------------------------------------------------------------
# Prompt templates
# ---------------------------------------------------------------------------

ANALYZE_PROMPT_NAME = "analyzeXrayImagePrompt"
ANALYZE_PROMPT = """\
You are an expert radiologist specializing in analyzing X-ray images for bone \
fractures and abnormalities.

You will use this information to analyze the X-ray image and identify any \
potential issues. Your analysis should describe the type of scan, the body part \
scanned, and a detailed description of any and all findings.

Analyze the following X-ray image and provide a detailed analysis of any \
potential bone fractures or abnormalities, as well as the severity of the \
issues found.

X-ray Image: {{ media(photo_url) }}
"""

SUMMARIZE_PROMPT_NAME = "summarizeAnalysisResultsPrompt"
SUMMARIZE_PROMPT = """\
You are a medical expert summarizing X-ray analysis results.

Summarize the following analysis results, including potential issues and their \
severity, in a way that is easy for both doctors and patients to understand.

Analysis Results: {{ analysis_results }}
"""

GENERATE_SUMMARY_PROMPT_NAME = "generateAnalysisSummaryPrompt"
GENERATE_SUMMARY_PROMPT = """\
You are a medical expert tasked with generating a summary of an X-ray analysis.

Summarize the following analysis results, highlighting potential issues and \
their severity, in a way that is easy for both doctors and patients to \
understand.

Analysis Results: {{ analysis_results }}
"""

VISUALIZE_PROMPT_NAME = "visualizeAnalysisResultsPrompt"
VISUALIZE_PROMPT = """\
You are an expert medical image analyst. Given an X-ray image URL, your task is \
to visualize the X-ray image, highlighting areas of concern. If no analysis \
results are provided, return the original image URL.

X-ray Image URL: {{ xray_image_url }}
{% if include_analysis_results -%}
Analysis Results:
{{ analysis_results }}
{% else -%}
Analysis Results: The analysis results were omitted to avoid exceeding the token limit.
{% endif %}
Ensure the visualized image clearly highlights areas of concern based on the \
analysis results. If no analysis results are provided, return the original \
image URL.
"""


# ---------------------------------------------------------------------------
# Size guard
# ---------------------------------------------------------------------------


def should_include_analysis(
    xray_image_url: str,
    analysis_results: str,
    token_limit: int = TOKEN_LIMIT,
) -> bool:
    """True when the combined input length stays within *token_limit*."""
    return len(xray_image_url) + len(analysis_results) <= token_limit


def build_visualization_request(
    data: VisualizationInput | Mapping[str, Any],
    token_limit: int = TOKEN_LIMIT,
) -> VisualizationRequest:
    """Attach the size-guard decision to a Visualize input."""
    data = validate_input(VisualizationInput, data)
    include = should_include_analysis(data.xray_image_url, data.analysis_results, token_limit)
    if not include:
        logger.warning(
            "Combined input length (%d) exceeds token limit (%d). Omitting analysis results.",
            len(data.xray_image_url) + len(data.analysis_results),
            token_limit,
        )
    return VisualizationRequest(
        xray_image_url=data.xray_image_url,
        analysis_results=data.analysis_results,
        include_analysis_results=include,
    )


# ---------------------------------------------------------------------------
# Stages
# ---------------------------------------------------------------------------


def analyze_xray_image(
    request: AnalysisRequest | Mapping[str, Any],
    adapter: ModelAdapter | None = None,
) -> AnalysisResult:
    """Ask the model for a structured finding description and a severity."""
    adapter = adapter or default_adapter()
    return adapter.invoke(
        ANALYZE_PROMPT_NAME,
        ANALYZE_PROMPT,
        AnalysisRequest,
        AnalysisResult,
        request,
    )


def summarize_analysis_results(
    request: SummaryRequest | Mapping[str, Any],
    adapter: ModelAdapter | None = None,
) -> SummaryResult:
    """Condense technical analysis text into a lay-accessible summary."""
    adapter = adapter or default_adapter()
    return adapter.invoke(
        SUMMARIZE_PROMPT_NAME,
        SUMMARIZE_PROMPT,
        SummaryRequest,
        SummaryResult,
        request,
    )


def generate_analysis_summary(
    request: SummaryRequest | Mapping[str, Any],
    adapter: ModelAdapter | None = None,
) -> SummaryResult:
    """Generate a fresh summary of the analysis for doctors and patients."""
    adapter = adapter or default_adapter()
    return adapter.invoke(
        GENERATE_SUMMARY_PROMPT_NAME,
        GENERATE_SUMMARY_PROMPT,
        SummaryRequest,
        SummaryResult,
        request,
    )


def visualize_analysis_results(
    data: VisualizationInput | Mapping[str, Any],
    adapter: ModelAdapter | None = None,
    token_limit: int = TOKEN_LIMIT,
) -> VisualizationResult:
    """Request an annotated image reference for the X-ray.

    The analysis text is only rendered into the prompt when the size guard
    allows it. The returned URL is passed through as-is.
    """
    adapter = adapter or default_adapter()
    request = build_visualization_request(data, token_limit)
    return adapter.invoke(
        VISUALIZE_PROMPT_NAME,
        VISUALIZE_PROMPT,
        VisualizationRequest,
        VisualizationResult,
        request,
    )


SUMMARY_FLOWS = {
    "summarize": summarize_analysis_results,
    "generate": generate_analysis_summary,
}
