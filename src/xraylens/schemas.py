"""Input and output contracts for each pipeline stage.

Models are frozen and serialize with camelCase aliases (``photoUrl``,
``xrayImageUrl``...). Python code uses the snake_case field names; both
spellings are accepted when validating.
"""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class StageModel(BaseModel):
    """Base for every stage contract."""

    model_config = ConfigDict(
        frozen=True,
        alias_generator=to_camel,
        populate_by_name=True,
        extra="ignore",
    )


# ---------------------------------------------------------------------------
# Analyze
# ---------------------------------------------------------------------------


class AnalysisRequest(StageModel):
    photo_url: str = Field(description="The URL of the X-ray image.")


class AnalysisResult(StageModel):
    analysis: str = Field(
        description=(
            "A detailed analysis of the X-ray image, including potential bone "
            "fractures, abnormalities, and other relevant observations. The "
            "analysis should describe the type of scan, the body part scanned, "
            "and a detailed description of any and all findings."
        )
    )
    severity: str = Field(
        description="The severity of the potential issues found in the X-ray image."
    )


# ---------------------------------------------------------------------------
# Summarize
# ---------------------------------------------------------------------------


class SummaryRequest(StageModel):
    analysis_results: str = Field(
        description="The AI analysis results of the X-ray image."
    )


class SummaryResult(StageModel):
    summary: str = Field(
        description=(
            "A textual summary of the AI analysis results, including potential "
            "issues and their severity."
        )
    )


# ---------------------------------------------------------------------------
# Visualize
# ---------------------------------------------------------------------------


class VisualizationInput(StageModel):
    """What a caller hands to the Visualize stage."""

    xray_image_url: str = Field(description="The URL of the X-ray image.")
    analysis_results: str = Field(description="The analysis results of the X-ray image.")


class VisualizationRequest(VisualizationInput):
    """Visualize input after the size guard has decided on the flag."""

    include_analysis_results: bool = Field(
        description="Whether the analysis results can be passed to the model."
    )


class VisualizationResult(StageModel):
    visualized_image_url: str = Field(
        description="The URL of the X-ray image with highlighted areas of concern."
    )


# ---------------------------------------------------------------------------
# Aggregate
# ---------------------------------------------------------------------------


class PipelineResult(StageModel):
    """The externally observable result of one pipeline run."""

    analysis: str
    severity: str
    summary: str
    visualized_image_url: str


def output_json_schema(model: type[BaseModel]) -> dict[str, Any]:
    """JSON schema handed to the model for structured output."""
    return model.model_json_schema(by_alias=True)
