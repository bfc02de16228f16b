"""Pipeline state schema: the typed dictionary that flows through the graph."""

from __future__ import annotations

from typing import TypedDict


class PipelineState(TypedDict, total=False):
    """State that flows through every node of the X-ray pipeline.

    Each node writes a disjoint set of keys, so the summarize and visualize
    nodes can run in the same step without conflicting updates.
    """

    # Input
    photo_url: str

    # After analyze
    analysis: str
    severity: str

    # After summarize
    summary: str

    # After visualize
    visualized_image_url: str
