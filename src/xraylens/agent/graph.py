"""LangGraph state graph for the X-ray pipeline.

Flow: analyze → (summarize ∥ visualize) → END

With ``parallel=False`` the two downstream stages run one after the other:
analyze → summarize → visualize → END
"""

from __future__ import annotations

import logging

from langgraph.graph import END, StateGraph

from xraylens.agent.nodes import PipelineNodes
from xraylens.agent.state import PipelineState
from xraylens.config import settings
from xraylens.llm import ModelAdapter, default_adapter
from xraylens.schemas import PipelineResult

logger = logging.getLogger(__name__)


def build_graph(
    adapter: ModelAdapter | None = None,
    parallel: bool | None = None,
    summary_flow: str | None = None,
):
    """Build and return the compiled pipeline graph."""
    nodes = PipelineNodes(
        adapter or default_adapter(),
        summary_flow=summary_flow or settings.summary_flow,
    )
    parallel = settings.parallel_stages if parallel is None else parallel

    graph = StateGraph(PipelineState)

    # Add nodes
    graph.add_node("analyze", nodes.analyze)
    graph.add_node("summarize", nodes.summarize)
    graph.add_node("visualize", nodes.visualize)

    # Set entry point
    graph.set_entry_point("analyze")

    # Wire edges
    if parallel:
        graph.add_edge("analyze", "summarize")
        graph.add_edge("analyze", "visualize")
        graph.add_edge("summarize", END)
        graph.add_edge("visualize", END)
    else:
        graph.add_edge("analyze", "summarize")
        graph.add_edge("summarize", "visualize")
        graph.add_edge("visualize", END)

    return graph.compile()


def run_pipeline(
    photo_url: str,
    adapter: ModelAdapter | None = None,
    parallel: bool | None = None,
    summary_flow: str | None = None,
) -> PipelineResult:
    """Run analyze, summarize and visualize for one image.

    Any stage failure propagates unchanged; no partial result is returned.
    """
    graph = build_graph(adapter, parallel=parallel, summary_flow=summary_flow)
    state = graph.invoke({"photo_url": photo_url})
    logger.info("Pipeline finished (severity: %s)", state["severity"])
    return PipelineResult(
        analysis=state["analysis"],
        severity=state["severity"],
        summary=state["summary"],
        visualized_image_url=state["visualized_image_url"],
    )
