"""Main LangGraph orchestration of the dossier analysis.

This module only contains graph construction logic. All nodes are defined
in their respective modules under graph/nodes/.
"""

import logging

from langgraph.graph import END, START, StateGraph

from box3_validator.graph.nodes import aggregate_node, next_step_node
from box3_validator.graph.nodes.box3 import (
    actual_return_node,
    allocation_node,
    comparison_node,
    cost_netting_node,
)
from box3_validator.schemas.state import AnalysisState

logger = logging.getLogger(__name__)


def create_analysis_graph():
    """Create the dossier analysis graph.

    Graph flow:
    1. START -> aggregate (per-year inputs from the blueprint)
    2. aggregate -> actual_return (estimate missing bank interest)
    3. actual_return -> comparison (deemed vs. actual, indicative refund)
    4. comparison -> allocation (split per person)
    5. allocation -> cost_netting (gross minus fees)
    6. cost_netting -> next_step -> END

    The graph is compiled without a checkpointer: every invocation is a
    full, deterministic recomputation.

    Returns:
        Compiled StateGraph
    """
    logger.debug("Creating dossier analysis graph")

    graph = StateGraph(AnalysisState)

    graph.add_node("aggregate", aggregate_node)
    graph.add_node("actual_return", actual_return_node)
    graph.add_node("comparison", comparison_node)
    graph.add_node("allocation", allocation_node)
    graph.add_node("cost_netting", cost_netting_node)
    graph.add_node("next_step", next_step_node)

    graph.add_edge(START, "aggregate")
    graph.add_edge("aggregate", "actual_return")
    graph.add_edge("actual_return", "comparison")
    graph.add_edge("comparison", "allocation")
    graph.add_edge("allocation", "cost_netting")
    graph.add_edge("cost_netting", "next_step")
    graph.add_edge("next_step", END)

    return graph.compile()
