"""Box 3 calculation nodes for the analysis graph.

Each module contains both the LangGraph node and its calculation logic.
"""

from box3_validator.graph.nodes.box3.actual_return import actual_return_node
from box3_validator.graph.nodes.box3.allocation import allocation_node
from box3_validator.graph.nodes.box3.comparison import comparison_node
from box3_validator.graph.nodes.box3.cost_netting import cost_netting_node

__all__ = [
    "actual_return_node",
    "comparison_node",
    "allocation_node",
    "cost_netting_node",
]
