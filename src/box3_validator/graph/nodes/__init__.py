"""Graph nodes for the dossier analysis pipeline."""

from box3_validator.graph.nodes.aggregator import aggregate_node
from box3_validator.graph.nodes.next_step import next_step_node

__all__ = [
    "aggregate_node",
    "next_step_node",
]
