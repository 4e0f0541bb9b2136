"""LangGraph orchestration of the Box 3 calculation."""

from box3_validator.graph.main_graph import create_analysis_graph

__all__ = ["create_analysis_graph"]
