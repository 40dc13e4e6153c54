"""Graph layer for projecting workflow actions onto networkx graphs."""

from .workflow_graph import WorkflowGraph, edge_id, parse_edge_id
from .projection import grid_position, project_actions

__all__ = [
    "WorkflowGraph",
    "edge_id",
    "parse_edge_id",
    "grid_position",
    "project_actions",
]
