"""Output formatting for projected workflows and lookups."""

import json
from typing import Literal, Sequence

from ..graph.workflow_graph import WorkflowGraph
from ..records.models import ActionRecord, OrderStage, Product

OutputFormat = Literal["text", "json"]


def format_graph(graph: WorkflowGraph, format: OutputFormat = "text") -> str:
    """Format a workflow graph for output.

    Args:
        graph: The projected workflow graph.
        format: Output format ("text" or "json").

    Returns:
        Formatted string representation.
    """
    if format == "json":
        return _format_graph_json(graph)
    return _format_graph_text(graph)


def _format_graph_text(graph: WorkflowGraph) -> str:
    """Format a graph as human-readable text."""
    lines: list[str] = []

    # Actions section
    lines.append("ACTIONS:")
    if len(graph):
        for node_id in graph.node_ids():
            lines.append(f"  {_format_action_text(graph, node_id)}")
    else:
        lines.append("  (none)")

    lines.append("")

    # Connections section
    lines.append("CONNECTIONS:")
    relations = list(graph.iter_relations())
    if relations:
        for source, target, _ in relations:
            lines.append(f"  {_label(graph, source)} → {_label(graph, target)}")
    else:
        lines.append("  (none)")

    lines.append("")
    lines.append(f"{len(graph)} action(s), {len(relations)} connection(s)")

    return "\n".join(lines)


def _label(graph: WorkflowGraph, node_id: int) -> str:
    node = graph.get_node(node_id)
    return f"[{node_id}] {node['label']}" if node else f"[{node_id}]"


def _format_action_text(graph: WorkflowGraph, node_id: int) -> str:
    """Format a single action as text."""
    node = graph.get_node(node_id) or {}
    record = graph.get_record(node_id)

    # Main node marker
    symbol = "★" if node.get("is_main") else "•"

    text = f"{symbol} {_label(graph, node_id)}"
    if record is not None:
        text += f" ({record.state.value}, {record.priority.value})"
        if record.stage:
            text += f" stage: {record.stage.name or record.stage.id}"
    return text


def _record_json(record: ActionRecord | None) -> dict | None:
    if record is None:
        return None
    return record.model_dump(mode="json")


def _format_graph_json(graph: WorkflowGraph) -> str:
    """Format a graph as JSON."""
    data = {
        "nodes": [
            {
                "id": node_id,
                "label": node["label"],
                "position": {"x": node["position"][0], "y": node["position"][1]},
                "is_main": node["is_main"],
                "record": _record_json(graph.get_record(node_id)),
            }
            for node_id, node in (
                (node_id, graph.get_node(node_id)) for node_id in graph.node_ids()
            )
        ],
        "edges": [
            {"id": eid, "source": source, "target": target}
            for source, target, eid in graph.iter_relations()
        ],
    }
    return json.dumps(data, indent=2)


def format_products(products: Sequence[Product], format: OutputFormat = "text") -> str:
    """Format the product listing."""
    if format == "json":
        return json.dumps([p.model_dump() for p in products], indent=2)
    if not products:
        return "No products found"
    return "\n".join(f"{p.id:>6}  {p.name}" for p in products)


def format_stages(stages: Sequence[OrderStage], format: OutputFormat = "text") -> str:
    """Format the order stage lookup."""
    if format == "json":
        return json.dumps([s.model_dump() for s in stages], indent=2)
    if not stages:
        return "No order stages found"
    return "\n".join(f"{s.id:>6}  {s.name}" for s in stages)
