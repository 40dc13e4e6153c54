"""Projection of remote action records onto a WorkflowGraph."""

from typing import Sequence

from ..config import LayoutSettings
from ..records.models import ActionRecord
from .workflow_graph import WorkflowGraph


def grid_position(index: int, layout: LayoutSettings) -> tuple[int, int]:
    """Get the placeholder grid position of the ``index``-th node."""
    column, row = index % layout.columns, index // layout.columns
    return (
        layout.base + column * layout.column_width,
        layout.base + row * layout.row_height,
    )


def project_actions(
    records: Sequence[ActionRecord],
    layout: LayoutSettings | None = None,
) -> WorkflowGraph:
    """Build a WorkflowGraph from a product's action records.

    Args:
        records: The action records, in the order the store returned them.
        layout: Grid layout settings; defaults are used if omitted.

    Returns:
        A WorkflowGraph with one node per record and one edge per relation
        whose target is also loaded.
    """
    layout = layout or LayoutSettings()
    graph = WorkflowGraph()

    # Add all nodes first; the first record is the main node
    for index, record in enumerate(records):
        graph.add_action(
            record,
            position=grid_position(index, layout),
            is_main=index == 0,
        )

    # Add relations (after all nodes exist); dangling targets are skipped
    for record in records:
        for target_id in record.related_line_ids:
            graph.add_relation(record.id, target_id)

    return graph
