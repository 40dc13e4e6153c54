"""WorkflowGraph wrapper around networkx for projected workflows."""

import re
from typing import Any, Iterator

import networkx as nx

from ..records.models import ActionRecord

_EDGE_ID_PATTERN = re.compile(r"^e(\d+)-(\d+)$")


def edge_id(source_id: int, target_id: int) -> str:
    """Build the renderer-facing identifier of an edge."""
    return f"e{source_id}-{target_id}"


def parse_edge_id(value: str) -> tuple[int, int] | None:
    """Split an edge identifier back into ``(source, target)``."""
    match = _EDGE_ID_PATTERN.match(value)
    if not match:
        return None
    return int(match.group(1)), int(match.group(2))


class WorkflowGraph:
    """The visual graph of a product's workflow.

    Wraps a networkx DiGraph whose nodes are action identifiers carrying only
    what the renderer needs (position, label, main flag). Full records are kept
    in a separate lookup, see :meth:`get_record`.
    """

    def __init__(self):
        """Initialize an empty workflow graph."""
        self._graph = nx.DiGraph()
        self._records: dict[int, ActionRecord] = {}

    @property
    def graph(self) -> nx.DiGraph:
        """Get the underlying networkx graph."""
        return self._graph

    # -------------------------------------------------------------------------
    # Node management
    # -------------------------------------------------------------------------

    def add_action(
        self,
        record: ActionRecord,
        position: tuple[int, int],
        is_main: bool = False,
    ) -> int:
        """Add an action node to the graph.

        Args:
            record: The action record backing the node.
            position: The ``(x, y)`` canvas position.
            is_main: Whether the node is the visually distinguished main node.

        Returns:
            The node ID.
        """
        self._graph.add_node(
            record.id,
            position=position,
            label=record.name,
            is_main=is_main,
        )
        self._records[record.id] = record
        return record.id

    def add_relation(self, source_id: int, target_id: int) -> bool:
        """Add a directed relation edge between two loaded actions.

        Returns:
            True if the edge was added, False if an endpoint is not loaded.
        """
        if not (self._graph.has_node(source_id) and self._graph.has_node(target_id)):
            return False

        self._graph.add_edge(
            source_id, target_id, edge_id=edge_id(source_id, target_id)
        )
        return True

    def update_record(self, record: ActionRecord) -> None:
        """Replace the record behind an existing node and refresh its label."""
        if not self._graph.has_node(record.id):
            raise KeyError(record.id)
        self._records[record.id] = record
        self._graph.nodes[record.id]["label"] = record.name

    # -------------------------------------------------------------------------
    # Queries
    # -------------------------------------------------------------------------

    def __contains__(self, action_id: object) -> bool:
        return self._graph.has_node(action_id)

    def __len__(self) -> int:
        return self._graph.number_of_nodes()

    def node_ids(self) -> list[int]:
        """Get all node identifiers in insertion order."""
        return list(self._graph.nodes)

    def get_node(self, action_id: int) -> dict[str, Any] | None:
        """Get the renderer data of a node."""
        if self._graph.has_node(action_id):
            return dict(self._graph.nodes[action_id])
        return None

    def get_record(self, action_id: int) -> ActionRecord | None:
        """Get the full action record behind a node."""
        return self._records.get(action_id)

    def get_main_node(self) -> int | None:
        """Get the identifier of the main node, if any."""
        for node_id, data in self._graph.nodes(data=True):
            if data.get("is_main"):
                return node_id
        return None

    def has_relation(self, source_id: int, target_id: int) -> bool:
        """Check for a directed edge ``source -> target``."""
        return self._graph.has_edge(source_id, target_id)

    def edge_set(self) -> set[tuple[int, int]]:
        """Get all edges as ``(source, target)`` pairs."""
        return set(self._graph.edges)

    def resolve_edge(self, value: str) -> tuple[int, int] | None:
        """Resolve an edge identifier against the edges currently shown."""
        pair = parse_edge_id(value)
        if pair is None or not self.has_relation(*pair):
            return None
        return pair

    def iter_relations(self) -> Iterator[tuple[int, int, str]]:
        """Iterate over all relation edges.

        Yields:
            Tuples of (source_id, target_id, edge_id).
        """
        for source, target, data in self._graph.edges(data=True):
            yield source, target, data["edge_id"]
