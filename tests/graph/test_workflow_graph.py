"""Tests for WorkflowGraph."""

from branchflow.graph.workflow_graph import WorkflowGraph, edge_id, parse_edge_id
from branchflow.records.models import ActionRecord


def _record(action_id: int, name: str, targets=()) -> ActionRecord:
    return ActionRecord(id=action_id, name=name, related_line_ids=list(targets))


class TestEdgeIds:
    def test_round_trip(self):
        assert edge_id(1, 2) == "e1-2"
        assert parse_edge_id("e1-2") == (1, 2)

    def test_rejects_foreign_ids(self):
        assert parse_edge_id("reactflow__edge-1-2") is None
        assert parse_edge_id("e1") is None


class TestWorkflowGraphBasics:
    def test_add_action(self):
        graph = WorkflowGraph()
        node_id = graph.add_action(_record(1, "Start"), position=(100, 100), is_main=True)

        assert node_id == 1
        assert 1 in graph
        assert len(graph) == 1

        node = graph.get_node(1)
        assert node == {"position": (100, 100), "label": "Start", "is_main": True}
        assert graph.get_record(1).name == "Start"
        assert graph.get_main_node() == 1

    def test_node_data_does_not_carry_record(self):
        graph = WorkflowGraph()
        graph.add_action(_record(1, "Start"), position=(0, 0))

        assert "record" not in graph.get_node(1)
        assert "raw" not in graph.get_node(1)

    def test_add_relation(self):
        graph = WorkflowGraph()
        graph.add_action(_record(1, "Start"), position=(0, 0))
        graph.add_action(_record(2, "Review"), position=(350, 0))

        assert graph.add_relation(1, 2)
        assert graph.has_relation(1, 2)
        assert not graph.has_relation(2, 1)
        assert list(graph.iter_relations()) == [(1, 2, "e1-2")]

    def test_add_relation_to_unloaded_node(self):
        graph = WorkflowGraph()
        graph.add_action(_record(1, "Start"), position=(0, 0))

        assert not graph.add_relation(1, 99)
        assert 99 not in graph
        assert graph.edge_set() == set()

    def test_update_record_refreshes_label(self):
        graph = WorkflowGraph()
        graph.add_action(_record(1, "Start"), position=(0, 0))

        graph.update_record(_record(1, "Begin"))

        assert graph.get_node(1)["label"] == "Begin"
        assert graph.get_record(1).name == "Begin"


class TestWorkflowGraphQueries:
    def test_resolve_edge(self):
        graph = WorkflowGraph()
        graph.add_action(_record(1, "Start"), position=(0, 0))
        graph.add_action(_record(2, "Review"), position=(0, 0))
        graph.add_relation(1, 2)

        assert graph.resolve_edge("e1-2") == (1, 2)
        assert graph.resolve_edge("e2-1") is None
        assert graph.resolve_edge("garbage") is None

    def test_edge_set_and_relations(self):
        graph = WorkflowGraph()
        for action_id in (1, 2, 3):
            graph.add_action(_record(action_id, f"A{action_id}"), position=(0, 0))
        graph.add_relation(1, 2)
        graph.add_relation(1, 3)
        graph.add_relation(3, 2)

        assert graph.edge_set() == {(1, 2), (1, 3), (3, 2)}
        assert sorted(edge for _, _, edge in graph.iter_relations()) == [
            "e1-2",
            "e1-3",
            "e3-2",
        ]
