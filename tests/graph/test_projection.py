"""Tests for projecting action records onto a graph."""

from branchflow.config import LayoutSettings
from branchflow.graph.projection import grid_position, project_actions
from branchflow.records.models import ActionRecord


def _records(*rows) -> list[ActionRecord]:
    return [
        ActionRecord(id=action_id, name=name, related_line_ids=list(targets))
        for action_id, name, targets in rows
    ]


class TestProjection:
    def test_start_review_scenario(self, start_review_records):
        graph = project_actions(start_review_records)

        assert set(graph.node_ids()) == {1, 2}
        assert graph.get_node(1)["is_main"] is True
        assert graph.get_node(2)["is_main"] is False
        assert graph.edge_set() == {(1, 2)}

    def test_grid_layout(self):
        records = _records(*[(i, f"A{i}", ()) for i in range(1, 8)])

        graph = project_actions(records)

        positions = [graph.get_node(i)["position"] for i in range(1, 8)]
        assert positions == [
            (100, 100),
            (450, 100),
            (800, 100),
            (100, 300),
            (450, 300),
            (800, 300),
            (100, 500),
        ]

    def test_custom_layout(self):
        layout = LayoutSettings(base=0, columns=2, column_width=10, row_height=20)
        assert grid_position(3, layout) == (10, 20)

    def test_deterministic(self):
        records = _records((3, "C", (1,)), (1, "A", (2, 3)), (2, "B", ()))

        first = project_actions(records)
        second = project_actions(records)

        assert [first.get_node(n) for n in first.node_ids()] == [
            second.get_node(n) for n in second.node_ids()
        ]
        assert first.edge_set() == second.edge_set()
        assert list(first.iter_relations()) == list(second.iter_relations())

    def test_main_follows_input_order(self):
        graph = project_actions(_records((7, "Late", ()), (1, "Early", ())))
        assert graph.get_main_node() == 7

    def test_edges_are_directed(self):
        graph = project_actions(_records((1, "A", (2,)), (2, "B", ())))

        assert graph.has_relation(1, 2)
        assert not graph.has_relation(2, 1)

    def test_reciprocal_edges_need_both_records(self):
        graph = project_actions(_records((1, "A", (2,)), (2, "B", (1,))))
        assert graph.edge_set() == {(1, 2), (2, 1)}

    def test_dangling_targets_dropped(self):
        records = _records((1, "A", (2, 99)), (2, "B", (98,)))

        graph = project_actions(records)

        assert graph.edge_set() == {(1, 2)}
        assert all(99 not in edge and 98 not in edge for edge in graph.edge_set())
        # the record itself keeps the relation
        assert graph.get_record(1).related_line_ids == [2, 99]

    def test_empty(self):
        graph = project_actions([])

        assert len(graph) == 0
        assert graph.get_main_node() is None
