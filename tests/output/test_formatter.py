"""Tests for output formatting."""

import json

from branchflow.graph.projection import project_actions
from branchflow.graph.workflow_graph import WorkflowGraph
from branchflow.output.formatter import format_graph, format_products, format_stages
from branchflow.records.models import ActionRecord, OrderStage, Product


class TestFormatGraph:
    def test_text(self, start_review_records):
        output = format_graph(project_actions(start_review_records))

        assert "ACTIONS:" in output
        assert "★ [1] Start (draft, low)" in output
        assert "• [2] Review" in output
        assert "[1] Start → [2] Review" in output
        assert "2 action(s), 1 connection(s)" in output

    def test_text_empty(self):
        output = format_graph(WorkflowGraph())

        assert output.count("(none)") == 2

    def test_text_shows_stage(self):
        record = ActionRecord.model_validate(
            {"id": 1, "name": "Start", "stage_id": [2, "Production"]}
        )
        assert "stage: Production" in format_graph(project_actions([record]))

    def test_json(self, start_review_records):
        data = json.loads(format_graph(project_actions(start_review_records), "json"))

        assert [n["id"] for n in data["nodes"]] == [1, 2]
        assert data["nodes"][0]["is_main"] is True
        assert data["nodes"][1]["position"] == {"x": 450, "y": 100}
        assert data["nodes"][0]["record"]["related_line_ids"] == [2]
        assert data["edges"] == [{"id": "e1-2", "source": 1, "target": 2}]


class TestFormatLookups:
    def test_products(self):
        output = format_products([Product(id=10, name="Widget")])
        assert "Widget" in output
        assert format_products([]) == "No products found"

    def test_stages_json(self):
        data = json.loads(format_stages([OrderStage(id=1, name="Quote")], "json"))
        assert data == [{"id": 1, "name": "Quote"}]
