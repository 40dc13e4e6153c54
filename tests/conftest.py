"""Shared fixtures for tests."""

import json
from typing import Any

import httpx
import pytest

from branchflow.controller.controller import WorkflowController
from branchflow.records.models import ActionRecord, Session
from branchflow.remote.client import WorkflowClient
from branchflow.remote.rpc import JsonRpcTransport

PRODUCT_ID = 10


class FakeStore:
    """In-memory stand-in for the JSON-RPC record store."""

    def __init__(self, lines=None, stages=None, products=None, uid=7):
        self.lines: dict[int, dict[str, Any]] = {
            line["id"]: dict(line) for line in (lines or [])
        }
        self.stages = list(stages or [])
        self.products = list(products or [])
        self.uid = uid
        self.next_id = max(self.lines, default=0) + 1
        self.calls: list[tuple[str, str, list]] = []
        self.requests: list[dict] = []
        self._failures: dict[str, str] = {}

    def fail(self, operation: str, kind: str = "error") -> None:
        """Make the next call of ``operation`` fail ("error" or "http")."""
        self._failures[operation] = kind

    def operations(self) -> list[str]:
        return [operation for _, operation, _ in self.calls]

    def handler(self, request: httpx.Request) -> httpx.Response:
        body = json.loads(request.content)
        self.requests.append(body)
        params = body["params"]

        if params["service"] == "common":
            _, _, password, _ = params["args"]
            self.calls.append(("common", "authenticate", params["args"]))
            return self._ok(body, self.uid if password == "secret" else False)

        _, _, _, model, operation, *rest = params["args"]
        self.calls.append((model, operation, rest))

        kind = self._failures.pop(operation, None)
        if kind == "http":
            return httpx.Response(500, text="Internal Server Error")
        if kind == "error":
            return self._error(body, f"{operation} refused")

        try:
            result = getattr(self, f"_{operation}")(model, rest)
        except KeyError as e:
            return self._error(body, f"Record does not exist: {e}")
        return self._ok(body, result)

    def _ok(self, body: dict, result: Any) -> httpx.Response:
        return httpx.Response(
            200, json={"jsonrpc": "2.0", "id": body.get("id"), "result": result}
        )

    def _error(self, body: dict, message: str) -> httpx.Response:
        return httpx.Response(
            200,
            json={
                "jsonrpc": "2.0",
                "id": body.get("id"),
                "error": {
                    "code": 200,
                    "message": "Odoo Server Error",
                    "data": {"message": message},
                },
            },
        )

    def _read(self, line: dict) -> dict:
        row = dict(line)
        stage = row.get("stage_id")
        if isinstance(stage, int) and not isinstance(stage, bool) and stage:
            names = {s["id"]: s["name"] for s in self.stages}
            row["stage_id"] = [stage, names.get(stage, "")]
        row["related_line_ids"] = list(row.get("related_line_ids", []))
        return row

    def _get_products_data(self, model, rest):
        return {"products": self.products}

    def _search_read(self, model, rest):
        if model == "dpi.order.state":
            return self.stages
        domain = rest[0][0]
        rows = []
        for line in sorted(self.lines.values(), key=lambda l: l["id"]):
            if all(line.get(field) == value for field, _, value in domain):
                rows.append(self._read(line))
        return rows

    def _create(self, model, rest):
        values = dict(rest[0][0])
        new_id = self.next_id
        self.next_id += 1
        values.setdefault("related_line_ids", [])
        self.lines[new_id] = {"id": new_id, **values}
        return new_id

    def _write(self, model, rest):
        ids, values = rest[0]
        for record_id in ids:
            line = self.lines[record_id]
            for key, value in values.items():
                if key == "related_line_ids":
                    targets = list(line.get("related_line_ids", []))
                    for command, target in value:
                        if command == 4 and target not in targets:
                            targets.append(target)
                        elif command == 3 and target in targets:
                            targets.remove(target)
                    line["related_line_ids"] = targets
                else:
                    line[key] = value
        return True

    def _unlink(self, model, rest):
        for record_id in rest[0][0]:
            del self.lines[record_id]
        return True


def make_line(line_id: int, name: str, targets=(), **extra) -> dict:
    """Build a stored workflow line for product PRODUCT_ID."""
    line = {
        "id": line_id,
        "name": name,
        "action_description": False,
        "state": "draft",
        "priority": "low",
        "is_automatic": False,
        "completes_order_line": False,
        "require_evidence": False,
        "stage_id": False,
        "related_line_ids": list(targets),
        "product_id": PRODUCT_ID,
        "is_template": True,
    }
    line.update(extra)
    return line


@pytest.fixture
def product_id() -> int:
    return PRODUCT_ID


@pytest.fixture
def session() -> Session:
    """Return a complete session."""
    return Session(
        server_url="https://erp.example.com",
        database="prod",
        username="admin",
        uid=7,
        password="secret",
    )


@pytest.fixture
def store() -> FakeStore:
    """Return a store holding a two-step workflow: Start -> Review."""
    return FakeStore(
        lines=[
            make_line(1, "Start", [2]),
            make_line(2, "Review"),
            make_line(50, "Other product", product_id=99),
        ],
        stages=[{"id": 1, "name": "Quote"}, {"id": 2, "name": "Production"}],
        products=[{"id": PRODUCT_ID, "name": "Widget"}, {"id": 99, "name": "Gadget"}],
    )


@pytest.fixture
def transport(store) -> JsonRpcTransport:
    """Return a transport wired to the fake store."""
    return JsonRpcTransport(transport=httpx.MockTransport(store.handler))


@pytest.fixture
def client(session, transport) -> WorkflowClient:
    return WorkflowClient(session, transport)


@pytest.fixture
def messages() -> list[str]:
    """Collect user-visible error messages."""
    return []


@pytest.fixture
def controller(client, messages) -> WorkflowController:
    return WorkflowController(client, PRODUCT_ID, notify=messages.append)


@pytest.fixture
def start_review_records() -> list[ActionRecord]:
    """Return the Start -> Review records as read from the store."""
    return [
        ActionRecord.model_validate({"id": 1, "name": "Start", "related_line_ids": [2]}),
        ActionRecord.model_validate({"id": 2, "name": "Review", "related_line_ids": []}),
    ]
