"""Stateful controller keeping the workflow graph in sync with the store."""

import logging
from contextlib import contextmanager
from dataclasses import replace
from typing import Callable, Iterator

from ..config import LayoutSettings
from ..graph.projection import project_actions
from ..graph.workflow_graph import WorkflowGraph
from ..records.models import ActionFields, ActionRecord, OrderStage
from ..remote.client import WorkflowClient
from .state import CreatingDraft, Idle, NodeSelected, SelectionState

logger = logging.getLogger(__name__)

Notifier = Callable[[str], None]


def _log_notice(message: str) -> None:
    logger.warning(message)


class WorkflowController:
    """Owns the projected graph and the selection state of one product.

    Topology changes that come back from the store are applied by a full
    refresh; the only local patch is the edge added by a successful connect.
    Every failed remote call is reported through ``notify`` and leaves the
    graph and the selection exactly as they were.
    """

    def __init__(
        self,
        client: WorkflowClient,
        product_id: int,
        notify: Notifier | None = None,
        layout: LayoutSettings | None = None,
    ):
        """Initialize the controller.

        Args:
            client: Client for the remote store.
            product_id: The product whose workflow is edited.
            notify: Sink for user-visible error messages.
            layout: Grid layout settings for projections.
        """
        self.client = client
        self.product_id = product_id
        self.layout = layout or LayoutSettings()
        self._notify = notify or _log_notice

        self.graph = WorkflowGraph()
        self.state: SelectionState = Idle()
        self.order_stages: list[OrderStage] = []
        self.loading = False

    @contextmanager
    def _busy(self) -> Iterator[None]:
        self.loading = True
        try:
            yield
        finally:
            self.loading = False

    def report(self, message: str) -> None:
        """Send a user-visible error message to the notifier."""
        self._notify(message)

    # -------------------------------------------------------------------------
    # State accessors
    # -------------------------------------------------------------------------

    @property
    def selected(self) -> ActionRecord | None:
        """Get the selection snapshot shown in the detail panel."""
        if isinstance(self.state, NodeSelected):
            return self.state.action
        return None

    @property
    def draft(self) -> CreatingDraft | None:
        """Get the open draft, if any."""
        if isinstance(self.state, CreatingDraft):
            return self.state
        return None

    def stage_names(self) -> dict[int, str]:
        """Get the order stage lookup used by the stage picker."""
        return {stage.id: stage.name for stage in self.order_stages}

    # -------------------------------------------------------------------------
    # Loading
    # -------------------------------------------------------------------------

    async def load(self) -> WorkflowGraph:
        """Load the workflow graph and the order stage lookup."""
        with self._busy():
            await self._refresh()
            self.order_stages = await self.client.list_order_stages()
        return self.graph

    async def refresh(self) -> WorkflowGraph:
        """Replace the local graph with a fresh projection of the store."""
        with self._busy():
            return await self._refresh()

    async def set_product(self, product_id: int) -> WorkflowGraph:
        """Switch to another product and load its workflow."""
        self.product_id = product_id
        self.state = Idle()
        self.graph = WorkflowGraph()
        return await self.load()

    async def _refresh(self) -> WorkflowGraph:
        records = await self.client.list_actions_for_product(self.product_id)
        self.graph = project_actions(records, self.layout)
        logger.debug(
            "Projected %d actions and %d relations for product %s",
            len(self.graph),
            len(self.graph.edge_set()),
            self.product_id,
        )
        return self.graph

    # -------------------------------------------------------------------------
    # Relations
    # -------------------------------------------------------------------------

    async def connect(self, source_id: int, target_id: int) -> bool:
        """Relate ``source_id -> target_id`` and show the edge on success."""
        with self._busy():
            return await self._connect(source_id, target_id)

    async def _connect(self, source_id: int, target_id: int) -> bool:
        if not await self.client.add_relation(source_id, target_id):
            self.report(f"Could not save the connection {source_id} -> {target_id}")
            return False

        if self.graph.add_relation(source_id, target_id):
            record = self.graph.get_record(source_id)
            if record is not None and target_id not in record.related_line_ids:
                self.graph.update_record(
                    record.model_copy(
                        update={
                            "related_line_ids": [*record.related_line_ids, target_id]
                        }
                    )
                )
        return True

    async def disconnect(self, edge_id: str) -> bool:
        """Remove the relation behind an edge, then refresh."""
        pair = self.graph.resolve_edge(edge_id)
        if pair is None:
            self.report(f"Unknown connection {edge_id}")
            return False

        source_id, target_id = pair
        with self._busy():
            if not await self.client.remove_relation(source_id, target_id):
                self.report(f"Could not remove the connection {source_id} -> {target_id}")
                return False
            await self._refresh()
        return True

    async def delete_edge(self, edge_id: str) -> bool:
        """Delete an edge from the context menu; same as :meth:`disconnect`."""
        return await self.disconnect(edge_id)

    # -------------------------------------------------------------------------
    # Drafts
    # -------------------------------------------------------------------------

    def create_draft(self, source_id: int | None = None) -> CreatingDraft:
        """Open a new draft, optionally to be connected from ``source_id``."""
        self.state = CreatingDraft(pending_source_id=source_id)
        return self.state

    def edit_draft(self, fields: ActionFields) -> None:
        """Merge edited fields into the open draft."""
        if isinstance(self.state, CreatingDraft):
            self.state = replace(self.state, fields=self.state.fields.merged(fields))

    def cancel_draft(self) -> None:
        """Discard the open draft."""
        if isinstance(self.state, CreatingDraft):
            self.state = Idle()

    async def confirm_create(self, fields: ActionFields | None = None) -> int | None:
        """Create the drafted action.

        Args:
            fields: Field values overriding the draft's own.

        Returns:
            The new action identifier, or None if nothing was created.
        """
        draft = self.state
        if not isinstance(draft, CreatingDraft):
            self.report("There is no action being created")
            return None

        values = draft.fields.merged(fields) if fields is not None else draft.fields
        name = (values.name or "").strip()
        if not name:
            self.report("The action name is required")
            return None

        with self._busy():
            new_id = await self.client.create_action(self.product_id, name, values)
            if new_id is None:
                self.report(f"Could not create the action '{name}'")
                return None

            if draft.pending_source_id is not None:
                await self._connect(draft.pending_source_id, new_id)

            await self._refresh()

        if isinstance(self.state, CreatingDraft):
            self.state = Idle()
        logger.info("Created action %s for product %s", new_id, self.product_id)
        return new_id

    # -------------------------------------------------------------------------
    # Selection and editing
    # -------------------------------------------------------------------------

    def select_node(self, action_id: int) -> bool:
        """Open an action in the detail panel, dropping any draft."""
        record = self.graph.get_record(action_id)
        if record is None:
            logger.debug("Ignoring selection of unknown action %s", action_id)
            return False
        self.state = NodeSelected(record)
        return True

    def clear_selection(self) -> None:
        """Close the detail panel or draft."""
        self.state = Idle()

    async def update_selected(self, fields: ActionFields) -> bool:
        """Write edited fields of the selected action.

        On success the graph is refreshed and the edit is applied onto the
        selection snapshot. On failure the snapshot is left unchanged.
        """
        selection = self.state
        if not isinstance(selection, NodeSelected):
            self.report("No action is selected")
            return False

        action_id = selection.action_id
        with self._busy():
            if not await self.client.update_action(action_id, fields):
                self.report(f"Could not update the action '{selection.action.name}'")
                return False
            await self._refresh()

        base = self.graph.get_record(action_id) or selection.action
        snapshot = fields.apply_to(base, self.stage_names())
        if isinstance(self.state, NodeSelected) and self.state.action_id == action_id:
            self.state = NodeSelected(snapshot)
        return True

    async def delete_node(self, action_id: int) -> bool:
        """Delete an action. Confirmation is the caller's responsibility."""
        with self._busy():
            if not await self.client.delete_action(action_id):
                self.report(f"Could not delete the action {action_id}")
                return False

            if isinstance(self.state, NodeSelected) and self.state.action_id == action_id:
                self.state = Idle()
            elif (
                isinstance(self.state, CreatingDraft)
                and self.state.pending_source_id == action_id
            ):
                self.state = replace(self.state, pending_source_id=None)

            await self._refresh()
        return True
