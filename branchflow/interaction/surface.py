"""Translation of canvas gestures into controller operations."""

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Callable, Iterable

from pydantic import ValidationError

from ..controller.controller import WorkflowController
from ..controller.state import CreatingDraft
from ..records.models import ActionFields

logger = logging.getLogger(__name__)

Confirm = Callable[[str], bool]


class MenuKind(str, Enum):
    """What a context menu is bound to."""

    EDGE = "edge"
    NODE = "node"


@dataclass(frozen=True)
class ContextMenu:
    """A transient context menu bound to one edge or node."""

    kind: MenuKind
    target: str | int
    x: float = 0
    y: float = 0


def _always(_prompt: str) -> bool:
    return True


class InteractionSurface:
    """Maps raw gestures reported by the renderer onto a WorkflowController.

    Mutating gestures are dropped while the controller is busy; nothing is
    queued.
    """

    def __init__(self, controller: WorkflowController, confirm: Confirm | None = None):
        """Initialize the surface.

        Args:
            controller: The controller that performs the operations.
            confirm: Confirmation dialog for destructive actions; returns True
                to proceed.
        """
        self.controller = controller
        self.confirm = confirm or _always
        self.menu: ContextMenu | None = None
        self._connecting_from: int | None = None

    def _accepting(self, gesture: str) -> bool:
        if self.controller.loading:
            logger.debug("Ignoring %s while busy", gesture)
            return False
        return True

    # -------------------------------------------------------------------------
    # Drag to connect
    # -------------------------------------------------------------------------

    def connect_start(self, node_id: int) -> None:
        """A drag started on the handle of ``node_id``."""
        self._connecting_from = node_id

    async def connect_end(self, target_node_id: int | None) -> bool:
        """A drag was released on a node, or on empty canvas when None."""
        source_id, self._connecting_from = self._connecting_from, None
        if source_id is None or not self._accepting("connect"):
            return False

        if target_node_id is None:
            self.controller.create_draft(source_id)
            return True
        return await self.controller.connect(source_id, target_node_id)

    # -------------------------------------------------------------------------
    # Clicks and context menus
    # -------------------------------------------------------------------------

    def click_node(self, node_id: int) -> bool:
        """Select a node and close any context menu."""
        self.menu = None
        return self.controller.select_node(node_id)

    def click_pane(self) -> None:
        """Close any context menu."""
        self.menu = None

    def open_edge_menu(self, edge_id: str, x: float = 0, y: float = 0) -> ContextMenu:
        """Open the context menu of an edge."""
        self.menu = ContextMenu(MenuKind.EDGE, edge_id, x, y)
        return self.menu

    def open_node_menu(self, node_id: int, x: float = 0, y: float = 0) -> ContextMenu:
        """Open the context menu of a node."""
        self.menu = ContextMenu(MenuKind.NODE, node_id, x, y)
        return self.menu

    async def menu_delete(self) -> bool:
        """Run the delete entry of the open context menu, then close it."""
        menu, self.menu = self.menu, None
        if menu is None or not self._accepting("menu delete"):
            return False

        if menu.kind == MenuKind.EDGE:
            return await self.controller.delete_edge(str(menu.target))
        return await self._delete_node_confirmed(int(menu.target))

    async def _delete_node_confirmed(self, node_id: int) -> bool:
        node = self.controller.graph.get_node(node_id)
        label = node["label"] if node else str(node_id)
        if not self.confirm(f'Delete "{label}"?'):
            return False
        return await self.controller.delete_node(node_id)

    # -------------------------------------------------------------------------
    # Keyboard and panels
    # -------------------------------------------------------------------------

    async def press_delete(
        self, node_ids: Iterable[int] = (), edge_ids: Iterable[str] = ()
    ) -> int:
        """Delete the selected edges, then the selected nodes.

        Each element is deleted with its own remote call.

        Returns:
            The number of elements deleted.
        """
        if not self._accepting("delete"):
            return 0

        deleted = 0
        for edge_id in edge_ids:
            if await self.controller.delete_edge(edge_id):
                deleted += 1
        for node_id in node_ids:
            if await self._delete_node_confirmed(node_id):
                deleted += 1
        return deleted

    def add_action(self) -> None:
        """Open an unconnected draft from the toolbar."""
        self.menu = None
        self.controller.create_draft(None)

    async def edit_field(self, **values) -> bool:
        """Apply an inline field edit to the draft or the selected action."""
        try:
            fields = ActionFields(**values)
        except ValidationError as exc:
            fields_in_error = ", ".join(
                str(error["loc"][0]) for error in exc.errors() if error["loc"]
            )
            self.controller.report(f"Invalid value for {fields_in_error}")
            return False
        if isinstance(self.controller.state, CreatingDraft):
            self.controller.edit_draft(fields)
            return True
        if not self._accepting("field edit"):
            return False
        return await self.controller.update_selected(fields)

    async def submit_draft(self) -> int | None:
        """Confirm the open draft."""
        if not self._accepting("create"):
            return None
        return await self.controller.confirm_create()
