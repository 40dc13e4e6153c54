"""Controller layer: selection state machine and store synchronization."""

from .controller import Notifier, WorkflowController
from .state import CreatingDraft, Idle, NodeSelected, SelectionState

__all__ = [
    "Notifier",
    "WorkflowController",
    "CreatingDraft",
    "Idle",
    "NodeSelected",
    "SelectionState",
]
