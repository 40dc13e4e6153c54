"""Selection and editing states of the workflow controller."""

from dataclasses import dataclass, field
from typing import Union

from ..records.models import ActionFields, ActionRecord


@dataclass(frozen=True)
class Idle:
    """Nothing selected, no draft open."""


@dataclass(frozen=True)
class NodeSelected:
    """One action is open in the detail panel."""

    action: ActionRecord

    @property
    def action_id(self) -> int:
        return self.action.id


@dataclass(frozen=True)
class CreatingDraft:
    """A new action is being filled in.

    When ``pending_source_id`` is set, the action is connected from that node
    once created.
    """

    pending_source_id: int | None = None
    fields: ActionFields = field(default_factory=ActionFields.draft_defaults)


SelectionState = Union[Idle, NodeSelected, CreatingDraft]
