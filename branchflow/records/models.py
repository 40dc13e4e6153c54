"""Pydantic models for records exchanged with the remote store."""

import logging
from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

logger = logging.getLogger(__name__)


class ActionState(str, Enum):
    """Lifecycle state of an action."""

    DRAFT = "draft"
    IN_PROGRESS = "in_progress"
    DONE = "done"
    CANCELLED = "cancelled"


class Priority(str, Enum):
    """Priority of an action."""

    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    URGENT = "urgent"


class StageRef(BaseModel):
    """Reference to an order stage, with its denormalized name."""

    id: int
    name: str = ""


def normalize_stage(value: Any) -> StageRef | None:
    """Normalize the remote many2one shape of ``stage_id``.

    The store returns ``False`` when unset, ``[id, name]`` from reads, and a
    bare integer from some write echoes.
    """
    if value is None or value is False:
        return None
    if isinstance(value, StageRef):
        return value
    if isinstance(value, dict):
        return StageRef.model_validate(value)
    if isinstance(value, (list, tuple)):
        if not value:
            return None
        name = value[1] if len(value) > 1 and value[1] else ""
        return StageRef(id=int(value[0]), name=str(name))
    if isinstance(value, bool):
        return None
    return StageRef(id=int(value))


def _is_member(enum: type[Enum], value: Any) -> bool:
    if isinstance(value, enum):
        return True
    return any(member.value == value for member in enum)


class ActionRecord(BaseModel):
    """A workflow action (``dpi.workflow.line``) as read from the store."""

    model_config = ConfigDict(populate_by_name=True)

    id: int
    name: str
    description: str = Field(default="", alias="action_description")
    state: ActionState = ActionState.DRAFT
    priority: Priority = Priority.LOW
    is_automatic: bool = False
    completes_order_line: bool = False
    require_evidence: bool = False
    stage: StageRef | None = Field(default=None, alias="stage_id")
    related_line_ids: list[int] = Field(default_factory=list)

    @model_validator(mode="before")
    @classmethod
    def normalize_record(cls, data: Any) -> Any:
        """Turn the store's ``False`` placeholders into proper empty values."""
        if not isinstance(data, dict):
            return data

        data = dict(data)
        for key in ("action_description", "description"):
            if data.get(key) is False or (key in data and data[key] is None):
                data[key] = ""
        for key, enum in (("state", ActionState), ("priority", Priority)):
            if data.get(key) is False or (key in data and data[key] is None):
                data.pop(key)
            elif key in data and not _is_member(enum, data[key]):
                logger.warning(
                    "Action %s has unknown %s %r, using the default",
                    data.get("id"),
                    key,
                    data.pop(key),
                )
        for key in ("stage_id", "stage"):
            if key in data:
                data[key] = normalize_stage(data[key])
        if data.get("related_line_ids") is False:
            data["related_line_ids"] = []
        return data

    @field_validator("related_line_ids")
    @classmethod
    def dedupe_targets(cls, value: list[int]) -> list[int]:
        """Keep first occurrence order; the relation is a set."""
        return list(dict.fromkeys(value))

    @property
    def stage_id(self) -> int | None:
        """Get the bare stage identifier, if any."""
        return self.stage.id if self.stage else None


class ActionFields(BaseModel):
    """A partial set of action fields for create or update calls.

    Only fields that were explicitly set are sent to the store.
    """

    name: str | None = None
    description: str | None = None
    state: ActionState | None = None
    priority: Priority | None = None
    is_automatic: bool | None = None
    completes_order_line: bool | None = None
    require_evidence: bool | None = None
    stage_id: int | None = None

    @classmethod
    def draft_defaults(cls) -> "ActionFields":
        """Get the field values a fresh draft starts from."""
        return cls(
            name="",
            description="",
            state=ActionState.DRAFT,
            priority=Priority.LOW,
            is_automatic=False,
            completes_order_line=False,
            require_evidence=False,
            stage_id=None,
        )

    def merged(self, other: "ActionFields") -> "ActionFields":
        """Return a copy with the fields set on ``other`` applied on top."""
        return self.model_copy(update=other.model_dump(exclude_unset=True))

    def to_wire(self, include_name: bool = True) -> dict[str, Any]:
        """Encode the set fields the way the store expects them."""
        values = self.model_dump(exclude_unset=True, mode="json")
        if not include_name:
            values.pop("name", None)
        wire: dict[str, Any] = {}
        for key, value in values.items():
            if key == "description":
                wire["action_description"] = value or ""
            elif key == "stage_id":
                wire["stage_id"] = value if value else False
            elif value is None:
                continue
            else:
                wire[key] = value
        return wire

    def apply_to(
        self, record: ActionRecord, stages: dict[int, str] | None = None
    ) -> ActionRecord:
        """Overlay the set fields onto a record snapshot.

        Args:
            record: The snapshot to update.
            stages: Lookup of stage id to name used to denormalize ``stage_id``.

        Returns:
            A new ActionRecord with the fields applied.
        """
        update: dict[str, Any] = {}
        for key, value in self.model_dump(exclude_unset=True).items():
            if key == "stage_id":
                update["stage"] = (
                    StageRef(id=value, name=(stages or {}).get(value, ""))
                    if value
                    else None
                )
            elif key == "description":
                update["description"] = value or ""
            elif value is not None:
                update[key] = value
        return record.model_copy(update=update)


class OrderStage(BaseModel):
    """An order stage (``dpi.order.state``), used as a picker lookup."""

    id: int
    name: str


class Product(BaseModel):
    """A product that workflow actions are scoped to."""

    id: int
    name: str


class Session(BaseModel):
    """Authenticated session context for remote calls."""

    server_url: str = ""
    database: str = ""
    username: str = ""
    uid: int | None = None
    password: str | None = None

    @property
    def is_complete(self) -> bool:
        """Check that every value a data call needs is present."""
        return bool(
            self.server_url
            and self.database
            and self.uid
            and self.uid > 0
            and self.password
        )
