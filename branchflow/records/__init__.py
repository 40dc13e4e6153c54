"""Records layer: remote entities, session context and errors."""

from .errors import (
    ActionValidationError,
    BranchflowError,
    RemoteCallError,
    SessionMissingError,
    SessionStoreError,
    TransportError,
)
from .models import (
    ActionFields,
    ActionRecord,
    ActionState,
    OrderStage,
    Priority,
    Product,
    Session,
    StageRef,
    normalize_stage,
)
from .session_store import SESSION_KEY, SessionStore

__all__ = [
    "ActionValidationError",
    "BranchflowError",
    "RemoteCallError",
    "SessionMissingError",
    "SessionStoreError",
    "TransportError",
    "ActionFields",
    "ActionRecord",
    "ActionState",
    "OrderStage",
    "Priority",
    "Product",
    "Session",
    "StageRef",
    "normalize_stage",
    "SESSION_KEY",
    "SessionStore",
]
