"""Exceptions raised while talking to the remote workflow store."""

from typing import Any


class BranchflowError(Exception):
    """Base exception for branchflow errors."""

    pass


class SessionMissingError(BranchflowError):
    """Raised when no complete session is available for a remote call."""

    def __init__(self, message: str = "No active session"):
        super().__init__(message)


class RemoteCallError(BranchflowError):
    """Raised when the remote store answers with an ``error`` member."""

    def __init__(self, message: str, code: int | None = None, data: Any = None):
        self.code = code
        self.data = data
        super().__init__(message)


class TransportError(BranchflowError):
    """Raised when the request itself fails (network, HTTP status, bad body)."""

    pass


class ActionValidationError(BranchflowError):
    """Raised when an action is rejected locally before any remote call."""

    pass


class SessionStoreError(BranchflowError):
    """Raised when the persisted session file cannot be read or written."""

    def __init__(self, message: str, path: str | None = None):
        self.path = path
        super().__init__(message)
