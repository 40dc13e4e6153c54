"""Remote layer: JSON-RPC transport and workflow client."""

from .client import LINK, UNLINK, WorkflowClient
from .rpc import JsonRpcTransport, authenticate

__all__ = [
    "LINK",
    "UNLINK",
    "WorkflowClient",
    "JsonRpcTransport",
    "authenticate",
]
