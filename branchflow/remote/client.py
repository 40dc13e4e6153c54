"""Workflow-level operations against the remote record store."""

import logging
from typing import Any

from pydantic import ValidationError

from ..records.errors import (
    ActionValidationError,
    RemoteCallError,
    SessionMissingError,
    TransportError,
)
from ..records.models import ActionFields, ActionRecord, OrderStage, Product, Session
from .rpc import JsonRpcTransport

logger = logging.getLogger(__name__)

WORKFLOW_LINE = "dpi.workflow.line"
ORDER_STATE = "dpi.order.state"
WEBSERVICE = "dpi.webservice"

# Many2many write commands understood by the store
LINK = 4
UNLINK = 3

_CALL_ERRORS = (SessionMissingError, RemoteCallError, TransportError)


class WorkflowClient:
    """Translates graph-level intents into record store calls.

    Every operation normalizes failures into an empty list, ``None`` or
    ``False``; errors are logged here and never raised to the caller.
    """

    def __init__(
        self,
        session: Session | None,
        transport: JsonRpcTransport | None = None,
    ):
        """Initialize the client.

        Args:
            session: Authenticated session context, or None when logged out.
            transport: JSON-RPC transport; a default one is created if omitted.
        """
        self.session = session
        self.transport = transport or JsonRpcTransport()

    # -------------------------------------------------------------------------
    # Reads
    # -------------------------------------------------------------------------

    async def list_products(self) -> list[Product]:
        """List the products workflows can be scoped to."""
        try:
            result = await self._execute(
                WEBSERVICE, "get_products_data", [0], method="execute"
            )
        except _CALL_ERRORS as e:
            logger.error("Product listing failed: %s", e)
            return []

        products = result.get("products") if isinstance(result, dict) else None
        return _parse_all(Product, products or [])

    async def list_actions_for_product(self, product_id: int) -> list[ActionRecord]:
        """List the template actions of a product.

        Returns an empty list if the call fails.
        """
        domain = [["product_id", "=", product_id], ["is_template", "=", True]]
        try:
            result = await self._execute(WORKFLOW_LINE, "search_read", [domain], {})
        except _CALL_ERRORS as e:
            logger.error("Action listing for product %s failed: %s", product_id, e)
            return []
        return _parse_all(ActionRecord, result or [])

    async def list_order_stages(self) -> list[OrderStage]:
        """List all order stages."""
        try:
            result = await self._execute(
                ORDER_STATE, "search_read", [[]], {"fields": ["id", "name"]}
            )
        except _CALL_ERRORS as e:
            logger.error("Order stage listing failed: %s", e)
            return []
        return _parse_all(OrderStage, result or [])

    # -------------------------------------------------------------------------
    # Writes
    # -------------------------------------------------------------------------

    async def create_action(
        self, product_id: int, name: str, fields: ActionFields | None = None
    ) -> int | None:
        """Create a template action for a product.

        Args:
            product_id: The product the action is scoped to.
            name: Display name; must not be blank.
            fields: Extra fields to set on creation.

        Returns:
            The identifier assigned by the store, or None on failure.
        """
        try:
            name = _require_name(name)
        except ActionValidationError as e:
            logger.warning("Action not created: %s", e)
            return None

        values: dict[str, Any] = (fields or ActionFields()).to_wire(include_name=False)
        values.update({"name": name, "product_id": product_id, "is_template": True})

        try:
            result = await self._execute(WORKFLOW_LINE, "create", [values])
        except _CALL_ERRORS as e:
            logger.error("Action creation failed: %s", e)
            return None

        if isinstance(result, list):
            result = result[0] if result else None
        if not result or isinstance(result, bool):
            return None
        logger.info("Created action %s (%s) for product %s", result, name, product_id)
        return int(result)

    async def update_action(self, action_id: int, fields: ActionFields) -> bool:
        """Write the set fields of ``fields`` onto an action."""
        return await self._write(action_id, fields.to_wire(), "update")

    async def delete_action(self, action_id: int) -> bool:
        """Delete an action."""
        try:
            result = await self._execute(WORKFLOW_LINE, "unlink", [[action_id]])
        except _CALL_ERRORS as e:
            logger.error("Action %s deletion failed: %s", action_id, e)
            return False
        return bool(result)

    async def add_relation(self, source_id: int, target_id: int) -> bool:
        """Link ``target_id`` into the relation set of ``source_id``."""
        return await self._write(
            source_id, {"related_line_ids": [[LINK, target_id]]}, "relation add"
        )

    async def remove_relation(self, source_id: int, target_id: int) -> bool:
        """Unlink ``target_id`` from the relation set of ``source_id``."""
        return await self._write(
            source_id, {"related_line_ids": [[UNLINK, target_id]]}, "relation removal"
        )

    # -------------------------------------------------------------------------
    # Internals
    # -------------------------------------------------------------------------

    async def _write(self, record_id: int, values: dict[str, Any], what: str) -> bool:
        try:
            result = await self._execute(WORKFLOW_LINE, "write", [[record_id], values])
        except _CALL_ERRORS as e:
            logger.error("Action %s %s failed: %s", record_id, what, e)
            return False
        return bool(result)

    async def _execute(
        self,
        model: str,
        operation: str,
        args: list[Any],
        kwargs: dict[str, Any] | None = None,
        method: str = "execute_kw",
    ) -> Any:
        session = self.session
        if session is None or not session.is_complete:
            raise SessionMissingError()

        call_args: list[Any] = [
            session.database,
            session.uid,
            session.password,
            model,
            operation,
        ]
        if method == "execute":
            call_args.extend(args)
        else:
            call_args.append(args)
            if kwargs is not None:
                call_args.append(kwargs)

        logger.debug("%s %s.%s", method, model, operation)
        return await self.transport.call(session.server_url, "object", method, call_args)


def _require_name(name: str | None) -> str:
    name = (name or "").strip()
    if not name:
        raise ActionValidationError("Action name is required")
    return name


def _parse_all(model_cls, rows: list[Any]) -> list:
    """Parse rows into models, skipping rows the store sent malformed."""
    parsed = []
    for row in rows:
        try:
            parsed.append(model_cls.model_validate(row))
        except ValidationError as e:
            logger.warning("Skipping malformed %s row: %s", model_cls.__name__, e)
    return parsed
