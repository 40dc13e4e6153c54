"""Command-line interface for branchflow."""

import asyncio
import logging
import sys
from pathlib import Path

import click

from .config import Settings, load_settings
from .controller.controller import WorkflowController
from .graph.workflow_graph import edge_id
from .output.formatter import format_graph, format_products, format_stages
from .records.errors import SessionStoreError
from .records.models import ActionFields, ActionState, Priority, Session
from .records.session_store import SessionStore
from .remote.client import WorkflowClient
from .remote.rpc import JsonRpcTransport, authenticate

LOG_FORMAT = "%(asctime)s %(levelname)s [%(name)s] %(message)s"

_format_option = click.option(
    "--format",
    "output_format",
    type=click.Choice(["text", "json"]),
    default="text",
    help="Output format",
)


def _notify(message: str) -> None:
    click.echo(f"Error: {message}", err=True)


def _transport(settings: Settings) -> JsonRpcTransport:
    return JsonRpcTransport(settings.endpoint_path, settings.timeout)


def _open_client(settings: Settings) -> WorkflowClient:
    """Build a client from the stored session, or exit with code 2."""
    store = SessionStore(settings.session_file)
    try:
        session = store.load()
    except SessionStoreError as e:
        click.echo(f"Error reading session: {e}", err=True)
        sys.exit(2)

    if session is None or not session.is_complete:
        click.echo("Not logged in. Run 'branchflow login' first.", err=True)
        sys.exit(2)

    return WorkflowClient(session, _transport(settings))


def _open_controller(settings: Settings, product_id: int) -> WorkflowController:
    return WorkflowController(
        _open_client(settings), product_id, notify=_notify, layout=settings.layout
    )


def _fields(**values) -> ActionFields:
    """Build ActionFields from the options that were actually given."""
    return ActionFields(**{k: v for k, v in values.items() if v is not None})


def _field_options(func):
    """Attach the editable action field options to a command."""
    options = [
        click.option("--description", default=None, help="Action description"),
        click.option(
            "--state",
            type=click.Choice([s.value for s in ActionState]),
            default=None,
            help="Lifecycle state",
        ),
        click.option(
            "--priority",
            type=click.Choice([p.value for p in Priority]),
            default=None,
            help="Priority",
        ),
        click.option("--stage", "stage_id", type=int, default=None, help="Order stage ID"),
        click.option(
            "--automatic/--manual", "is_automatic", default=None, help="Automatic action"
        ),
        click.option(
            "--completes-line/--keeps-line",
            "completes_order_line",
            default=None,
            help="Completes the order line",
        ),
        click.option(
            "--require-evidence/--no-evidence",
            "require_evidence",
            default=None,
            help="Requires evidence",
        ),
    ]
    for option in reversed(options):
        func = option(func)
    return func


@click.group()
@click.version_option(package_name="branchflow")
@click.option(
    "--log-level",
    envvar="BRANCHFLOW_LOG_LEVEL",
    type=click.Choice(["DEBUG", "INFO", "WARNING", "ERROR"], case_sensitive=False),
    default="WARNING",
    help="Logging level",
)
@click.option(
    "--session-file",
    envvar="BRANCHFLOW_SESSION_FILE",
    type=click.Path(dir_okay=False),
    default=None,
    help="Where the login session is stored",
)
@click.pass_context
def main(ctx: click.Context, log_level: str, session_file: str | None):
    """branchflow: design product action workflows stored on a remote server."""
    settings = load_settings()
    settings.log_level = log_level.upper()
    if session_file:
        settings.session_file = Path(session_file).expanduser()

    logging.basicConfig(level=getattr(logging, settings.log_level), format=LOG_FORMAT)
    ctx.obj = settings


@main.command()
@click.argument("server_url")
@click.argument("database")
@click.argument("username")
@click.option("--password", prompt=True, hide_input=True, help="Account password")
@click.pass_obj
def login(settings: Settings, server_url: str, database: str, username: str, password: str):
    """Authenticate and store the session.

    Exit codes:
      0 - Logged in
      2 - Authentication failed
    """
    uid = asyncio.run(
        authenticate(_transport(settings), server_url, database, username, password)
    )
    if uid is None:
        click.echo("Authentication failed", err=True)
        sys.exit(2)

    session = Session(
        server_url=server_url,
        database=database,
        username=username,
        uid=uid,
        password=password,
    )
    try:
        SessionStore(settings.session_file).save(session)
    except SessionStoreError as e:
        click.echo(f"Error saving session: {e}", err=True)
        sys.exit(2)

    click.echo(f"Logged in as {username} (uid {uid})")


@main.command()
@click.pass_obj
def logout(settings: Settings):
    """Forget the stored session."""
    try:
        SessionStore(settings.session_file).clear()
    except SessionStoreError as e:
        click.echo(f"Error clearing session: {e}", err=True)
        sys.exit(2)
    click.echo("Logged out")


@main.command()
@_format_option
@click.pass_obj
def products(settings: Settings, output_format: str):
    """List the products workflows are attached to."""
    client = _open_client(settings)
    result = asyncio.run(client.list_products())
    click.echo(format_products(result, output_format))  # type: ignore


@main.command()
@_format_option
@click.pass_obj
def stages(settings: Settings, output_format: str):
    """List the order stages actions can be attached to."""
    client = _open_client(settings)
    result = asyncio.run(client.list_order_stages())
    click.echo(format_stages(result, output_format))  # type: ignore


@main.command()
@click.argument("product_id", type=int)
@_format_option
@click.pass_obj
def show(settings: Settings, product_id: int, output_format: str):
    """Show the workflow graph of a product."""
    controller = _open_controller(settings, product_id)
    graph = asyncio.run(controller.load())
    click.echo(format_graph(graph, output_format))  # type: ignore


@main.command()
@click.argument("product_id", type=int)
@click.argument("source_id", type=int)
@click.argument("target_id", type=int)
@click.pass_obj
def connect(settings: Settings, product_id: int, source_id: int, target_id: int):
    """Connect SOURCE_ID to TARGET_ID."""
    controller = _open_controller(settings, product_id)

    async def run() -> bool:
        await controller.refresh()
        return await controller.connect(source_id, target_id)

    if not asyncio.run(run()):
        sys.exit(1)
    click.echo(f"Connected {source_id} → {target_id}")


@main.command()
@click.argument("product_id", type=int)
@click.argument("source_id", type=int)
@click.argument("target_id", type=int)
@click.pass_obj
def disconnect(settings: Settings, product_id: int, source_id: int, target_id: int):
    """Remove the connection from SOURCE_ID to TARGET_ID."""
    controller = _open_controller(settings, product_id)

    async def run() -> bool:
        await controller.refresh()
        return await controller.disconnect(edge_id(source_id, target_id))

    if not asyncio.run(run()):
        sys.exit(1)
    click.echo(f"Disconnected {source_id} → {target_id}")


@main.command()
@click.argument("product_id", type=int)
@click.argument("name")
@click.option("--from", "source_id", type=int, default=None, help="Connect from this action")
@_field_options
@click.pass_obj
def create(settings: Settings, product_id: int, name: str, source_id: int | None, **values):
    """Create an action named NAME, optionally connected from another one."""
    controller = _open_controller(settings, product_id)

    async def run() -> int | None:
        await controller.load()
        controller.create_draft(source_id)
        return await controller.confirm_create(_fields(name=name, **values))

    new_id = asyncio.run(run())
    if new_id is None:
        sys.exit(1)
    click.echo(f"Created action {new_id}")


@main.command()
@click.argument("product_id", type=int)
@click.argument("action_id", type=int)
@click.option("--name", default=None, help="New name")
@_field_options
@click.pass_obj
def update(settings: Settings, product_id: int, action_id: int, **values):
    """Edit the fields of ACTION_ID."""
    fields = _fields(**values)
    if not fields.model_fields_set:
        click.echo("Nothing to update", err=True)
        sys.exit(1)

    controller = _open_controller(settings, product_id)

    async def run() -> bool:
        await controller.load()
        if not controller.select_node(action_id):
            _notify(f"Action {action_id} is not part of product {product_id}")
            return False
        return await controller.update_selected(fields)

    if not asyncio.run(run()):
        sys.exit(1)
    click.echo(f"Updated action {action_id}")


@main.command()
@click.argument("product_id", type=int)
@click.argument("action_id", type=int)
@click.option("--yes", is_flag=True, default=False, help="Do not ask for confirmation")
@click.pass_obj
def delete(settings: Settings, product_id: int, action_id: int, yes: bool):
    """Delete ACTION_ID."""
    controller = _open_controller(settings, product_id)
    asyncio.run(controller.refresh())

    node = controller.graph.get_node(action_id)
    label = node["label"] if node else str(action_id)
    if not yes and not click.confirm(f'Delete "{label}"?'):
        click.echo("Aborted")
        sys.exit(1)

    if not asyncio.run(controller.delete_node(action_id)):
        sys.exit(1)
    click.echo(f"Deleted action {action_id}")


if __name__ == "__main__":
    main()
