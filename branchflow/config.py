"""Runtime settings, read from environment variables."""

import os
from pathlib import Path

from pydantic import BaseModel, Field

DEFAULT_SESSION_FILE = "~/.config/branchflow/session.yaml"


class LayoutSettings(BaseModel):
    """Placeholder grid layout used by the graph projection."""

    base: int = 100
    columns: int = Field(default=3, ge=1)
    column_width: int = 350
    row_height: int = 200


class Settings(BaseModel):
    """Application settings."""

    endpoint_path: str = "/jsonrpc"
    timeout: float = 30.0
    session_file: Path = Path(DEFAULT_SESSION_FILE)
    log_level: str = "WARNING"
    layout: LayoutSettings = Field(default_factory=LayoutSettings)


def load_settings() -> Settings:
    """Build settings from the current environment.

    Reads ``BRANCHFLOW_*`` variables; anything unset keeps its default.
    """
    return Settings(
        endpoint_path=os.getenv("BRANCHFLOW_ENDPOINT", "/jsonrpc"),
        timeout=float(os.getenv("BRANCHFLOW_TIMEOUT", "30")),
        session_file=Path(
            os.getenv("BRANCHFLOW_SESSION_FILE", DEFAULT_SESSION_FILE)
        ).expanduser(),
        log_level=os.getenv("BRANCHFLOW_LOG_LEVEL", "WARNING"),
        layout=LayoutSettings(
            base=int(os.getenv("BRANCHFLOW_LAYOUT_BASE", "100")),
            columns=int(os.getenv("BRANCHFLOW_LAYOUT_COLUMNS", "3")),
            column_width=int(os.getenv("BRANCHFLOW_LAYOUT_COLUMN_WIDTH", "350")),
            row_height=int(os.getenv("BRANCHFLOW_LAYOUT_ROW_HEIGHT", "200")),
        ),
    )
