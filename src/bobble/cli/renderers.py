"""
JSON output for CLI commands.

Every command that supports ``--json`` answers with the same envelope:

    {
      "meta": {"command": "...", "version": "...", "timestamp": "..."},
      "status": "success" | "error",
      "data": {...} | null,
      "error": {"type": "...", "message": "..."} | null
    }
"""

import io
import json
import logging
from contextlib import contextmanager, redirect_stdout
from datetime import datetime, timezone
from typing import Any, Dict, Optional

import click
from pydantic import BaseModel

from .. import __version__

logger = logging.getLogger(__name__)


class JsonRenderer:
    """Renders a command result (or failure) as the standard JSON envelope."""

    def __init__(self, command: str):
        self.command = command

    @contextmanager
    def capture(self):
        """
        Swallow anything printed to stdout while the command runs, so only
        the envelope reaches the caller.
        """
        buffer = io.StringIO()
        with redirect_stdout(buffer):
            yield
        stray = buffer.getvalue()
        if stray:
            logger.debug(f"Suppressed {len(stray)} characters of text output in JSON mode")

    def render_success(self, data: BaseModel) -> None:
        self._emit(status="success", data=data.model_dump(mode="json"))

    def render_error(self, error: Exception) -> None:
        self._emit(
            status="error",
            error={"type": type(error).__name__, "message": str(error)},
        )

    def _emit(
        self,
        status: str,
        data: Optional[Dict[str, Any]] = None,
        error: Optional[Dict[str, str]] = None,
    ) -> None:
        envelope = {
            "meta": {
                "command": self.command,
                "version": __version__,
                "timestamp": datetime.now(timezone.utc).isoformat(),
            },
            "status": status,
            "data": data,
            "error": error,
        }
        click.echo(json.dumps(envelope, indent=2, default=str))
