"""The editor side of a voice command.

Editor integrations implement `CommandHost`. `ConsoleHost` is the stand-in
used by the CLI: it prints each invocation as one JSON line on stdout so it
can be piped into whatever drives the editor.
"""

from __future__ import annotations

import json
from typing import Any, Optional, Protocol

import click


class CommandHostError(RuntimeError):
    pass


class CommandHost(Protocol):
    def execute_command(self, command: str, args: Optional[dict[str, Any]] = None) -> None: ...

    def show_error_message(self, message: str) -> None: ...

    def show_info_message(self, message: str) -> None: ...


class ConsoleHost:
    def execute_command(self, command: str, args: Optional[dict[str, Any]] = None) -> None:
        line = json.dumps({"command": command, "args": args}, ensure_ascii=False)
        try:
            click.echo(line)
        except OSError as e:
            raise CommandHostError(f"Could not forward {command}: {e}") from e

    def show_error_message(self, message: str) -> None:
        click.echo(f"Error: {message}", err=True)

    def show_info_message(self, message: str) -> None:
        click.echo(message, err=True)
