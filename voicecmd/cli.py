"""Command-line interface for voicecmd."""

from __future__ import annotations

import logging

import click

from voicecmd.commands import register
from voicecmd.logging_utils import configure_logging


@click.group()
@click.option("--debug", is_flag=True, help="Enable debug logging.")
@click.pass_context
def main(ctx: click.Context, debug: bool) -> None:
    """Voicecmd - turn spoken requests into editor commands."""
    ctx.ensure_object(dict)
    ctx.obj["debug"] = debug
    configure_logging(debug=debug, default_level=logging.WARNING)


register(main)


if __name__ == "__main__":
    main()
