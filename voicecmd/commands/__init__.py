"""Click command groups for the Voicecmd CLI."""

from __future__ import annotations

import click

from .config import config_group
from .mapping import map_text, run
from .recording import last, listen, transcribe_file


def register(main: click.Group) -> None:
    main.add_command(config_group)

    main.add_command(map_text)
    main.add_command(run)

    main.add_command(transcribe_file)
    main.add_command(listen)
    main.add_command(last)
