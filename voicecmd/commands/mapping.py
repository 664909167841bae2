"""`voicecmd map` and `voicecmd run`."""

from __future__ import annotations

import json

import click

from voicecmd.command_mapper import CommandMapper
from voicecmd.config import MAPPER_PROTOCOLS, VoicecmdConfigError, get_mapper_protocol
from voicecmd.editor_commands import CommandMapping
from voicecmd.host import ConsoleHost
from voicecmd.session import NO_MATCH_MESSAGE, AssistantSession
from voicecmd.transcription_result import Transcription


protocol_option = click.option(
    "--protocol",
    type=click.Choice(MAPPER_PROTOCOLS),
    default=None,
    help="Function-calling convention (defaults to VOICECMD_MAPPER_PROTOCOL, else functions).",
)


def _describe(mapping: CommandMapping) -> str:
    if mapping.args is not None and mapping.args.filename:
        return f"{mapping.command} {mapping.args.filename}"
    return mapping.command


@click.command("map")
@click.argument("words", nargs=-1, required=True)
@protocol_option
@click.option("--execute", "execute_", is_flag=True, help="Forward the mapping to the console host.")
@click.option("--json", "json_", is_flag=True, help="Output the mapping as JSON.")
def map_text(words: tuple[str, ...], protocol: str | None, execute_: bool, json_: bool) -> None:
    """Map a text request to an editor command.

    \b
    Examples:
      voicecmd map open the config file
      voicecmd map --json save
      voicecmd map --protocol tools find usages of parse
    """
    host = ConsoleHost()
    try:
        mapper = CommandMapper.from_config(host)
        resolved_protocol = protocol or get_mapper_protocol()
    except VoicecmdConfigError as e:
        raise click.ClickException(str(e)) from e

    mapping = mapper.map(Transcription(text=" ".join(words)), protocol=resolved_protocol)
    if mapping is None:
        host.show_info_message(NO_MATCH_MESSAGE)
        raise SystemExit(1)

    if execute_:
        mapper.execute(mapping)
    elif json_:
        click.echo(json.dumps(mapping.to_dict(), ensure_ascii=False))
    else:
        click.echo(_describe(mapping))


@click.command("run")
@click.argument("audio_file", type=click.Path(exists=True, dir_okay=False, readable=True))
@protocol_option
def run(audio_file: str, protocol: str | None) -> None:
    """Transcribe an audio file, map it, and execute it on the console host."""
    try:
        session = AssistantSession.from_config(ConsoleHost())
    except VoicecmdConfigError as e:
        raise click.ClickException(str(e)) from e
    if protocol:
        session.protocol = protocol

    outcome = session.process_recording(audio_file)
    if outcome.transcription is None:
        raise SystemExit(1)
    click.echo(f"Transcription: {outcome.transcription.text}", err=True)
    if outcome.mapping is None:
        raise SystemExit(1)
