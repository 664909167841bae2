"""Recording and transcription commands."""

from __future__ import annotations

import json
import sys
import time

import click

from voicecmd.config import VoicecmdConfigError
from voicecmd.host import ConsoleHost
from voicecmd.last_output import load_last_transcription
from voicecmd.recorder import RecorderError, check_if_installed
from voicecmd.session import AssistantSession
from voicecmd.transcriber import TranscriptionError, WhisperTranscriber


@click.command("transcribe-file")
@click.argument("audio_file", type=click.Path(exists=True, dir_okay=False, readable=True))
@click.option("--json", "json_", is_flag=True, help="Output structured JSON (default: plain text)")
def transcribe_file(audio_file: str, json_: bool) -> None:
    """Transcribe an audio file without mapping it to a command."""
    try:
        transcriber = WhisperTranscriber.from_config()
        transcription = transcriber.transcribe(audio_file)
    except (VoicecmdConfigError, TranscriptionError) as e:
        raise click.ClickException(str(e)) from e

    if json_:
        click.echo(json.dumps(transcription.to_dict(), ensure_ascii=False))
    else:
        click.echo(transcription.text)


@click.command("listen")
@click.option(
    "--seconds",
    type=float,
    default=None,
    help="Record for N seconds (default: wait for ENTER on a TTY).",
)
def listen(seconds: float | None) -> None:
    """Record from the mic with sox, then map and execute the request."""
    if seconds is None:
        if not sys.stdin.isatty():
            raise click.ClickException("No TTY available; pass --seconds to auto-stop")
    elif float(seconds) <= 0:
        raise click.ClickException("--seconds must be > 0")

    if not check_if_installed("sox"):
        raise click.ClickException(
            "SoX is not installed. Please install SoX for recording to work."
        )

    try:
        session = AssistantSession.from_config(ConsoleHost())
    except VoicecmdConfigError as e:
        raise click.ClickException(str(e)) from e
    session.recording_mode = "regular"

    try:
        session.start_recording()
    except RecorderError as e:
        raise click.ClickException(str(e)) from e

    try:
        if seconds is None:
            click.echo("Recording... press ENTER to stop (Ctrl+C to cancel).", err=True)
            _ = sys.stdin.readline()
        else:
            click.echo(f"Recording for {float(seconds):.1f}s...", err=True)
            time.sleep(float(seconds))
    except KeyboardInterrupt:
        session.close()
        raise SystemExit(130)

    outcome = session.toggle_recording()
    if outcome is None or outcome.transcription is None:
        raise SystemExit(1)
    click.echo(f"Transcription: {outcome.transcription.text}", err=True)
    if outcome.mapping is None:
        raise SystemExit(1)


@click.command("last")
@click.option("--json", "json_", is_flag=True, help="Output the stored record as JSON.")
def last(json_: bool) -> None:
    """Show the last transcription and the command it mapped to."""
    entry = load_last_transcription()
    if entry is None:
        raise click.ClickException(
            "No transcription recorded yet.\n\n"
            "Process something first, e.g.:\n"
            "  voicecmd listen --seconds 3\n"
            "  voicecmd run recording.wav\n"
        )

    if json_:
        click.echo(json.dumps(entry.to_dict(), ensure_ascii=False))
        return

    click.echo(entry.transcription.text)
    if entry.mapping is None:
        click.echo("(no command)")
    else:
        click.echo(json.dumps(entry.mapping.to_dict(), ensure_ascii=False))
