"""`voicecmd config …` commands."""

from __future__ import annotations

import os
import sys

import click

from voicecmd.config import (
    VoicecmdConfigError,
    detect_api_key,
    env_file_path,
    env_file_permissions_ok,
    get_api_provider,
    get_base_url,
    get_mapper_model,
    get_mapper_protocol,
    get_recording_mode,
    get_transcribe_model,
    legacy_api_key_path,
    read_env_file,
    upsert_env_var,
)


@click.group(name="config")
def config_group() -> None:
    """Manage Voicecmd configuration."""


@config_group.command("set-api-key")
@click.argument("api_key", required=False)
@click.option(
    "--from-stdin",
    is_flag=True,
    help="Read the API key from stdin (avoids shell history).",
)
def config_set_api_key(api_key: str | None, from_stdin: bool) -> None:
    """Store the API key in the Voicecmd env file."""
    if from_stdin:
        if sys.stdin.isatty():
            raise click.UsageError("--from-stdin requires piped stdin")
        api_key = (sys.stdin.read() or "").strip()

    if not api_key:
        api_key = click.prompt(
            "API key",
            hide_input=True,
            confirmation_prompt=True,
        ).strip()

    if not api_key:
        raise click.ClickException("API key is empty")

    env_path = upsert_env_var("VOICECMD_API_KEY", api_key)
    click.echo(f"Wrote VOICECMD_API_KEY to: {env_path}")
    if env_file_permissions_ok(env_path) is False:
        click.echo(
            f"Warning: expected permissions 0600 but got different mode on: {env_path}",
            err=True,
        )


@config_group.command("show")
def config_show() -> None:
    """Show which config sources are present (never prints secrets)."""
    env_path = env_file_path()
    env_values = read_env_file(env_path)

    key_env = bool(
        (os.environ.get("VOICECMD_API_KEY") or "").strip()
        or (os.environ.get("OPENAI_API_KEY") or "").strip()
    )
    key_env_file = bool((env_values.get("VOICECMD_API_KEY") or "").strip())

    click.echo(f"env var VOICECMD_API_KEY/OPENAI_API_KEY set: {key_env}")
    click.echo(f"env file exists: {env_path} {env_path.exists()}")
    click.echo(f"env file perms 0600: {env_file_permissions_ok(env_path)}")
    click.echo(f"env file has VOICECMD_API_KEY: {key_env_file}")
    legacy = legacy_api_key_path()
    click.echo(f"legacy key file exists: {legacy} {legacy.exists()}")
    click.echo(f"api key resolvable: {detect_api_key()}")

    try:
        provider = get_api_provider()
        click.echo(f"api provider: {provider}")
        click.echo(f"base url: {get_base_url(provider)}")
        click.echo(f"transcribe model: {get_transcribe_model(provider)}")
        click.echo(f"mapper model: {get_mapper_model()}")
        click.echo(f"mapper protocol: {get_mapper_protocol()}")
        click.echo(f"recording mode: {get_recording_mode()}")
    except VoicecmdConfigError as e:
        raise click.ClickException(str(e)) from e
