from __future__ import annotations

import json
from pathlib import Path
from types import SimpleNamespace
from typing import Any, Optional

import pytest


@pytest.fixture()
def isolated_home(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    """Isolate $HOME + XDG dirs so tests never touch real user files."""
    home = tmp_path / "home"
    home.mkdir(parents=True, exist_ok=True)
    monkeypatch.setenv("HOME", str(home))
    monkeypatch.setenv("USERPROFILE", str(home))

    runtime = tmp_path / "runtime"
    runtime.mkdir(parents=True, exist_ok=True)
    monkeypatch.setenv("XDG_RUNTIME_DIR", str(runtime))

    # Avoid leaking developer/user config into tests.
    for name in (
        "OPENAI_API_KEY",
        "VOICECMD_API_KEY",
        "VOICECMD_API_PROVIDER",
        "VOICECMD_CUSTOM_ENDPOINT",
        "VOICECMD_MAPPER_MODEL",
        "VOICECMD_MAPPER_TEMPERATURE",
        "VOICECMD_MAPPER_PROTOCOL",
        "VOICECMD_TRANSCRIBE_MODEL",
        "VOICECMD_LANGUAGE",
        "VOICECMD_RECORDING_MODE",
        "VOICECMD_LOG_LEVEL",
    ):
        monkeypatch.delenv(name, raising=False)

    # Ensure we don't accidentally rely on per-shell config location.
    monkeypatch.delenv("XDG_CONFIG_HOME", raising=False)

    # Skip env-file loading; tests set what they need explicitly.
    import voicecmd.config as config

    monkeypatch.setattr(config, "_ENV_LOADED", True)
    return home


class FakeHost:
    """Records what the mapper forwards to the editor."""

    def __init__(self, *, fail_with: Optional[Exception] = None):
        self.fail_with = fail_with
        self.executed: list[tuple[str, Any]] = []
        self.errors: list[str] = []
        self.infos: list[str] = []

    def execute_command(self, command: str, args: Any = None) -> None:
        if self.fail_with is not None:
            raise self.fail_with
        self.executed.append((command, args))

    def show_error_message(self, message: str) -> None:
        self.errors.append(message)

    def show_info_message(self, message: str) -> None:
        self.infos.append(message)


class FakeCompletions:
    def __init__(self, response: Any = None, *, error: Optional[Exception] = None):
        self.response = response
        self.error = error
        self.calls: list[dict[str, Any]] = []

    def create(self, **kwargs: Any) -> Any:
        self.calls.append(kwargs)
        if self.error is not None:
            raise self.error
        return self.response


def chat_client(completions: FakeCompletions) -> SimpleNamespace:
    return SimpleNamespace(chat=SimpleNamespace(completions=completions))


def function_call_response(arguments: Any) -> SimpleNamespace:
    if not isinstance(arguments, str):
        arguments = json.dumps(arguments)
    message = SimpleNamespace(
        content=None,
        function_call=SimpleNamespace(name="executeCommand", arguments=arguments),
        tool_calls=None,
    )
    return SimpleNamespace(choices=[SimpleNamespace(message=message, finish_reason="function_call")])


def tool_call_response(name: str, arguments: Any) -> SimpleNamespace:
    if not isinstance(arguments, str):
        arguments = json.dumps(arguments)
    tool_call = SimpleNamespace(
        id="call_1",
        type="function",
        function=SimpleNamespace(name=name, arguments=arguments),
    )
    message = SimpleNamespace(content=None, function_call=None, tool_calls=[tool_call])
    return SimpleNamespace(choices=[SimpleNamespace(message=message, finish_reason="tool_calls")])


def text_response(content: str = "I am not sure.") -> SimpleNamespace:
    message = SimpleNamespace(content=content, function_call=None, tool_calls=None)
    return SimpleNamespace(choices=[SimpleNamespace(message=message, finish_reason="stop")])


@pytest.fixture()
def fake_host() -> FakeHost:
    return FakeHost()


@pytest.fixture()
def llm() -> SimpleNamespace:
    """Helpers for building fake chat-completion clients and responses."""
    return SimpleNamespace(
        FakeCompletions=FakeCompletions,
        FakeHost=FakeHost,
        client=chat_client,
        function_call=function_call_response,
        tool_call=tool_call_response,
        text=text_response,
    )
