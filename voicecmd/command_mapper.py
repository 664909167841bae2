"""Map transcribed speech to one of the fixed editor commands.

Two calling conventions are supported against an OpenAI-compatible chat
completion endpoint:

- `functions`: one `executeCommand` function whose `command` parameter is an
  enum of the six editor command ids; the call is forced.
- `tools`: one tool per command (`quickOpen`, `newFile`, ...), mapped back to
  the command id through `TOOL_COMMANDS`.

Both produce the same `CommandMapping` shape. Failures never propagate: they
are logged, reported once to the host, and resolve to None.
"""

from __future__ import annotations

import json
import logging
from typing import Any, Optional

from voicecmd.editor_commands import EDITOR_COMMANDS, TOOL_COMMANDS, CommandMapping
from voicecmd.host import CommandHost
from voicecmd.transcription_result import Transcription

try:
    from openai import OpenAI
except ImportError as e:  # pragma: no cover
    OpenAI = None  # type: ignore[assignment]
    _OPENAI_IMPORT_ERROR = e
else:
    _OPENAI_IMPORT_ERROR = None


logger = logging.getLogger(__name__)

FUNCTION_NAME = "executeCommand"
MIN_TEXT_LENGTH = 3

MAP_FAILED_MESSAGE = "Failed to map voice command to editor action"
EXECUTE_FAILED_MESSAGE = "Failed to execute editor command"

SYSTEM_PROMPT = (
    "You are a helpful assistant that maps user input to code editor commands. "
    "Assume that part of the input indicates the type of command to execute, and any "
    "additional part, if present, provides arguments for that command. Interpret and "
    "correct typos or slightly incorrect inputs before mapping them.\n\n"
    "Map the input to one of the following commands based on intent:\n\n"
    '- "workbench.action.quickOpen" (e.g., for opening files or ambiguous input)\n'
    '- "workbench.action.files.newUntitledFile" (e.g., for creating a new file)\n'
    '- "workbench.action.files.save" (e.g., for saving files)\n'
    '- "workbench.action.closeActiveEditor" (e.g., for closing files or editors)\n'
    '- "workbench.action.findInFiles" (e.g., for search-related tasks)\n'
    '- "references-view.findReferences" (e.g., for finding references in code).\n\n'
    "If the input includes arguments, such as a filename or search term, include them in "
    "the filename field of the arguments. If no specific command matches, default to "
    '"workbench.action.quickOpen" and put the corrected transcription inside the filename '
    "field of the arguments. If it is a file name change it to camelCase."
)

TOOLS_SYSTEM_PROMPT = (
    "You are a helpful assistant that maps user input to code editor commands. "
    "Interpret and correct typos or slightly incorrect inputs before mapping them to the "
    "most appropriate command. If no specific command matches, use quickOpen with the "
    "transcription as the filename."
)

EXECUTE_COMMAND_FUNCTION: dict[str, Any] = {
    "name": FUNCTION_NAME,
    "description": (
        "Execute an editor command with optional arguments. Defaults to quickOpen with "
        "the transcription if nothing else fits."
    ),
    "parameters": {
        "type": "object",
        "properties": {
            "command": {
                "type": "string",
                "enum": list(EDITOR_COMMANDS),
                "description": "The editor command to execute.",
            },
            "args": {
                "type": "object",
                "properties": {
                    "filename": {
                        "type": "string",
                        "description": (
                            "The name of the file to open, save, or search for. If no "
                            "specific command matches, use the corrected transcription."
                        ),
                    },
                },
                "description": "Optional arguments for the command.",
            },
        },
        "required": ["command"],
    },
}

_TOOL_DESCRIPTIONS: dict[str, tuple[str, str]] = {
    "quickOpen": (
        "Open the quick open dialog to find files or handle ambiguous input",
        "The filename or search term to pre-fill in quick open",
    ),
    "newFile": ("Create a new untitled file", "Optional filename for the new file"),
    "saveFile": ("Save the current file", "Optional filename to save as"),
    "closeEditor": (
        "Close the current editor or file",
        "Optional filename to confirm which file to close",
    ),
    "findInFiles": ("Search for text across all files", "The search term to look for in files"),
    "findReferences": (
        "Find all references to the current symbol in the codebase",
        "Optional symbol name to search for references",
    ),
}


def _tool(name: str) -> dict[str, Any]:
    description, filename_description = _TOOL_DESCRIPTIONS[name]
    return {
        "type": "function",
        "function": {
            "name": name,
            "description": description,
            "parameters": {
                "type": "object",
                "properties": {
                    "filename": {"type": "string", "description": filename_description},
                },
            },
        },
    }


COMMAND_TOOLS: list[dict[str, Any]] = [_tool(name) for name in TOOL_COMMANDS]


_CLIENT_CACHE: dict[tuple[str, str], object] = {}


def _openai_client(*, api_key: str, base_url: str) -> object:
    key = (api_key, base_url or "")
    cached = _CLIENT_CACHE.get(key)
    if cached is not None:
        return cached
    if OpenAI is None:
        raise RuntimeError(
            "openai is not installed; install it to map voice commands "
            "(e.g. `pip install openai`)"
        ) from _OPENAI_IMPORT_ERROR
    kwargs: dict[str, str] = {"api_key": api_key}
    if base_url:
        kwargs["base_url"] = base_url
    client = OpenAI(**kwargs)
    _CLIENT_CACHE[key] = client
    return client


def _first_message(response: Any) -> Any:
    choices = getattr(response, "choices", None) or []
    if not choices:
        return None
    return getattr(choices[0], "message", None)


def _too_short(transcription: Optional[Transcription]) -> bool:
    text = transcription.text if transcription is not None else ""
    return not text or len(text) < MIN_TEXT_LENGTH


class CommandMapper:
    """Classifies transcriptions into editor commands and runs them on a host."""

    def __init__(
        self,
        host: CommandHost,
        *,
        api_key: Optional[str] = None,
        base_url: Optional[str] = None,
        model: str = "gpt-4",
        temperature: float = 0.2,
        client: Optional[object] = None,
    ):
        self.host = host
        self.model = model
        self.temperature = temperature
        if client is None:
            client = _openai_client(api_key=api_key or "", base_url=base_url or "")
        self.client = client

    @classmethod
    def from_config(cls, host: CommandHost) -> "CommandMapper":
        from voicecmd.config import (
            get_api_key,
            get_base_url,
            get_mapper_model,
            get_mapper_temperature,
        )

        return cls(
            host,
            api_key=get_api_key(),
            base_url=get_base_url(),
            model=get_mapper_model(),
            temperature=get_mapper_temperature(),
        )

    def _report_failure(self, message: str) -> None:
        try:
            self.host.show_error_message(message)
        except Exception:
            logger.exception("Host failed to show error message")

    def map(self, transcription: Transcription, *, protocol: str = "functions") -> Optional[CommandMapping]:
        """Map with the selected calling convention ("functions" or "tools").

        Model and transport failures never raise; they are reported to the host
        and yield None. The ValueError below only fires for a protocol name
        outside `MAPPER_PROTOCOLS`, which config and the CLI already reject, so
        reaching it means a caller bug.
        """
        if protocol == "tools":
            return self.map_transcription_via_tools(transcription)
        if protocol == "functions":
            return self.map_transcription(transcription)
        raise ValueError(f"Unknown mapper protocol: {protocol!r}")

    def map_transcription(self, transcription: Transcription) -> Optional[CommandMapping]:
        """Map via a single forced `executeCommand` function call."""
        if _too_short(transcription):
            return None

        try:
            completion = self.client.chat.completions.create(  # type: ignore[attr-defined]
                model=self.model,
                messages=[
                    {"role": "system", "content": SYSTEM_PROMPT},
                    {"role": "user", "content": transcription.text},
                ],
                functions=[EXECUTE_COMMAND_FUNCTION],
                function_call={"name": FUNCTION_NAME},
                temperature=self.temperature,
            )

            message = _first_message(completion)
            function_call = getattr(message, "function_call", None)
            arguments = getattr(function_call, "arguments", None)
            if not arguments:
                logger.info("Model returned no function call for %r", transcription.text)
                return None

            mapping = CommandMapping.from_arguments(json.loads(arguments))
            logger.debug("Mapped %r to %s", transcription.text, mapping.to_dict())
            return mapping
        except Exception as e:
            logger.exception("Error mapping transcription to command: %s", e)
            self._report_failure(MAP_FAILED_MESSAGE)
            return None

    def map_transcription_via_tools(self, transcription: Transcription) -> Optional[CommandMapping]:
        """Map via one tool per command; the chosen tool name picks the command."""
        if _too_short(transcription):
            return None

        try:
            completion = self.client.chat.completions.create(  # type: ignore[attr-defined]
                model=self.model,
                messages=[
                    {"role": "system", "content": TOOLS_SYSTEM_PROMPT},
                    {"role": "user", "content": transcription.text},
                ],
                tools=COMMAND_TOOLS,
                temperature=self.temperature,
            )

            message = _first_message(completion)
            tool_calls = getattr(message, "tool_calls", None) or []
            if not tool_calls:
                logger.info("Model returned no tool call for %r", transcription.text)
                return None

            tool_call = tool_calls[0]
            function = getattr(tool_call, "function", None)
            if getattr(tool_call, "type", None) != "function" or function is None:
                logger.info("Ignoring non-function tool call for %r", transcription.text)
                return None

            raw_arguments = getattr(function, "arguments", None) or "{}"
            mapping = CommandMapping.from_tool_call(function.name, json.loads(raw_arguments))
            logger.debug("Mapped %r to %s via tools", transcription.text, mapping.to_dict())
            return mapping
        except Exception as e:
            logger.exception("Error mapping transcription to command: %s", e)
            self._report_failure(MAP_FAILED_MESSAGE)
            return None

    def execute(self, mapping: CommandMapping) -> None:
        try:
            logger.info("Executing command: %s", mapping.to_dict())
            self.host.execute_command(mapping.command, mapping.host_args())
        except Exception as e:
            logger.exception("Error executing editor command %s: %s", mapping.command, e)
            self._report_failure(EXECUTE_FAILED_MESSAGE)
