"""The closed set of editor commands a voice command can map to."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Mapping, Optional


QUICK_OPEN = "workbench.action.quickOpen"
NEW_UNTITLED_FILE = "workbench.action.files.newUntitledFile"
SAVE_FILE = "workbench.action.files.save"
CLOSE_ACTIVE_EDITOR = "workbench.action.closeActiveEditor"
FIND_IN_FILES = "workbench.action.findInFiles"
FIND_REFERENCES = "references-view.findReferences"

EDITOR_COMMANDS: tuple[str, ...] = (
    QUICK_OPEN,
    NEW_UNTITLED_FILE,
    SAVE_FILE,
    CLOSE_ACTIVE_EDITOR,
    FIND_IN_FILES,
    FIND_REFERENCES,
)

# Tool name used by the per-command tools protocol -> host command id.
TOOL_COMMANDS: dict[str, str] = {
    "quickOpen": QUICK_OPEN,
    "newFile": NEW_UNTITLED_FILE,
    "saveFile": SAVE_FILE,
    "closeEditor": CLOSE_ACTIVE_EDITOR,
    "findInFiles": FIND_IN_FILES,
    "findReferences": FIND_REFERENCES,
}


class CommandMappingError(ValueError):
    pass


class UnknownCommandError(CommandMappingError):
    pass


def is_editor_command(value: object) -> bool:
    return isinstance(value, str) and value in EDITOR_COMMANDS


def _parse_filename(raw: Any) -> Optional[str]:
    if raw is None:
        return None
    if not isinstance(raw, str):
        raise CommandMappingError(f"filename must be a string, got {type(raw).__name__}")
    return raw


@dataclass(frozen=True)
class CommandArgs:
    """Single optional argument: a filename, search term or symbol name."""

    filename: Optional[str] = None

    def to_dict(self) -> dict[str, Any]:
        out: dict[str, Any] = {}
        if self.filename is not None:
            out["filename"] = self.filename
        return out


@dataclass(frozen=True)
class CommandMapping:
    command: str
    args: Optional[CommandArgs] = None

    def __post_init__(self) -> None:
        if not is_editor_command(self.command):
            raise UnknownCommandError(f"Unknown editor command: {self.command!r}")

    @classmethod
    def from_arguments(cls, payload: Mapping[str, Any]) -> "CommandMapping":
        """Parse decoded `executeCommand` function-call arguments."""
        if not isinstance(payload, Mapping):
            raise CommandMappingError("function-call arguments must be a JSON object")

        command = payload.get("command")
        if not is_editor_command(command):
            raise UnknownCommandError(f"Unknown editor command: {command!r}")

        raw_args = payload.get("args")
        if raw_args is None:
            return cls(command=command)
        if not isinstance(raw_args, Mapping):
            raise CommandMappingError("args must be a JSON object")
        return cls(command=command, args=CommandArgs(filename=_parse_filename(raw_args.get("filename"))))

    @classmethod
    def from_tool_call(cls, name: str, arguments: Mapping[str, Any]) -> "CommandMapping":
        """Adapt a per-command tool call to the same typed argument shape."""
        command = TOOL_COMMANDS.get(name)
        if command is None:
            raise UnknownCommandError(f"Unknown tool: {name!r}")
        if not isinstance(arguments, Mapping):
            raise CommandMappingError("tool-call arguments must be a JSON object")
        filename = _parse_filename(arguments.get("filename"))
        if filename is None:
            return cls(command=command)
        return cls(command=command, args=CommandArgs(filename=filename))

    def host_args(self) -> Optional[dict[str, Any]]:
        """Argument object forwarded to the host, or None when absent."""
        if self.args is None:
            return None
        return self.args.to_dict()

    def to_dict(self) -> dict[str, Any]:
        out: dict[str, Any] = {"command": self.command}
        if self.args is not None:
            out["args"] = self.args.to_dict()
        return out
