"""Configuration and environment loading for Voicecmd.

Settings come from environment variables. They can be kept in the canonical
env file so the editor integration and the CLI see the same values:
  ~/.config/voicecmd/voicecmd.env
"""

from __future__ import annotations

import os
import stat
from pathlib import Path
from typing import Literal, Optional

from dotenv import load_dotenv


APP_NAME = "voicecmd"

ApiProvider = Literal["openai", "groq", "localhost"]
RecordingMode = Literal["regular", "testing", "new-recording"]
MapperProtocol = Literal["functions", "tools"]

API_PROVIDERS: tuple[str, ...] = ("openai", "groq", "localhost")
RECORDING_MODES: tuple[str, ...] = ("regular", "testing", "new-recording")
MAPPER_PROTOCOLS: tuple[str, ...] = ("functions", "tools")

PROVIDER_BASE_URLS: dict[str, str] = {
    "openai": "https://api.openai.com/v1",
    "groq": "https://api.groq.com/openai/v1",
}
# localhost uses whisper-1 naming like OpenAI.
PROVIDER_TRANSCRIBE_MODELS: dict[str, str] = {
    "openai": "whisper-1",
    "groq": "whisper-large-v3-turbo",
    "localhost": "whisper-1",
}

DEFAULT_API_PROVIDER = "openai"
DEFAULT_CUSTOM_ENDPOINT = "http://localhost:4444"
DEFAULT_MAPPER_MODEL = "gpt-4"
DEFAULT_MAPPER_TEMPERATURE = 0.2
DEFAULT_MAPPER_PROTOCOL = "functions"
DEFAULT_LANGUAGE = "en"
DEFAULT_RECORDING_MODE = "regular"

_ENV_LOADED = False


class VoicecmdConfigError(RuntimeError):
    pass


def config_home() -> Path:
    xdg_config_home = os.environ.get("XDG_CONFIG_HOME")
    if xdg_config_home:
        return Path(xdg_config_home)
    return Path.home() / ".config"


def config_dir(*, create: bool = False) -> Path:
    path = config_home() / APP_NAME
    if create:
        path.mkdir(parents=True, exist_ok=True)
    return path


def env_file_path() -> Path:
    return config_dir() / f"{APP_NAME}.env"


def legacy_api_key_path() -> Path:
    return config_dir() / "api_key"


def load_environment(*, load_cwd_dotenv: bool = True) -> None:
    """Load Voicecmd configuration into environment variables.

    Precedence:
    - Existing process env always wins.
    - Then `~/.config/voicecmd/voicecmd.env` (if present).
    - Then a local `.env` (optional) for developer convenience.
    """

    global _ENV_LOADED
    if _ENV_LOADED:
        return
    _ENV_LOADED = True

    env_path = env_file_path()
    if env_path.exists():
        load_dotenv(dotenv_path=env_path, override=False)

    if load_cwd_dotenv:
        load_dotenv(override=False)


def _get_choice(name: str, choices: tuple[str, ...], default: str, *, load_env: bool) -> str:
    if load_env:
        load_environment()
    raw = (os.environ.get(name) or "").strip().lower()
    if not raw:
        return default
    if raw not in choices:
        raise VoicecmdConfigError(
            f"Invalid {name}={raw!r}; expected one of: {', '.join(choices)}\n"
            f"Fix it in the environment or in: {env_file_path()}"
        )
    return raw


def get_api_provider(*, load_env: bool = True) -> str:
    return _get_choice(
        "VOICECMD_API_PROVIDER", API_PROVIDERS, DEFAULT_API_PROVIDER, load_env=load_env
    )


def get_recording_mode(*, load_env: bool = True) -> str:
    return _get_choice(
        "VOICECMD_RECORDING_MODE", RECORDING_MODES, DEFAULT_RECORDING_MODE, load_env=load_env
    )


def get_mapper_protocol(*, load_env: bool = True) -> str:
    return _get_choice(
        "VOICECMD_MAPPER_PROTOCOL", MAPPER_PROTOCOLS, DEFAULT_MAPPER_PROTOCOL, load_env=load_env
    )


def get_base_url(provider: Optional[str] = None, *, load_env: bool = True) -> str:
    if load_env:
        load_environment()
    resolved = provider or get_api_provider(load_env=False)
    if resolved == "localhost":
        endpoint = (os.environ.get("VOICECMD_CUSTOM_ENDPOINT") or "").strip()
        return (endpoint or DEFAULT_CUSTOM_ENDPOINT).rstrip("/") + "/v1"
    return PROVIDER_BASE_URLS[resolved]


def get_api_key(*, load_env: bool = True) -> str:
    if load_env:
        load_environment()

    for name in ("VOICECMD_API_KEY", "OPENAI_API_KEY"):
        api_key = (os.environ.get(name) or "").strip()
        if api_key:
            return api_key

    path = legacy_api_key_path()
    try:
        if path.exists():
            api_key = path.read_text(encoding="utf-8").strip()
            if api_key:
                return api_key
    except OSError:
        pass

    provider = (os.environ.get("VOICECMD_API_PROVIDER") or DEFAULT_API_PROVIDER).strip()
    raise VoicecmdConfigError(
        f"API key not configured for {provider}.\n\n"
        f"  Save it in: {env_file_path()}\n"
        "  Example line: VOICECMD_API_KEY=sk-...\n\n"
        "Alternatives:\n"
        "  - Set VOICECMD_API_KEY or OPENAI_API_KEY in the current environment\n"
        "  - Run: voicecmd config set-api-key\n"
    )


def detect_api_key(*, load_env: bool = True) -> bool:
    """Return True if an API key is available (never returns the key)."""
    try:
        _ = get_api_key(load_env=load_env)
        return True
    except VoicecmdConfigError:
        return False


def get_mapper_model(*, load_env: bool = True) -> str:
    if load_env:
        load_environment()
    return (os.environ.get("VOICECMD_MAPPER_MODEL") or "").strip() or DEFAULT_MAPPER_MODEL


def get_mapper_temperature(*, load_env: bool = True) -> float:
    if load_env:
        load_environment()
    raw = (os.environ.get("VOICECMD_MAPPER_TEMPERATURE") or "").strip()
    if not raw:
        return DEFAULT_MAPPER_TEMPERATURE
    try:
        return float(raw)
    except ValueError as e:
        raise VoicecmdConfigError(
            f"Invalid VOICECMD_MAPPER_TEMPERATURE={raw!r}; expected a number"
        ) from e


def get_transcribe_model(provider: Optional[str] = None, *, load_env: bool = True) -> str:
    if load_env:
        load_environment()
    explicit = (os.environ.get("VOICECMD_TRANSCRIBE_MODEL") or "").strip()
    if explicit:
        return explicit
    resolved = provider or get_api_provider(load_env=False)
    return PROVIDER_TRANSCRIBE_MODELS[resolved]


def get_language(*, load_env: bool = True) -> str:
    if load_env:
        load_environment()
    return (os.environ.get("VOICECMD_LANGUAGE") or "").strip() or DEFAULT_LANGUAGE


def read_env_file(path: Optional[Path] = None) -> dict[str, str]:
    """Best-effort parse of a dotenv-style file (no interpolation)."""

    env_path = env_file_path() if path is None else Path(path)
    if not env_path.exists():
        return {}

    out: dict[str, str] = {}
    for raw in env_path.read_text(encoding="utf-8").splitlines():
        line = raw.strip()
        if not line or line.startswith("#"):
            continue
        if line.startswith("export "):
            line = line[len("export ") :].lstrip()
        if "=" not in line:
            continue
        key, _sep, value = line.partition("=")
        key = key.strip()
        value = value.strip()
        if not key:
            continue
        # Strip simple quoting.
        if len(value) >= 2 and value[0] == value[-1] and value[0] in ("'", '"'):
            value = value[1:-1]
        out[key] = value
    return out


def _atomic_write(path: Path, content: str) -> None:
    tmp_path = path.with_suffix(path.suffix + ".tmp")
    tmp_path.write_text(content, encoding="utf-8")
    os.replace(tmp_path, path)


def ensure_private_path(path: Path, mode: int) -> None:
    """Best-effort chmod; ignore failures on unsupported filesystems."""

    try:
        os.chmod(path, mode)
    except OSError:
        pass


def upsert_env_var(
    name: str,
    value: str,
    *,
    path: Optional[Path] = None,
    file_mode: int = 0o600,
    dir_mode: int = 0o700,
) -> Path:
    """Set or update an env var in the canonical env file; returns the path."""

    if "\n" in value or "\r" in value:
        raise ValueError("invalid value: must be single-line")

    env_path = env_file_path() if path is None else Path(path)
    env_path.parent.mkdir(parents=True, exist_ok=True)
    ensure_private_path(env_path.parent, dir_mode)

    lines: list[str] = []
    if env_path.exists():
        lines = env_path.read_text(encoding="utf-8").splitlines(True)

    def _is_target_line(raw_line: str) -> bool:
        stripped = raw_line.lstrip()
        if not stripped or stripped.startswith("#"):
            return False
        candidate = stripped
        if candidate.startswith("export "):
            candidate = candidate[len("export ") :].lstrip()
        key, _sep, _rest = candidate.partition("=")
        return key.strip() == name

    rendered = f"{name}={value}\n"

    found = False
    new_lines: list[str] = []
    for line in lines:
        if _is_target_line(line):
            new_lines.append(rendered)
            found = True
        else:
            new_lines.append(line)

    if not found:
        if new_lines and not new_lines[-1].endswith("\n"):
            new_lines[-1] += "\n"
        new_lines.append(rendered)

    _atomic_write(env_path, "".join(new_lines))
    ensure_private_path(env_path, file_mode)

    # If the module already loaded env vars, update the live env too.
    os.environ.setdefault(name, value)

    return env_path


def env_file_permissions_ok(path: Optional[Path] = None) -> Optional[bool]:
    env_path = env_file_path() if path is None else Path(path)
    try:
        st = env_path.stat()
    except OSError:
        return None
    return stat.S_IMODE(st.st_mode) == 0o600
