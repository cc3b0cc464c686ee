"""Runtime settings for the agent-browser extension engine."""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Mapping

import yaml

from agentbrowser import __version__

PLUGINS_DIR_ENV = "AGENT_BROWSER_PLUGINS_DIR"
EXTENSIONS_DIR_ENV = "AGENT_BROWSER_EXTENSIONS_DIR"
HOME_ENV = "AGENT_BROWSER_HOME"
SESSION_ENV = "AGENT_BROWSER_SESSION"
SOCKET_DIR_ENV = "AGENT_BROWSER_SOCKET_DIR"
DAEMON_URL_ENV = "AGENT_BROWSER_DAEMON_URL"

APP_DIRNAME = "agent-browser"
CONFIG_FILENAME = "config.yaml"
DEFAULT_SESSION = "default"


class SettingsError(RuntimeError):
    """Raised when the user configuration file cannot be used."""


@dataclass(frozen=True)
class RuntimeSettings:
    home_dir: Path
    state_dir: Path
    log_dir: Path
    config_dir: Path | None
    plugins_dir: Path | None = None
    extensions_dir: Path | None = None
    session: str = DEFAULT_SESSION
    socket_dir: Path | None = None
    daemon_url: str | None = None
    cli_version: str = __version__

    @property
    def user_config_file(self) -> Path | None:
        if self.config_dir is None:
            return None
        return self.config_dir / APP_DIRNAME / CONFIG_FILENAME

    @property
    def resolved_socket_dir(self) -> Path:
        return self.socket_dir or self.home_dir


def user_config_dir(environ: Mapping[str, str]) -> Path | None:
    for var in ("APPDATA", "XDG_CONFIG_HOME"):
        value = environ.get(var)
        if value:
            return Path(value)
    try:
        return Path.home() / ".config"
    except RuntimeError:
        return None


def _env_path(environ: Mapping[str, str], var: str) -> Path | None:
    value = environ.get(var, "")
    if not value:
        return None
    return Path(value).expanduser()


def _read_config_file(path: Path | None) -> dict[str, Any]:
    if path is None or not path.exists():
        return {}
    try:
        data = yaml.safe_load(path.read_text(encoding="utf-8"))
    except yaml.YAMLError as exc:
        raise SettingsError(f"Invalid config file {path}: {exc}") from exc
    if data is None:
        return {}
    if not isinstance(data, dict):
        raise SettingsError(f"Config file {path} must contain a mapping")
    return data


def load_settings(environ: Mapping[str, str] | None = None) -> RuntimeSettings:
    env = os.environ if environ is None else environ
    home = _env_path(env, HOME_ENV) or Path.home() / ".agent-browser"
    config_dir = user_config_dir(env)
    config_file = config_dir / APP_DIRNAME / CONFIG_FILENAME if config_dir else None
    file_values = _read_config_file(config_file)

    session = env.get(SESSION_ENV) or file_values.get("session") or DEFAULT_SESSION
    socket_dir = _env_path(env, SOCKET_DIR_ENV)
    if socket_dir is None and file_values.get("socket_dir"):
        socket_dir = Path(str(file_values["socket_dir"])).expanduser()
    daemon_url = env.get(DAEMON_URL_ENV) or file_values.get("daemon_url") or None

    return RuntimeSettings(
        home_dir=home,
        state_dir=home / "state",
        log_dir=home / "logs",
        config_dir=config_dir,
        plugins_dir=_env_path(env, PLUGINS_DIR_ENV),
        extensions_dir=_env_path(env, EXTENSIONS_DIR_ENV),
        session=str(session),
        socket_dir=socket_dir,
        daemon_url=str(daemon_url) if daemon_url else None,
    )

