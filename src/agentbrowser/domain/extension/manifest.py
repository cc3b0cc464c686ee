"""Value objects describing an extension manifest (``extension.json``)."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, Tuple

MANIFEST_FILENAME = "extension.json"


class ManifestError(ValueError):
    """Raised when a manifest payload does not match the expected shape."""


class HandlerKind(str, Enum):
    MACRO = "macro"
    DAEMON = "daemon"


class ArgType(str, Enum):
    STRING = "string"
    INT = "int"
    NUMBER = "number"
    BOOL = "bool"


def _optional_str(data: Dict[str, Any], key: str) -> str | None:
    value = data.get(key)
    if value is None:
        return None
    if not isinstance(value, str):
        raise ManifestError(f"'{key}' must be a string")
    return value


def _require_mapping(value: Any, what: str) -> Dict[str, Any]:
    if not isinstance(value, dict):
        raise ManifestError(f"{what} must be an object")
    return value


@dataclass(frozen=True)
class ExtensionArg:
    name: str
    type: str | None = None
    required: bool | None = None
    default: Any = None
    description: str | None = None

    @property
    def is_required(self) -> bool:
        return True if self.required is None else self.required

    @property
    def has_default(self) -> bool:
        return self.default is not None

    @property
    def arg_type(self) -> ArgType:
        """Declared type; unrecognised values behave as strings."""
        try:
            return ArgType(self.type or ArgType.STRING.value)
        except ValueError:
            return ArgType.STRING

    @classmethod
    def from_dict(cls, data: Any) -> "ExtensionArg":
        data = _require_mapping(data, "argument")
        name = data.get("name")
        if not isinstance(name, str):
            raise ManifestError("argument 'name' must be a string")
        required = data.get("required")
        if required is not None and not isinstance(required, bool):
            raise ManifestError(f"argument {name}: 'required' must be a boolean")
        return cls(
            name=name,
            type=_optional_str(data, "type"),
            required=required,
            default=data.get("default"),
            description=_optional_str(data, "description"),
        )

    def to_dict(self) -> Dict[str, Any]:
        payload: Dict[str, Any] = {"name": self.name}
        for key in ("type", "required", "default", "description"):
            value = getattr(self, key)
            if value is not None:
                payload[key] = value
        return payload


@dataclass(frozen=True)
class ExtensionHandler:
    type: str
    steps: Tuple[Any, ...] | None = None

    @property
    def kind(self) -> HandlerKind | None:
        """Executable handler kind, or ``None`` for unsupported types."""
        try:
            return HandlerKind(self.type)
        except ValueError:
            return None

    @classmethod
    def from_dict(cls, data: Any) -> "ExtensionHandler":
        data = _require_mapping(data, "handler")
        handler_type = data.get("type")
        if not isinstance(handler_type, str):
            raise ManifestError("handler 'type' must be a string")
        steps = data.get("steps")
        if steps is not None and not isinstance(steps, list):
            raise ManifestError("handler 'steps' must be a list")
        return cls(type=handler_type, steps=tuple(steps) if steps is not None else None)

    def to_dict(self) -> Dict[str, Any]:
        payload: Dict[str, Any] = {"type": self.type}
        if self.steps is not None:
            payload["steps"] = list(self.steps)
        return payload


@dataclass(frozen=True)
class ExtensionCommand:
    name: str
    handler: ExtensionHandler
    description: str | None = None
    args: Tuple[ExtensionArg, ...] | None = None

    @property
    def arg_defs(self) -> Tuple[ExtensionArg, ...]:
        return self.args or ()

    @classmethod
    def from_dict(cls, data: Any) -> "ExtensionCommand":
        data = _require_mapping(data, "command")
        name = data.get("name")
        if not isinstance(name, str):
            raise ManifestError("command 'name' must be a string")
        if "handler" not in data:
            raise ManifestError(f"command {name} is missing 'handler'")
        raw_args = data.get("args")
        if raw_args is not None and not isinstance(raw_args, list):
            raise ManifestError(f"command {name}: 'args' must be a list")
        return cls(
            name=name,
            handler=ExtensionHandler.from_dict(data["handler"]),
            description=_optional_str(data, "description"),
            args=tuple(ExtensionArg.from_dict(item) for item in raw_args) if raw_args is not None else None,
        )

    def to_dict(self) -> Dict[str, Any]:
        payload: Dict[str, Any] = {"name": self.name}
        if self.description is not None:
            payload["description"] = self.description
        if self.args is not None:
            payload["args"] = [arg.to_dict() for arg in self.args]
        payload["handler"] = self.handler.to_dict()
        return payload


@dataclass(frozen=True)
class ExtensionManifest:
    """Descriptor of one installed extension.

    ``permissions`` and the CLI version bounds are carried for display only;
    nothing in the engine enforces them.
    """

    name: str
    commands: Tuple[ExtensionCommand, ...] = field(default_factory=tuple)
    version: str | None = None
    description: str | None = None
    entry: str | None = None
    permissions: Tuple[str, ...] | None = None
    min_cli_version: str | None = None
    max_cli_version: str | None = None

    def find_command(self, name: str) -> ExtensionCommand | None:
        for command in self.commands:
            if command.name == name:
                return command
        return None

    @classmethod
    def from_dict(cls, data: Any) -> "ExtensionManifest":
        data = _require_mapping(data, "manifest root")
        name = data.get("name")
        if not isinstance(name, str):
            raise ManifestError("'name' must be a string")
        commands = data.get("commands")
        if not isinstance(commands, list):
            raise ManifestError("'commands' must be a list")
        permissions = data.get("permissions")
        if permissions is not None:
            if not isinstance(permissions, list) or not all(isinstance(p, str) for p in permissions):
                raise ManifestError("'permissions' must be a list of strings")
            permissions = tuple(permissions)
        return cls(
            name=name,
            commands=tuple(ExtensionCommand.from_dict(item) for item in commands),
            version=_optional_str(data, "version"),
            description=_optional_str(data, "description"),
            entry=_optional_str(data, "entry"),
            permissions=permissions,
            min_cli_version=_optional_str(data, "minCliVersion"),
            max_cli_version=_optional_str(data, "maxCliVersion"),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "name": self.name,
            "version": self.version,
            "description": self.description,
            "entry": self.entry,
            "permissions": list(self.permissions) if self.permissions is not None else None,
            "minCliVersion": self.min_cli_version,
            "maxCliVersion": self.max_cli_version,
            "commands": [command.to_dict() for command in self.commands],
        }


__all__ = [
    "ArgType",
    "ExtensionArg",
    "ExtensionCommand",
    "ExtensionHandler",
    "ExtensionManifest",
    "HandlerKind",
    "MANIFEST_FILENAME",
    "ManifestError",
]
