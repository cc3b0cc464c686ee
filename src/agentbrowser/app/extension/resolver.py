"""Turn raw CLI tokens into an extension command with bound arguments."""

from __future__ import annotations

import copy
import math
import re
from dataclasses import dataclass
from typing import Any, Dict, Sequence

from agentbrowser.domain.extension import (
    ArgType,
    ExtensionArg,
    ExtensionCommand,
    ExtensionManifest,
    InvalidInvocationError,
    InvalidValueError,
)

from .registry import ExtensionRegistry

TOOL_NAME = "agent-browser"

_INT_RE = re.compile(r"[+-]?[0-9]+")
_INT_MIN, _INT_MAX = -(2**63), 2**63 - 1
_BOOL_LITERALS = {"true": True, "false": False}


@dataclass(frozen=True)
class ResolvedInvocation:
    extension: ExtensionManifest
    command: ExtensionCommand
    args: Dict[str, Any]


def build_usage(extension: ExtensionManifest, command: ExtensionCommand) -> str:
    parts = [TOOL_NAME, extension.name, command.name]
    for arg in command.arg_defs:
        parts.append(f"<{arg.name}>" if arg.is_required else f"[{arg.name}]")
    return " ".join(parts)


def extension_usage(extension: ExtensionManifest) -> str:
    return f"{TOOL_NAME} {extension.name} <command> [args]"


def coerce_value(arg: ExtensionArg, raw: str, usage: str) -> Any:
    arg_type = arg.arg_type
    if arg_type is ArgType.INT:
        if not _INT_RE.fullmatch(raw):
            raise InvalidValueError(f"Invalid int for {arg.name}", usage)
        try:
            parsed = int(raw)
        except ValueError:
            # int() refuses digit strings past sys.get_int_max_str_digits()
            raise InvalidValueError(f"Invalid int for {arg.name}", usage) from None
        if not _INT_MIN <= parsed <= _INT_MAX:
            raise InvalidValueError(f"Invalid int for {arg.name}", usage)
        return parsed
    if arg_type is ArgType.NUMBER:
        if not raw.isascii():
            raise InvalidValueError(f"Invalid number for {arg.name}", usage)
        try:
            value = float(raw)
        except ValueError:
            raise InvalidValueError(f"Invalid number for {arg.name}", usage) from None
        # float() tolerates padding and digit separators; JSON has no inf/nan
        if raw != raw.strip() or "_" in raw or not math.isfinite(value):
            raise InvalidValueError(f"Invalid number for {arg.name}", usage)
        return value
    if arg_type is ArgType.BOOL:
        if raw not in _BOOL_LITERALS:
            raise InvalidValueError(f"Invalid bool for {arg.name}", usage)
        return _BOOL_LITERALS[raw]
    return raw


def bind_arguments(
    extension: ExtensionManifest,
    command: ExtensionCommand,
    provided: Sequence[str],
) -> Dict[str, Any]:
    usage = build_usage(extension, command)
    defs = command.arg_defs
    if len(provided) > len(defs):
        raise InvalidInvocationError("Too many arguments", usage)

    values: Dict[str, Any] = {}
    for index, arg in enumerate(defs):
        if index < len(provided):
            values[arg.name] = coerce_value(arg, provided[index], usage)
        elif arg.has_default:
            values[arg.name] = copy.deepcopy(arg.default)
        elif arg.is_required:
            raise InvalidInvocationError(f"Missing argument: {arg.name}", usage)
    return values


def resolve_invocation(registry: ExtensionRegistry, tokens: Sequence[str]) -> ResolvedInvocation | None:
    """Resolve ``<extension> <command> [args...]``.

    Returns ``None`` when the tokens do not name a known extension so callers
    can try other interpretations.
    """
    if len(tokens) < 2:
        return None
    extension = registry.find(tokens[0])
    if extension is None:
        return None
    command = extension.find_command(tokens[1])
    if command is None:
        raise InvalidInvocationError(f"Unknown subcommand: {tokens[1]}", extension_usage(extension))
    args = bind_arguments(extension, command, tokens[2:])
    return ResolvedInvocation(extension=extension, command=command, args=args)


__all__ = [
    "ResolvedInvocation",
    "TOOL_NAME",
    "bind_arguments",
    "build_usage",
    "coerce_value",
    "extension_usage",
    "resolve_invocation",
]
