"""Help and index text rendered from extension manifests."""

from __future__ import annotations

import sys
from typing import Iterable, TextIO

from agentbrowser.domain.extension import ExtensionCommand, ExtensionManifest

from .registry import ExtensionRegistry
from .resolver import build_usage, extension_usage


def _line(label: str, description: str | None, width: int) -> str:
    if not description:
        return f"  {label}"
    return f"  {label:<{width}} {description}"


def _print_command_list(
    extension: ExtensionManifest,
    commands: Iterable[ExtensionCommand],
    out: TextIO,
    *,
    with_description: bool = True,
) -> None:
    print(f"Usage: {extension_usage(extension)}", file=out)
    if with_description and extension.description:
        print(file=out)
        print(extension.description, file=out)
    print(file=out)
    print("Commands:", file=out)
    for command in commands:
        print(_line(command.name, command.description, 18), file=out)


def print_command_help(extension: ExtensionManifest, command: ExtensionCommand, out: TextIO | None = None) -> None:
    out = out or sys.stdout
    print(f"Usage: {build_usage(extension, command)}", file=out)
    if command.description:
        print(file=out)
        print(command.description, file=out)
    if command.arg_defs:
        print(file=out)
        print("Arguments:", file=out)
        for arg in command.arg_defs:
            print(_line(arg.name, arg.description, 12), file=out)


def print_extension_help(
    registry: ExtensionRegistry,
    name: str,
    prefix: str | None = None,
    out: TextIO | None = None,
) -> bool:
    """Print help for an extension, one of its commands or a command namespace.

    Returns ``False`` when nothing matches so the caller can fall back.
    """
    out = out or sys.stdout
    extension = registry.find(name)
    if extension is None:
        return False

    if not prefix:
        _print_command_list(extension, extension.commands, out)
        return True

    command = extension.find_command(prefix)
    if command is not None:
        print_command_help(extension, command, out)
        return True

    matches = [
        candidate
        for candidate in extension.commands
        if candidate.name == prefix or candidate.name.startswith(f"{prefix}.")
    ]
    if not matches:
        return False
    _print_command_list(extension, matches, out, with_description=False)
    return True


def print_extension_index(registry: ExtensionRegistry, out: TextIO | None = None) -> None:
    extensions = registry.list()
    if not extensions:
        return
    out = out or sys.stdout
    print(file=out)
    print("Plugins:", file=out)
    for extension in extensions:
        print(_line(extension.name, extension.description, 12), file=out)


__all__ = ["print_command_help", "print_extension_help", "print_extension_index"]
