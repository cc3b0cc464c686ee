#!/usr/bin/env python3
"""Entry point for the agent-browser extension CLI."""

from __future__ import annotations

import argparse
import json
import os
import sys
import time
from dataclasses import dataclass
from pathlib import Path
from textwrap import dedent
from typing import Any, Sequence

from agentbrowser import __version__
from agentbrowser.adapters.daemon import HttpDaemonTransport, SocketDaemonTransport
from agentbrowser.app.extension import (
    ExtensionDispatcher,
    ExtensionRegistry,
    ExtensionService,
    print_extension_help,
    print_extension_index,
    resolve_invocation,
)
from agentbrowser.app.extension.resolver import ResolvedInvocation
from agentbrowser.domain.daemon import DaemonResponse
from agentbrowser.domain.extension import ExtensionError, UsageError
from agentbrowser.ports.daemon import DaemonTransport
from agentbrowser.settings import RuntimeSettings, SettingsError, load_settings
from agentbrowser.utils.telemetry import record_event

PROG = "agent-browser"
BUILTIN_COMMANDS = ("help", "plugins")

HELP_OVERVIEW = dedent(
    """
    Run commands contributed by installed plugins:
      agent-browser <plugin> <command> [args...]

    Plugin management:
      - agent-browser plugins init --local my-plugin
      - agent-browser plugins list
      - agent-browser plugins info <name>
      - agent-browser plugins lint

    Global flags:
      --json            machine-readable output
      --session NAME    daemon session (default: $AGENT_BROWSER_SESSION or "default")
    """
)


@dataclass
class GlobalFlags:
    json: bool = False
    session: str | None = None


def _split_global_flags(argv: Sequence[str]) -> tuple[list[str], GlobalFlags]:
    flags = GlobalFlags()
    tokens: list[str] = []
    index = 0
    while index < len(argv):
        token = argv[index]
        if token == "--json":
            flags.json = True
        elif token == "--session" and index + 1 < len(argv):
            flags.session = argv[index + 1]
            index += 1
        elif token.startswith("--session="):
            flags.session = token.split("=", 1)[1]
        else:
            tokens.append(token)
        index += 1
    return tokens, flags


def _build_transport(settings: RuntimeSettings) -> DaemonTransport:
    if settings.daemon_url:
        return HttpDaemonTransport(settings.daemon_url)
    return SocketDaemonTransport(settings.resolved_socket_dir)


def _load_registry(settings: RuntimeSettings) -> ExtensionRegistry:
    return ExtensionRegistry.load(settings, Path(os.getcwd()))


def _print_json(payload: Any) -> None:
    print(json.dumps(payload, ensure_ascii=False, indent=2))


def _render_error(exc: ExtensionError, json_mode: bool) -> int:
    if json_mode:
        _print_json(exc.to_payload())
        return 1
    print(str(exc), file=sys.stderr)
    if isinstance(exc, UsageError):
        print(f"Usage: {exc.usage}", file=sys.stderr)
    return 1


def _render_response(response: DaemonResponse, json_mode: bool) -> None:
    if json_mode:
        _print_json(response.to_dict())
        return
    data = response.data
    if data is None:
        print("Done")
    elif isinstance(data, str):
        print(data)
    else:
        _print_json(data)


def _record_invocation(
    settings: RuntimeSettings,
    tokens: Sequence[str],
    invocation: ResolvedInvocation | None,
    started: float,
    error: ExtensionError | None = None,
) -> None:
    payload: dict[str, Any] = {
        "extension": tokens[0],
        "command": tokens[1] if len(tokens) > 1 else None,
        "handler": invocation.command.handler.type if invocation else None,
    }
    if error is not None:
        payload["error_kind"] = error.kind
    record_event(
        settings,
        "extension.invoke",
        payload,
        level="error" if error else "info",
        status="error" if error else "ok",
        component="extension",
        duration_ms=(time.perf_counter() - started) * 1000,
    )


def _extension_cmd(tokens: list[str], flags: GlobalFlags, settings: RuntimeSettings) -> int:
    registry = _load_registry(settings)
    started = time.perf_counter()
    invocation: ResolvedInvocation | None = None
    try:
        invocation = resolve_invocation(registry, tokens)
        if invocation is None:
            message = f"Unknown command: {tokens[0]}"
            if flags.json:
                _print_json({"success": False, "error": message})
            else:
                print(message, file=sys.stderr)
                print(f"Run '{PROG} help' for usage", file=sys.stderr)
            return 1
        session = flags.session or settings.session
        dispatcher = ExtensionDispatcher(_build_transport(settings), session)
        response = dispatcher.execute(invocation)
    except ExtensionError as exc:
        _record_invocation(settings, tokens, invocation, started, exc)
        return _render_error(exc, flags.json)
    _record_invocation(settings, tokens, invocation, started)
    _render_response(response, flags.json)
    return 0


def _help_cmd(args: argparse.Namespace) -> int:
    registry = _load_registry(args.settings)
    if not args.topic:
        build_parser().print_help()
        print_extension_index(registry)
        return 0
    if print_extension_help(registry, args.topic, args.prefix):
        return 0
    print(f"Unknown help topic: {' '.join(filter(None, [args.topic, args.prefix]))}", file=sys.stderr)
    return 1


def _plugins_service(settings: RuntimeSettings) -> ExtensionService:
    return ExtensionService(settings, Path(os.getcwd()))


def _plugins_list_cmd(args: argparse.Namespace) -> int:
    manifests = _plugins_service(args.settings).list()
    if args.json:
        _print_json({"success": True, "data": {"plugins": [manifest.name for manifest in manifests]}})
        return 0
    if not manifests:
        print("No plugins found")
        return 0
    print("Plugins:")
    for manifest in manifests:
        if manifest.description:
            print(f"  {manifest.name:<12} {manifest.description}")
        else:
            print(f"  {manifest.name}")
    return 0


def _plugins_info_cmd(args: argparse.Namespace) -> int:
    info = _plugins_service(args.settings).info(args.name)
    if info is None:
        if args.json:
            _print_json({"success": False, "error": "Plugin not found"})
        else:
            print(f"Plugin '{args.name}' not found", file=sys.stderr)
        return 1
    if args.json:
        _print_json({"success": True, "data": info})
        return 0
    print(info["name"])
    if info.get("description"):
        print(f"  {info['description']}")
    for label, key in (("version", "version"), ("entry", "entry")):
        if info.get(key):
            print(f"  {label}: {info[key]}")
    if info.get("permissions"):
        print(f"  permissions: {', '.join(info['permissions'])}")
    if info.get("minCliVersion"):
        print(f"  min cli: {info['minCliVersion']}")
    if info.get("maxCliVersion"):
        print(f"  max cli: {info['maxCliVersion']}")
    print(f"  commands: {len(info['commands'])}")
    return 0


def _plugins_init_cmd(args: argparse.Namespace) -> int:
    service = _plugins_service(args.settings)
    location: str | Path = "user"
    if args.dir:
        location = Path(args.dir).expanduser()
    elif args.local:
        location = "local"
    try:
        target = service.init(args.name, location=location, force=args.force)
    except (FileExistsError, RuntimeError, ValueError) as exc:
        if args.json:
            _print_json({"success": False, "error": str(exc)})
        else:
            print(str(exc), file=sys.stderr)
        return 1
    record_event(args.settings, "plugins.init", {"name": args.name, "dir": str(target)})
    if args.json:
        _print_json({"success": True, "data": {"name": args.name, "dir": str(target)}})
    else:
        print("Plugin scaffold created")
        print(f"  {target}")
    return 0


def _plugins_lint_cmd(args: argparse.Namespace) -> int:
    result = _plugins_service(args.settings).lint()
    if args.json:
        _print_json(result)
    else:
        errors = result["errors"]
        if errors:
            print("Lint issues:")
            for error in errors:
                print(f"  - {error}")
        else:
            print(f"No issues detected ({len(result['checked'])} manifests checked)")
    return 0 if not result["errors"] else 1


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog=PROG,
        description=HELP_OVERVIEW,
        formatter_class=argparse.RawTextHelpFormatter,
    )
    parser.add_argument("--version", action="version", version=f"{PROG} {__version__}")

    sub = parser.add_subparsers(dest="command", required=True)

    help_cmd = sub.add_parser("help", help="Show help for a plugin or one of its commands")
    help_cmd.add_argument("topic", nargs="?", help="Plugin name")
    help_cmd.add_argument("prefix", nargs="?", help="Command name or namespace prefix")
    help_cmd.set_defaults(func=_help_cmd)

    plugins_cmd = sub.add_parser("plugins", help="Manage agent-browser plugins")
    plugins_sub = plugins_cmd.add_subparsers(dest="plugins_command", required=True)

    plugins_init = plugins_sub.add_parser("init", help="Scaffold a new plugin")
    plugins_init.add_argument("name")
    location = plugins_init.add_mutually_exclusive_group()
    location.add_argument("--user", action="store_true", help="Create under the user config directory (default)")
    location.add_argument("--local", action="store_true", help="Create under ./.agent-browser/plugins")
    location.add_argument("--dir", default=None, help="Create under an explicit directory")
    plugins_init.add_argument("--force", action="store_true", help="Overwrite an existing scaffold")
    plugins_init.set_defaults(func=_plugins_init_cmd)

    plugins_list = plugins_sub.add_parser("list", help="List discovered plugins")
    plugins_list.set_defaults(func=_plugins_list_cmd)

    plugins_info = plugins_sub.add_parser("info", help="Show plugin manifest details")
    plugins_info.add_argument("name")
    plugins_info.set_defaults(func=_plugins_info_cmd)

    plugins_lint = plugins_sub.add_parser("lint", help="Validate every discovered manifest")
    plugins_lint.set_defaults(func=_plugins_lint_cmd)

    return parser


def main(argv: list[str] | None = None) -> int:
    raw_args = sys.argv[1:] if argv is None else argv
    tokens, flags = _split_global_flags(raw_args)
    parser = build_parser()
    args: argparse.Namespace | None = None
    if tokens and (tokens[0] in BUILTIN_COMMANDS or tokens[0].startswith("-")):
        args = parser.parse_args(tokens)
    try:
        settings = load_settings()
    except SettingsError as exc:
        if flags.json:
            _print_json({"success": False, "error": str(exc)})
        else:
            print(str(exc), file=sys.stderr)
        return 1
    if args is None:
        if tokens:
            return _extension_cmd(tokens, flags, settings)
        parser.print_help()
        print_extension_index(_load_registry(settings))
        return 1
    args.json = flags.json
    args.settings = settings
    return args.func(args)


if __name__ == "__main__":
    sys.exit(main())
