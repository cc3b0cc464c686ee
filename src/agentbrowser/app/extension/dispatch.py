"""Execution of resolved extension commands against the daemon."""

from __future__ import annotations

from typing import Any, Dict, Sequence

from agentbrowser.domain.daemon import DaemonResponse, new_command_id
from agentbrowser.domain.extension import (
    CommandFailedError,
    ExtensionCommand,
    ExtensionManifest,
    ExtensionTransportError,
    HandlerKind,
    InvalidInvocationError,
)
from agentbrowser.ports.daemon import DaemonTransport, DaemonTransportError

from .interpolate import interpolate_value
from .registry import ExtensionRegistry
from .resolver import ResolvedInvocation, build_usage, resolve_invocation


class ExtensionDispatcher:
    """Runs one resolved command at a time through a daemon transport.

    Macro steps are sent in order and stop at the first failure; steps that
    already succeeded are not rolled back.
    """

    def __init__(self, transport: DaemonTransport, session: str) -> None:
        self._transport = transport
        self._session = session

    def execute(self, invocation: ResolvedInvocation) -> DaemonResponse:
        extension, command = invocation.extension, invocation.command
        kind = command.handler.kind
        if kind is HandlerKind.MACRO:
            return self._run_macro(extension, command, invocation.args)
        if kind is HandlerKind.DAEMON:
            return self._run_daemon(extension, command, invocation.args)
        raise InvalidInvocationError(
            f"Unsupported handler type: {command.handler.type}",
            build_usage(extension, command),
        )

    def _run_macro(
        self,
        extension: ExtensionManifest,
        command: ExtensionCommand,
        args: Dict[str, Any],
    ) -> DaemonResponse:
        usage = build_usage(extension, command)
        steps = command.handler.steps
        if not steps:
            raise InvalidInvocationError("Macro handler missing steps", usage)

        first, *rest = steps
        response = self._send(self._render_step(first, args, usage))
        for step in rest:
            response = self._send(self._render_step(step, args, usage))
        return response

    @staticmethod
    def _render_step(step: Any, args: Dict[str, Any], usage: str) -> Dict[str, Any]:
        rendered = interpolate_value(step, args)
        if isinstance(rendered, dict) and "id" not in rendered:
            rendered["id"] = new_command_id()
        if not isinstance(rendered, dict) or "action" not in rendered:
            raise InvalidInvocationError("Macro step missing action field", usage)
        return rendered

    def _run_daemon(
        self,
        extension: ExtensionManifest,
        command: ExtensionCommand,
        args: Dict[str, Any],
    ) -> DaemonResponse:
        request = {
            "id": new_command_id(),
            "action": "extension",
            "extension": extension.name,
            "command": command.name,
            "args": args,
        }
        return self._send(request)

    def _send(self, request: Dict[str, Any]) -> DaemonResponse:
        try:
            response = self._transport.send(request, self._session)
        except DaemonTransportError as exc:
            raise ExtensionTransportError(str(exc)) from exc
        if not response.success:
            raise CommandFailedError(response)
        return response


def try_execute_extension(
    registry: ExtensionRegistry,
    tokens: Sequence[str],
    transport: DaemonTransport,
    session: str,
) -> DaemonResponse | None:
    """Resolve and run ``tokens``; ``None`` when they are not an extension call."""
    invocation = resolve_invocation(registry, tokens)
    if invocation is None:
        return None
    return ExtensionDispatcher(transport, session).execute(invocation)


__all__ = ["ExtensionDispatcher", "try_execute_extension"]
