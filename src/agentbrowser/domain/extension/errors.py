"""Error kinds raised while resolving and dispatching extension commands."""

from __future__ import annotations

from typing import Any, Dict

from agentbrowser.domain.daemon import DaemonResponse


class ExtensionError(RuntimeError):
    """Base class for failures surfaced by the extension engine."""

    kind = "extension"

    def to_payload(self) -> Dict[str, Any]:
        return {"success": False, "error": str(self)}


class UsageError(ExtensionError):
    """Locally recoverable failure that carries the command usage line."""

    def __init__(self, message: str, usage: str) -> None:
        super().__init__(message)
        self.message = message
        self.usage = usage

    def to_payload(self) -> Dict[str, Any]:
        return {"success": False, "error": self.message, "usage": self.usage}


class InvalidInvocationError(UsageError):
    """Unknown subcommand, wrong argument count or a malformed macro."""

    kind = "invalid_invocation"


class InvalidValueError(UsageError):
    """A provided argument token failed type coercion."""

    kind = "invalid_value"


class ExtensionTransportError(ExtensionError):
    """The daemon could not be reached or answered garbage."""

    kind = "io"

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class CommandFailedError(ExtensionError):
    """The daemon reported ``success: false``; the response is kept as-is."""

    kind = "command_failed"

    def __init__(self, response: DaemonResponse) -> None:
        super().__init__(response.error_message or "Command failed")
        self.response = response

    def to_payload(self) -> Dict[str, Any]:
        payload = self.response.to_dict()
        payload.setdefault("success", False)
        return payload


__all__ = [
    "CommandFailedError",
    "ExtensionError",
    "ExtensionTransportError",
    "InvalidInvocationError",
    "InvalidValueError",
    "UsageError",
]
