"""Daemon response value object."""

from __future__ import annotations

import copy
from dataclasses import dataclass, field
from typing import Any, Dict
from uuid import uuid4


def new_command_id() -> str:
    return uuid4().hex


@dataclass(frozen=True)
class DaemonResponse:
    """Raw JSON object returned by the daemon for one request.

    Only ``success`` is interpreted; every other key is opaque payload.
    """

    payload: Dict[str, Any] = field(default_factory=dict)

    @property
    def success(self) -> bool:
        return self.payload.get("success") is True

    @property
    def data(self) -> Any:
        return self.payload.get("data")

    @property
    def error_message(self) -> str | None:
        error = self.payload.get("error")
        if error is None:
            return None
        return error if isinstance(error, str) else str(error)

    def to_dict(self) -> Dict[str, Any]:
        return copy.deepcopy(self.payload)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "DaemonResponse":
        return cls(payload=dict(data))


__all__ = ["DaemonResponse", "new_command_id"]
