"""Port definition for the daemon transport."""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any, Dict

from agentbrowser.domain.daemon import DaemonResponse


class DaemonTransportError(RuntimeError):
    """Raised when a request cannot be delivered or its reply cannot be read."""


class DaemonTransport(ABC):
    @abstractmethod
    def send(self, request: Dict[str, Any], session: str) -> DaemonResponse:
        """Deliver one request to the daemon serving ``session`` and return its reply."""
