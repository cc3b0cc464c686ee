"""HTTP transport for daemons exposing a command endpoint."""

from __future__ import annotations

from typing import Any, Dict

import requests

from agentbrowser.domain.daemon import DaemonResponse
from agentbrowser.ports.daemon import DaemonTransport, DaemonTransportError

SESSION_HEADER = "X-Agent-Browser-Session"


class HttpDaemonTransport(DaemonTransport):
    def __init__(self, base_url: str, session: requests.Session | None = None, *, timeout: float = 30) -> None:
        self._url = base_url.rstrip("/") + "/command"
        self._http = session or requests.Session()
        self._timeout = timeout

    def send(self, request: Dict[str, Any], session: str) -> DaemonResponse:
        try:
            response = self._http.post(
                self._url,
                json=request,
                headers={SESSION_HEADER: session},
                timeout=self._timeout,
            )
        except requests.RequestException as exc:
            raise DaemonTransportError(f"Daemon request failed: {exc}") from exc
        try:
            body = response.json()
        except ValueError as exc:
            raise DaemonTransportError(
                f"Daemon request failed: {response.status_code} {response.text}"
            ) from exc
        if not isinstance(body, dict):
            raise DaemonTransportError("Invalid response from daemon: expected a JSON object")
        return DaemonResponse.from_dict(body)


__all__ = ["HttpDaemonTransport", "SESSION_HEADER"]
