"""Unix socket transport speaking newline-delimited JSON."""

from __future__ import annotations

import json
import socket
from pathlib import Path
from typing import Any, Dict

from agentbrowser.domain.daemon import DaemonResponse
from agentbrowser.ports.daemon import DaemonTransport, DaemonTransportError

_CHUNK = 65536


def decode_response(raw: bytes) -> DaemonResponse:
    try:
        body = json.loads(raw.decode("utf-8"))
    except (UnicodeDecodeError, json.JSONDecodeError) as exc:
        raise DaemonTransportError(f"Invalid response from daemon: {exc}") from exc
    if not isinstance(body, dict):
        raise DaemonTransportError("Invalid response from daemon: expected a JSON object")
    return DaemonResponse.from_dict(body)


class SocketDaemonTransport(DaemonTransport):
    """One request per connection to ``<socket_dir>/<session>.sock``."""

    def __init__(self, socket_dir: Path, *, timeout: float | None = None) -> None:
        self._socket_dir = socket_dir
        self._timeout = timeout

    def socket_path(self, session: str) -> Path:
        return self._socket_dir / f"{session}.sock"

    def send(self, request: Dict[str, Any], session: str) -> DaemonResponse:
        family = getattr(socket, "AF_UNIX", None)
        if family is None:
            raise DaemonTransportError("Unix domain sockets are not available on this platform")
        path = self.socket_path(session)
        payload = (json.dumps(request, ensure_ascii=False) + "\n").encode("utf-8")
        try:
            with socket.socket(family, socket.SOCK_STREAM) as sock:
                sock.settimeout(self._timeout)
                sock.connect(str(path))
                sock.sendall(payload)
                raw = self._read_line(sock)
        except OSError as exc:
            raise DaemonTransportError(f"Failed to connect to daemon at {path}: {exc}") from exc
        if not raw.strip():
            raise DaemonTransportError("Daemon closed the connection without a response")
        return decode_response(raw)

    @staticmethod
    def _read_line(sock: socket.socket) -> bytes:
        buffer = bytearray()
        while True:
            chunk = sock.recv(_CHUNK)
            if not chunk:
                break
            buffer.extend(chunk)
            newline = buffer.find(b"\n")
            if newline != -1:
                return bytes(buffer[:newline])
        return bytes(buffer)


__all__ = ["SocketDaemonTransport", "decode_response"]
