"""Daemon transport adapters."""

from .http_transport import HttpDaemonTransport
from .socket_transport import SocketDaemonTransport

__all__ = ["HttpDaemonTransport", "SocketDaemonTransport"]
