"""Domain model for extension manifests and dispatch errors."""

from .errors import (
    CommandFailedError,
    ExtensionError,
    ExtensionTransportError,
    InvalidInvocationError,
    InvalidValueError,
    UsageError,
)
from .manifest import (
    MANIFEST_FILENAME,
    ArgType,
    ExtensionArg,
    ExtensionCommand,
    ExtensionHandler,
    ExtensionManifest,
    HandlerKind,
    ManifestError,
)
from .naming import PLUGIN_PACKAGE_PREFIX, is_plugin_package_name, strip_package_version

__all__ = [
    "ArgType",
    "CommandFailedError",
    "ExtensionArg",
    "ExtensionCommand",
    "ExtensionError",
    "ExtensionHandler",
    "ExtensionManifest",
    "ExtensionTransportError",
    "HandlerKind",
    "InvalidInvocationError",
    "InvalidValueError",
    "MANIFEST_FILENAME",
    "ManifestError",
    "PLUGIN_PACKAGE_PREFIX",
    "UsageError",
    "is_plugin_package_name",
    "strip_package_version",
]
