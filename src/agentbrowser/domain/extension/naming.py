"""Plugin package naming rules shared by discovery and the lifecycle commands."""

from __future__ import annotations

PLUGIN_PACKAGE_PREFIX = "agent-browser-plugin-"


def strip_package_version(name: str) -> str | None:
    """Drop a trailing ``@version`` from ``name`` or ``@scope/name``.

    Returns ``None`` for a scoped name without a package part.
    """
    if name.startswith("@"):
        slash = name.find("/")
        if slash == -1:
            return None
        rest = name[slash + 1:]
        at = rest.rfind("@")
        if at == -1:
            return name
        return name[: slash + 1 + at]
    at = name.rfind("@")
    if at == -1:
        return name
    return name[:at]


def is_plugin_package_name(name: str) -> bool:
    base = strip_package_version(name)
    if base is None:
        return False
    if "/" in base:
        scope, package = base.split("/", 1)
        return scope.startswith("@") and package.startswith(PLUGIN_PACKAGE_PREFIX)
    return base.startswith(PLUGIN_PACKAGE_PREFIX)


__all__ = ["PLUGIN_PACKAGE_PREFIX", "is_plugin_package_name", "strip_package_version"]
