"""Filesystem discovery of extension manifests.

Roots are visited in a fixed order:

1. ``$AGENT_BROWSER_PLUGINS_DIR``
2. ``$AGENT_BROWSER_EXTENSIONS_DIR``
3. ``<cwd>/.agent-browser/plugins``
4. ``<cwd>/.agent-browser/extensions``
5. ``<config>/agent-browser/plugins``
6. ``<config>/agent-browser/extensions``

Inside each root the manifest at the root itself comes first, then scoped and
unscoped plugin packages under ``node_modules``, then every immediate
subdirectory holding an ``extension.json``. The project's own
``<cwd>/node_modules`` is scanned last. Unreadable or malformed manifests are
skipped without a report.
"""

from __future__ import annotations

import json
from json import JSONDecodeError
from pathlib import Path
from typing import Iterator, List

from agentbrowser.domain.extension import (
    MANIFEST_FILENAME,
    ExtensionManifest,
    ManifestError,
    is_plugin_package_name,
)
from agentbrowser.settings import APP_DIRNAME, RuntimeSettings

from .schema import iter_schema_errors

MODULES_DIRNAME = "node_modules"
PROJECT_DIRNAME = ".agent-browser"
ROOT_SUBDIRS = ("plugins", "extensions")


def discover_extension_roots(settings: RuntimeSettings, cwd: Path) -> List[Path]:
    roots: List[Path] = []
    for override in (settings.plugins_dir, settings.extensions_dir):
        if override is not None:
            roots.append(override)
    roots.extend(cwd / PROJECT_DIRNAME / subdir for subdir in ROOT_SUBDIRS)
    if settings.config_dir is not None:
        roots.extend(settings.config_dir / APP_DIRNAME / subdir for subdir in ROOT_SUBDIRS)
    return roots


def _child_dirs(path: Path) -> List[Path]:
    try:
        return [entry for entry in sorted(path.iterdir()) if entry.is_dir()]
    except OSError:
        return []


def _manifest_in(directory: Path) -> Path | None:
    candidate = directory / MANIFEST_FILENAME
    return candidate if candidate.is_file() else None


def iter_module_manifest_paths(modules_dir: Path) -> Iterator[Path]:
    """Yield manifests of plugin packages in a ``node_modules`` directory."""
    if not modules_dir.is_dir():
        return
    entries = _child_dirs(modules_dir)
    for scope_dir in entries:
        if not scope_dir.name.startswith("@"):
            continue
        for package_dir in _child_dirs(scope_dir):
            if not is_plugin_package_name(f"{scope_dir.name}/{package_dir.name}"):
                continue
            manifest = _manifest_in(package_dir)
            if manifest is not None:
                yield manifest
    for package_dir in entries:
        if package_dir.name.startswith("@") or not is_plugin_package_name(package_dir.name):
            continue
        manifest = _manifest_in(package_dir)
        if manifest is not None:
            yield manifest


def iter_root_manifest_paths(root: Path) -> Iterator[Path]:
    if not root.is_dir():
        return
    manifest = _manifest_in(root)
    if manifest is not None:
        yield manifest
    yield from iter_module_manifest_paths(root / MODULES_DIRNAME)
    for child in _child_dirs(root):
        manifest = _manifest_in(child)
        if manifest is not None:
            yield manifest


def iter_manifest_paths(settings: RuntimeSettings, cwd: Path) -> Iterator[Path]:
    for root in discover_extension_roots(settings, cwd):
        yield from iter_root_manifest_paths(root)
    yield from iter_module_manifest_paths(cwd / MODULES_DIRNAME)


def read_manifest(path: Path) -> ExtensionManifest:
    """Parse and validate one manifest file.

    Raises ``ManifestError`` for invalid JSON or a payload that does not match
    the manifest schema, ``OSError`` when the file cannot be read.
    """
    raw = path.read_text(encoding="utf-8")
    try:
        data = json.loads(raw)
    except JSONDecodeError as exc:
        raise ManifestError(f"{exc.msg} (line {exc.lineno} column {exc.colno})") from exc
    except RecursionError as exc:
        raise ManifestError("nesting too deep") from exc
    for location, message in iter_schema_errors(data):
        raise ManifestError(f"schema violation at {location or '<root>'}: {message}")
    return ExtensionManifest.from_dict(data)


def load_manifest(path: Path) -> ExtensionManifest | None:
    try:
        return read_manifest(path)
    except (OSError, UnicodeDecodeError, RecursionError, ManifestError):
        return None


def discover_manifests(settings: RuntimeSettings, cwd: Path) -> List[ExtensionManifest]:
    manifests: List[ExtensionManifest] = []
    for path in iter_manifest_paths(settings, cwd):
        manifest = load_manifest(path)
        if manifest is not None:
            manifests.append(manifest)
    return manifests


__all__ = [
    "MODULES_DIRNAME",
    "discover_extension_roots",
    "discover_manifests",
    "iter_manifest_paths",
    "iter_module_manifest_paths",
    "iter_root_manifest_paths",
    "load_manifest",
    "read_manifest",
]
