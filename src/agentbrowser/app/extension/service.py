"""Plugin scaffolding, listing and manifest lint."""

from __future__ import annotations

import json
import shutil
from dataclasses import dataclass
from json import JSONDecodeError
from pathlib import Path
from typing import Any, List

from agentbrowser.domain.extension import MANIFEST_FILENAME, ExtensionManifest, ManifestError
from agentbrowser.settings import APP_DIRNAME, RuntimeSettings

from .discovery import PROJECT_DIRNAME, iter_manifest_paths
from .registry import ExtensionRegistry
from .schema import iter_schema_errors

LOCATIONS = ("user", "local", "auto")
DEFAULT_MANIFEST: dict[str, Any] = {
    "name": "",
    "version": "0.1.0",
    "description": "Plugin description",
    "entry": "./dist/index.js",
    "permissions": [],
    "commands": [
        {
            "name": "example.hello",
            "description": "Example command",
            "args": [
                {"name": "selector", "type": "string", "required": True, "description": "CSS selector"},
            ],
            "handler": {"type": "daemon"},
        }
    ],
    "minCliVersion": "0.8.4",
}


@dataclass
class LintIssue:
    path: str
    message: str

    def __str__(self) -> str:
        return f"{self.path}: {self.message}"


class ExtensionService:
    def __init__(self, settings: RuntimeSettings, cwd: Path) -> None:
        self._settings = settings
        self._cwd = cwd
        self._registry: ExtensionRegistry | None = None

    @property
    def registry(self) -> ExtensionRegistry:
        if self._registry is None:
            self._registry = ExtensionRegistry.load(self._settings, self._cwd)
        return self._registry

    def resolve_root(self, location: str | Path = "user") -> Path:
        if isinstance(location, Path):
            return location
        local = self._cwd / PROJECT_DIRNAME / "plugins"
        if location == "local":
            return local
        if location == "auto" and local.exists():
            return local
        if location not in LOCATIONS:
            raise ValueError(f"Unknown plugin location: {location}")
        if self._settings.config_dir is None:
            raise RuntimeError("Could not resolve user config directory")
        return self._settings.config_dir / APP_DIRNAME / "plugins"

    def init(self, name: str, *, location: str | Path = "user", force: bool = False) -> Path:
        target = self.resolve_root(location) / name
        if target.exists():
            if not force:
                raise FileExistsError(f"Plugin '{name}' already exists at {target}")
            shutil.rmtree(target)
        target.mkdir(parents=True, exist_ok=True)
        manifest = json.loads(json.dumps(DEFAULT_MANIFEST))
        manifest["name"] = name
        (target / MANIFEST_FILENAME).write_text(
            json.dumps(manifest, ensure_ascii=False, indent=2) + "\n",
            encoding="utf-8",
        )
        readme = target / "README.md"
        readme.write_text(
            f"# {name}\n\nagent-browser plugin.\n\n"
            f"    agent-browser {name} example.hello <selector>\n",
            encoding="utf-8",
        )
        return target

    def list(self) -> List[ExtensionManifest]:
        return self.registry.list()

    def info(self, name: str) -> dict[str, Any] | None:
        manifest = self.registry.find(name)
        if manifest is None:
            return None
        return manifest.to_dict()

    def lint(self) -> dict[str, Any]:
        """Report every candidate manifest that discovery would skip."""
        issues: List[LintIssue] = []
        checked: List[str] = []
        for path in iter_manifest_paths(self._settings, self._cwd):
            checked.append(str(path))
            issues.extend(self._lint_file(path))
        return {
            "checked": checked,
            "errors": [str(issue) for issue in issues],
        }

    def _lint_file(self, path: Path) -> List[LintIssue]:
        try:
            data = json.loads(path.read_text(encoding="utf-8"))
        except JSONDecodeError as exc:
            return [LintIssue(str(path), f"invalid JSON: {exc.msg} (line {exc.lineno} column {exc.colno})")]
        except RecursionError:
            return [LintIssue(str(path), "invalid JSON: nesting too deep")]
        except (OSError, UnicodeDecodeError) as exc:
            return [LintIssue(str(path), f"unreadable: {exc}")]
        try:
            issues = [
                LintIssue(str(path), f"schema violation at {location or '<root>'}: {message}")
                for location, message in iter_schema_errors(data)
            ]
        except RecursionError:
            return [LintIssue(str(path), "schema check failed: nesting too deep")]
        if issues:
            return issues
        try:
            ExtensionManifest.from_dict(data)
        except ManifestError as exc:
            return [LintIssue(str(path), str(exc))]
        return []


__all__ = ["DEFAULT_MANIFEST", "ExtensionService", "LintIssue", "LOCATIONS"]
