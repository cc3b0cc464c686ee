"""Read-only collection of the extensions known to this process."""

from __future__ import annotations

import os
from pathlib import Path
from typing import Iterable, List

from agentbrowser.domain.extension import ExtensionManifest
from agentbrowser.settings import RuntimeSettings

from .discovery import discover_manifests


class ExtensionRegistry:
    """Manifests in discovery order.

    Built once per process and never mutated. When two manifests share a name
    the first one discovered wins lookups; duplicates are neither detected nor
    reported.
    """

    def __init__(self, extensions: Iterable[ExtensionManifest] = ()) -> None:
        self._extensions = tuple(extensions)

    @classmethod
    def load(cls, settings: RuntimeSettings, cwd: Path | None = None) -> "ExtensionRegistry":
        base = cwd if cwd is not None else Path(os.getcwd())
        return cls(discover_manifests(settings, base))

    def list(self) -> List[ExtensionManifest]:
        return list(self._extensions)

    def find(self, name: str) -> ExtensionManifest | None:
        for extension in self._extensions:
            if extension.name == name:
                return extension
        return None

    def __len__(self) -> int:
        return len(self._extensions)


__all__ = ["ExtensionRegistry"]
