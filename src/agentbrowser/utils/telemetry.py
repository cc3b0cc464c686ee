"""JSONL telemetry for CLI invocations.

Enabled unless ``AGENT_BROWSER_TELEMETRY`` is one of ``0``, ``false``, ``no``
or ``off``. Each record is checked against ``telemetry.schema.json`` before
it is appended to ``<log_dir>/telemetry.jsonl``.
"""

from __future__ import annotations

import json
import os
import time
from functools import lru_cache
from importlib import resources
from pathlib import Path
from typing import Any, Iterator

import jsonschema

from agentbrowser.settings import RuntimeSettings

TELEMETRY_ENV = "AGENT_BROWSER_TELEMETRY"
TELEMETRY_FILENAME = "telemetry.jsonl"

_DISABLE_VALUES = {"0", "false", "no", "off"}
_OPTIONAL_FIELDS = (("status", "status"), ("component", "component"), ("duration_ms", "durationMs"))


def telemetry_enabled() -> bool:
    return os.getenv(TELEMETRY_ENV, "1").lower() not in _DISABLE_VALUES


def telemetry_path(settings: RuntimeSettings) -> Path:
    return settings.log_dir / TELEMETRY_FILENAME


def build_record(event: str, payload: dict[str, Any] | None = None, *, level: str = "info", **fields: Any) -> dict[str, Any]:
    """Assemble one record; raises ``jsonschema.ValidationError`` when malformed."""
    record: dict[str, Any] = {"ts": time.time(), "event": event, "payload": payload or {}, "level": level}
    for name, key in _OPTIONAL_FIELDS:
        if fields.get(name) is not None:
            record[key] = fields[name]
    _validator().validate(record)
    return record


def record_event(
    settings: RuntimeSettings,
    event: str,
    payload: dict[str, Any] | None = None,
    *,
    level: str = "info",
    status: str | None = None,
    component: str | None = None,
    duration_ms: float | None = None,
) -> None:
    if not telemetry_enabled():
        return
    record = build_record(
        event,
        payload,
        level=level,
        status=status,
        component=component,
        duration_ms=duration_ms,
    )
    path = telemetry_path(settings)
    path.parent.mkdir(parents=True, exist_ok=True)
    with path.open("a", encoding="utf-8") as fh:
        fh.write(json.dumps(record, ensure_ascii=False) + "\n")


def iter_events(settings: RuntimeSettings, event: str | None = None) -> Iterator[dict[str, Any]]:
    """Yield stored records, optionally only those named ``event``; corrupt lines are skipped."""
    path = telemetry_path(settings)
    if not path.exists():
        return
    with path.open("r", encoding="utf-8") as fh:
        for line in fh:
            try:
                record = json.loads(line)
            except json.JSONDecodeError:
                continue
            if not isinstance(record, dict):
                continue
            if event is None or record.get("event") == event:
                yield record


@lru_cache(maxsize=1)
def _validator() -> jsonschema.Draft202012Validator:
    resource = resources.files("agentbrowser.resources") / "telemetry.schema.json"
    with resource.open("r", encoding="utf-8") as handle:
        return jsonschema.Draft202012Validator(json.load(handle))


__all__ = ["build_record", "iter_events", "record_event", "telemetry_enabled", "telemetry_path"]
