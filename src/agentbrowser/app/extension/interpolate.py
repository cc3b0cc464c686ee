"""Placeholder substitution for macro step templates."""

from __future__ import annotations

import copy
import json
import re
from typing import Any, Mapping

_EXACT_PLACEHOLDER = re.compile(r"\{\{([^{}]+)\}\}")


def render_text(value: Any) -> str:
    if isinstance(value, str):
        return value
    return json.dumps(value, separators=(",", ":"), ensure_ascii=False)


def interpolate_string(template: str, args: Mapping[str, Any]) -> Any:
    """Substitute ``{{name}}`` placeholders in one string.

    A string that is exactly one known placeholder becomes the raw argument
    value, keeping its JSON type. Otherwise known placeholders are replaced
    textually and unknown ones stay as written.
    """
    match = _EXACT_PLACEHOLDER.fullmatch(template)
    if match and match.group(1) in args:
        return copy.deepcopy(args[match.group(1)])
    result = template
    for key, value in args.items():
        placeholder = "{{" + key + "}}"
        if placeholder in result:
            result = result.replace(placeholder, render_text(value))
    return result


def interpolate_value(template: Any, args: Mapping[str, Any]) -> Any:
    if isinstance(template, str):
        return interpolate_string(template, args)
    if isinstance(template, list):
        return [interpolate_value(item, args) for item in template]
    if isinstance(template, dict):
        return {key: interpolate_value(item, args) for key, item in template.items()}
    return template


__all__ = ["interpolate_string", "interpolate_value", "render_text"]
