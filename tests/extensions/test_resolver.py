from __future__ import annotations

import pytest

from agentbrowser.app.extension import build_usage, resolve_invocation
from agentbrowser.domain.extension import InvalidInvocationError, InvalidValueError
from tests.factories import command_dict, make_registry, manifest_dict


def _typed_registry():
    return make_registry(
        manifest_dict(
            commands=[
                command_dict(
                    "typed.run",
                    {"type": "daemon"},
                    args=[
                        {"name": "count", "type": "int"},
                        {"name": "ratio", "type": "number"},
                        {"name": "flag", "type": "bool"},
                        {"name": "label", "type": "mystery"},
                    ],
                ),
                command_dict(
                    "table.getRow",
                    {"type": "daemon"},
                    args=[
                        {"name": "selector"},
                        {"name": "index", "type": "int", "required": False, "default": 0},
                        {"name": "column", "required": False},
                    ],
                ),
                command_dict("noargs", {"type": "daemon"}),
            ]
        )
    )


def test_registry_list_and_find_keep_discovery_order() -> None:
    registry = make_registry(
        manifest_dict("alpha"),
        manifest_dict("beta"),
        manifest_dict("alpha", description="shadowed"),
    )
    assert [manifest.name for manifest in registry.list()] == ["alpha", "beta", "alpha"]
    first = registry.find("alpha")
    assert first is not None and first.description == "alpha plugin"
    assert registry.find("gamma") is None


@pytest.mark.parametrize("tokens", [[], ["myext"], ["unknown", "example.hello"]])
def test_non_extension_tokens_resolve_to_none(tokens: list[str]) -> None:
    assert resolve_invocation(make_registry(manifest_dict()), tokens) is None


def test_unknown_subcommand_uses_extension_usage() -> None:
    with pytest.raises(InvalidInvocationError) as excinfo:
        resolve_invocation(make_registry(manifest_dict()), ["myext", "example.bye"])
    assert excinfo.value.message == "Unknown subcommand: example.bye"
    assert excinfo.value.usage == "agent-browser myext <command> [args]"


def test_missing_required_argument() -> None:
    with pytest.raises(InvalidInvocationError) as excinfo:
        resolve_invocation(make_registry(manifest_dict()), ["myext", "example.hello"])
    assert excinfo.value.message == "Missing argument: selector"
    assert excinfo.value.usage == "agent-browser myext example.hello <selector>"


def test_too_many_arguments() -> None:
    with pytest.raises(InvalidInvocationError) as excinfo:
        resolve_invocation(make_registry(manifest_dict()), ["myext", "example.hello", ".a", ".b"])
    assert excinfo.value.message == "Too many arguments"


def test_command_without_args_rejects_extra_tokens() -> None:
    registry = _typed_registry()
    assert resolve_invocation(registry, ["myext", "noargs"]).args == {}
    with pytest.raises(InvalidInvocationError):
        resolve_invocation(registry, ["myext", "noargs", "extra"])


def test_defaults_bound_and_optional_without_default_absent() -> None:
    invocation = resolve_invocation(_typed_registry(), ["myext", "table.getRow", "#orders"])
    assert invocation is not None
    assert invocation.command.name == "table.getRow"
    assert invocation.args == {"selector": "#orders", "index": 0}
    assert "column" not in invocation.args


def test_provided_tokens_override_defaults() -> None:
    invocation = resolve_invocation(_typed_registry(), ["myext", "table.getRow", "#orders", "3", "total"])
    assert invocation.args == {"selector": "#orders", "index": 3, "column": "total"}


def test_typed_coercion() -> None:
    invocation = resolve_invocation(_typed_registry(), ["myext", "typed.run", "-42", "2.5", "true", "007"])
    assert invocation.args == {"count": -42, "ratio": 2.5, "flag": True, "label": "007"}
    assert isinstance(invocation.args["count"], int)
    assert isinstance(invocation.args["ratio"], float)


@pytest.mark.parametrize(
    ("tokens", "message"),
    [
        (["abc", "1", "true", "x"], "Invalid int for count"),
        (["1.5", "1", "true", "x"], "Invalid int for count"),
        (["1_000", "1", "true", "x"], "Invalid int for count"),
        (["99999999999999999999", "1", "true", "x"], "Invalid int for count"),
        (["9" * 5000, "1", "true", "x"], "Invalid int for count"),
        (["١٢", "1", "true", "x"], "Invalid int for count"),
        (["1", "١٢", "true", "x"], "Invalid number for ratio"),
        (["1", "fast", "true", "x"], "Invalid number for ratio"),
        (["1", " 2", "true", "x"], "Invalid number for ratio"),
        (["1", "nan", "true", "x"], "Invalid number for ratio"),
        (["1", "1", "True", "x"], "Invalid bool for flag"),
        (["1", "1", "yes", "x"], "Invalid bool for flag"),
    ],
)
def test_coercion_failures_raise_invalid_value(tokens: list[str], message: str) -> None:
    with pytest.raises(InvalidValueError) as excinfo:
        resolve_invocation(_typed_registry(), ["myext", "typed.run", *tokens])
    assert excinfo.value.message == message
    assert excinfo.value.usage == "agent-browser myext typed.run <count> <ratio> <flag> <label>"


def test_number_accepts_exponents() -> None:
    invocation = resolve_invocation(_typed_registry(), ["myext", "typed.run", "1", "1e3", "false", "x"])
    assert invocation.args["ratio"] == 1000.0
    assert invocation.args["flag"] is False


def test_usage_marks_optional_arguments() -> None:
    registry = _typed_registry()
    extension = registry.find("myext")
    command = extension.find_command("table.getRow")
    assert build_usage(extension, command) == "agent-browser myext table.getRow <selector> [index] [column]"


def test_default_values_are_not_shared_between_invocations() -> None:
    registry = make_registry(
        manifest_dict(
            commands=[
                command_dict(
                    "tags.set",
                    {"type": "daemon"},
                    args=[{"name": "tags", "required": False, "default": ["a"]}],
                )
            ]
        )
    )
    first = resolve_invocation(registry, ["myext", "tags.set"])
    first.args["tags"].append("mutated")
    second = resolve_invocation(registry, ["myext", "tags.set"])
    assert second.args["tags"] == ["a"]
