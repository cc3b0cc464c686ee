from __future__ import annotations

from typing import Any

import pytest

from agentbrowser.app.extension import ExtensionDispatcher, resolve_invocation, try_execute_extension
from agentbrowser.domain.extension import (
    CommandFailedError,
    ExtensionTransportError,
    InvalidInvocationError,
)
from tests.factories import FakeTransport, command_dict, make_registry, manifest_dict, refused


def _macro_registry(steps: Any, args: list[dict[str, Any]] | None = None):
    handler: dict[str, Any] = {"type": "macro"}
    if steps is not None:
        handler["steps"] = steps
    return make_registry(manifest_dict(commands=[command_dict("form.fill", handler, args=args)]))


def test_daemon_handler_forwards_single_envelope() -> None:
    transport = FakeTransport([{"success": True, "text": "Hi"}])
    response = try_execute_extension(
        make_registry(manifest_dict()),
        ["myext", "example.hello", ".title"],
        transport,
        "default",
    )

    assert response is not None
    assert response.to_dict() == {"success": True, "text": "Hi"}
    [request] = transport.requests
    assert isinstance(request.pop("id"), str)
    assert request == {
        "action": "extension",
        "extension": "myext",
        "command": "example.hello",
        "args": {"selector": ".title"},
    }
    assert transport.sessions == ["default"]


def test_non_extension_tokens_are_not_dispatched() -> None:
    transport = FakeTransport()
    assert try_execute_extension(make_registry(manifest_dict()), ["open", "https://x"], transport, "s") is None
    assert transport.requests == []


def test_macro_sends_interpolated_steps_in_order() -> None:
    registry = _macro_registry(
        [
            {"action": "fill", "selector": "#user", "value": "{{user}}"},
            {"id": "fixed", "action": "wait", "timeout": "{{wait}}"},
            {"action": "click", "selector": "button[name={{user}}]"},
        ],
        args=[{"name": "user"}, {"name": "wait", "type": "int", "required": False, "default": 250}],
    )
    transport = FakeTransport(
        [
            {"success": True, "step": 1},
            {"success": True, "step": 2},
            {"success": True, "step": 3, "data": {"clicked": True}},
        ]
    )

    response = try_execute_extension(registry, ["myext", "form.fill", "alice"], transport, "work")

    assert response.to_dict() == {"success": True, "step": 3, "data": {"clicked": True}}
    first, second, third = transport.requests
    assert first["value"] == "alice" and first["id"]
    assert second == {"id": "fixed", "action": "wait", "timeout": 250}
    assert third["selector"] == "button[name=alice]"
    assert len({first["id"], third["id"]}) == 2
    assert transport.sessions == ["work", "work", "work"]


def test_macro_stops_at_first_failed_step() -> None:
    registry = _macro_registry([{"action": "one"}, {"action": "two"}, {"action": "three"}])
    failure = {"success": False, "error": "Element not found"}
    transport = FakeTransport([{"success": True}, failure, {"success": True}])

    with pytest.raises(CommandFailedError) as excinfo:
        try_execute_extension(registry, ["myext", "form.fill"], transport, "default")

    assert [request["action"] for request in transport.requests] == ["one", "two"]
    assert excinfo.value.response.to_dict() == failure
    assert str(excinfo.value) == "Element not found"
    assert excinfo.value.to_payload() == failure


def test_transport_failure_becomes_io_error() -> None:
    registry = _macro_registry([{"action": "one"}, {"action": "two"}])
    transport = FakeTransport([refused()])

    with pytest.raises(ExtensionTransportError, match="Connection refused"):
        try_execute_extension(registry, ["myext", "form.fill"], transport, "default")
    assert len(transport.requests) == 1


def test_daemon_handler_failure_is_command_failed() -> None:
    transport = FakeTransport([{"success": False, "error": {"code": "E_TIMEOUT"}}])
    with pytest.raises(CommandFailedError) as excinfo:
        try_execute_extension(make_registry(manifest_dict()), ["myext", "example.hello", "a"], transport, "s")
    assert excinfo.value.response.payload["error"] == {"code": "E_TIMEOUT"}


@pytest.mark.parametrize("steps", [None, []])
def test_macro_without_steps_is_invalid(steps: Any) -> None:
    transport = FakeTransport()
    with pytest.raises(InvalidInvocationError) as excinfo:
        try_execute_extension(_macro_registry(steps), ["myext", "form.fill"], transport, "s")
    assert excinfo.value.message == "Macro handler missing steps"
    assert excinfo.value.usage == "agent-browser myext form.fill"
    assert transport.requests == []


@pytest.mark.parametrize("step", [{"selector": "#a"}, "{{target}}", ["action"], 5])
def test_macro_step_without_action_is_invalid(step: Any) -> None:
    registry = _macro_registry([{"action": "ok"}, step], args=[{"name": "target"}])
    transport = FakeTransport()
    with pytest.raises(InvalidInvocationError, match="Macro step missing action field"):
        try_execute_extension(registry, ["myext", "form.fill", "#a"], transport, "s")
    assert len(transport.requests) == 1


def test_step_rendered_from_whole_object_argument() -> None:
    registry = _macro_registry(
        ["{{payload}}"],
        args=[{"name": "payload", "required": False, "default": {"action": "scroll", "y": 10}}],
    )
    transport = FakeTransport()
    try_execute_extension(registry, ["myext", "form.fill"], transport, "s")
    [request] = transport.requests
    assert request["action"] == "scroll" and request["y"] == 10 and "id" in request


def test_unsupported_handler_fails_at_dispatch_time() -> None:
    registry = make_registry(manifest_dict(commands=[command_dict("x.run", {"type": "python"})]))
    invocation = resolve_invocation(registry, ["myext", "x.run"])
    assert invocation is not None

    with pytest.raises(InvalidInvocationError) as excinfo:
        ExtensionDispatcher(FakeTransport(), "s").execute(invocation)
    assert excinfo.value.message == "Unsupported handler type: python"
    assert excinfo.value.usage == "agent-browser myext x.run"


def test_single_step_macro_returns_its_response() -> None:
    registry = _macro_registry([{"action": "title"}])
    transport = FakeTransport([{"success": True, "data": "Home"}])
    response = try_execute_extension(registry, ["myext", "form.fill"], transport, "s")
    assert response.to_dict() == {"success": True, "data": "Home"}
    assert len(transport.requests) == 1
