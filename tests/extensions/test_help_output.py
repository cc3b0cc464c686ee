from __future__ import annotations

import io

from agentbrowser.app.extension import print_extension_help, print_extension_index
from agentbrowser.app.extension.registry import ExtensionRegistry
from tests.factories import command_dict, make_registry, manifest_dict


def _registry():
    return make_registry(
        manifest_dict(
            "tables",
            description="Table helpers",
            commands=[
                command_dict(
                    "table.getRow",
                    {"type": "daemon"},
                    args=[
                        {"name": "selector", "description": "Table CSS selector"},
                        {"name": "index", "type": "int", "required": False, "default": 0},
                    ],
                )
                | {"description": "Read one row"},
                command_dict("table.count", {"type": "daemon"}),
                command_dict("tablet.info", {"type": "daemon"}) | {"description": "Not a table command"},
            ],
        ),
        manifest_dict("bare", description=None, commands=[]),
    )


def _render(name: str, prefix: str | None = None) -> tuple[bool, str]:
    buffer = io.StringIO()
    found = print_extension_help(_registry(), name, prefix, out=buffer)
    return found, buffer.getvalue()


def test_extension_overview_lists_all_commands() -> None:
    found, output = _render("tables")
    assert found
    assert output == (
        "Usage: agent-browser tables <command> [args]\n"
        "\n"
        "Table helpers\n"
        "\n"
        "Commands:\n"
        "  table.getRow       Read one row\n"
        "  table.count\n"
        "  tablet.info        Not a table command\n"
    )


def test_exact_command_help_shows_usage_and_arguments() -> None:
    found, output = _render("tables", "table.getRow")
    assert found
    assert output == (
        "Usage: agent-browser tables table.getRow <selector> [index]\n"
        "\n"
        "Read one row\n"
        "\n"
        "Arguments:\n"
        "  selector     Table CSS selector\n"
        "  index\n"
    )


def test_namespace_prefix_filters_commands() -> None:
    found, output = _render("tables", "table")
    assert found
    assert output == (
        "Usage: agent-browser tables <command> [args]\n"
        "\n"
        "Commands:\n"
        "  table.getRow       Read one row\n"
        "  table.count\n"
    )


def test_unmatched_topics_report_not_found() -> None:
    assert _render("tables", "chart") == (False, "")
    assert _render("missing") == (False, "")


def test_index_lists_plugins() -> None:
    buffer = io.StringIO()
    print_extension_index(_registry(), out=buffer)
    assert buffer.getvalue() == "\nPlugins:\n  tables       Table helpers\n  bare\n"


def test_index_is_silent_without_plugins() -> None:
    buffer = io.StringIO()
    print_extension_index(ExtensionRegistry(), out=buffer)
    assert buffer.getvalue() == ""
