"""Extension discovery, resolution and dispatch."""

from .dispatch import ExtensionDispatcher, try_execute_extension
from .help import print_command_help, print_extension_help, print_extension_index
from .registry import ExtensionRegistry
from .resolver import ResolvedInvocation, build_usage, resolve_invocation
from .service import ExtensionService

__all__ = [
    "ExtensionDispatcher",
    "ExtensionRegistry",
    "ExtensionService",
    "ResolvedInvocation",
    "build_usage",
    "print_command_help",
    "print_extension_help",
    "print_extension_index",
    "resolve_invocation",
    "try_execute_extension",
]
