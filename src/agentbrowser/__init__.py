"""Extension registry and command dispatch for the agent-browser CLI."""

__version__ = "0.9.1"

__all__ = ["__version__"]
