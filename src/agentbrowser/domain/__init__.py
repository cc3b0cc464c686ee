"""Domain layer for the extension engine."""
