"""Application services for the extension engine."""
