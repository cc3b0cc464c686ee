"""Port definitions consumed by the extension engine."""
