"""Adapters implementing the engine ports."""
