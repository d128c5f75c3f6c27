"""Ella Rises events service."""

__version__ = "1.0.0"
