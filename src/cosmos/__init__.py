"""Cosmos Reader: a personal space-science reading library."""

__version__ = "0.1.0"
