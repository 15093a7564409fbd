"""CLI module for Cosmos Reader."""
