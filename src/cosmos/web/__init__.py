"""Web API for Cosmos Reader."""
