"""Use cases: what the CLI commands call."""
