"""Logging setup and the operator-facing reporting facade."""
