"""Persistence: the append-only provisioning ledger."""
