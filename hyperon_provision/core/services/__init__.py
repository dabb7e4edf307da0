"""Domain services: probing, step library, repository sync, strategies."""
