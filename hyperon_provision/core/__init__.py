"""Core domain: models, configuration, services, engine, and use cases."""
