"""Core infrastructure: configuration, logging, and tracker database access."""
