"""Core infrastructure: configuration, logging, database and HTTP listener."""
