"""Core infrastructure: configuration, logging, tags, tracking, hostname."""
