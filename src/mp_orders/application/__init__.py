"""Application layer – order use cases and event publication."""
