"""Adapters – HTTP, persistence and broker integrations."""
