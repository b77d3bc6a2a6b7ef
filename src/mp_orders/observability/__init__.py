"""Observability – logging, audit trail and request correlation."""
