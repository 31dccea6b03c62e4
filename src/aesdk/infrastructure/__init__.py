"""Clients for the external services the SDK talks to."""
