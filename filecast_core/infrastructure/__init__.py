"""Clients for external infrastructure."""
