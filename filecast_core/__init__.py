"""Shared configuration, logging, infrastructure and errors for filecast."""
