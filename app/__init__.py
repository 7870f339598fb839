"""filecast API application."""
