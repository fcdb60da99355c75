"""Command-line entry point for reddi."""
