"""Shared utilities: logging, configuration, console output, host queries."""
