"""Command-line interface for costwise."""
