"""Command-line interface for skillkeep."""
