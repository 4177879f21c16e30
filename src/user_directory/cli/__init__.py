"""Command-line interface for the user directory."""
