"""Command-line entry point for vigilant."""
