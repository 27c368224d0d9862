"""Command-line interface for Progress Engine."""
