"""Command-line interface for Hoard."""
