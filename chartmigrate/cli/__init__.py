"""Command-line interface for chartmigrate."""
