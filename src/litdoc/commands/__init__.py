"""Command implementations dispatched from the CLI."""
