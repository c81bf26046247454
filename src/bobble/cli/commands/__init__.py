"""CLI commands for bobble."""
