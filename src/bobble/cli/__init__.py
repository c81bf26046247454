"""Command line interface for bobble."""
