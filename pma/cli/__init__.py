"""Command-line interface for the PMA API."""
