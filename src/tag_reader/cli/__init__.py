"""Command-line interface for the tag reader."""
