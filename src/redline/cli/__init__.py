"""Command line interface for Redline."""
