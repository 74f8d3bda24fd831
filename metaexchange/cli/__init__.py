"""Command-line interface for metaexchange."""
