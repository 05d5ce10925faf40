"""Command line interface for genomeannot."""

from genomeannot.cli.main import cli, main

__all__ = ["cli", "main"]
