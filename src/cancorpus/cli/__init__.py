"""Command-line surface for canCorpus."""

from cancorpus.cli.app import app

__all__ = ["app"]
