"""canCorpus CLI entry point."""

from cancorpus.cli import app

if __name__ == "__main__":
    app()
