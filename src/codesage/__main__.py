"""Allow running as python -m codesage."""

from codesage.cli import app

app()
