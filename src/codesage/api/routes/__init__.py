"""API route modules."""

from codesage.api.routes import analysis, chat, upload

__all__ = ["analysis", "chat", "upload"]
