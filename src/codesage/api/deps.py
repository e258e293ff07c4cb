"""FastAPI dependencies for CodeSage.

Shared services live on app.state and are handed to routes via Depends().
"""

from fastapi import Request

from codesage.config import Settings
from codesage.oracle import CodeOracle
from codesage.store import SessionStore


async def get_store(request: Request) -> SessionStore:
    """Get the SessionStore from app state."""
    return request.app.state.store


async def get_oracle(request: Request) -> CodeOracle:
    """Get the CodeOracle from app state."""
    return request.app.state.oracle


async def get_settings(request: Request) -> Settings:
    """Get the Settings the app was built with."""
    return request.app.state.settings
