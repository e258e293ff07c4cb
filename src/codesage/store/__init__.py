"""
Storage layer for CodeSage.

Records are kept in memory for the lifetime of the process.
"""

from codesage.store.session_store import UPDATABLE_ANALYSIS_FIELDS, SessionStore

__all__ = ["SessionStore", "UPDATABLE_ANALYSIS_FIELDS"]
