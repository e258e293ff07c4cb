"""
In-memory session store.

Holds users, code analyses and chat messages for the lifetime of the
process. Each record kind has its own id counter starting at 1.
"""

import itertools
import logging
from dataclasses import replace
from datetime import datetime, timezone
from typing import Any, Optional

from codesage.models.analysis import Issue, StructuredExplanation
from codesage.models.records import ChatMessage, CodeAnalysis, User

logger = logging.getLogger(__name__)

# Fields update_code_analysis may overwrite; id, code and created_at are fixed
UPDATABLE_ANALYSIS_FIELDS = frozenset({"filename", "language", "explanation", "issues"})


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class SessionStore:
    """
    Repository for users, code analyses and chat messages.

    The id-keyed maps are the source of truth. Two secondary indices are
    maintained on create: username -> user id, and analysis id -> ordered
    message ids. Methods are coroutines so handlers can await them the same
    way they await the oracle; none of them suspend.

    Lookups return None for unknown ids instead of raising.
    """

    def __init__(self) -> None:
        self._users: dict[int, User] = {}
        self._analyses: dict[int, CodeAnalysis] = {}
        self._messages: dict[int, ChatMessage] = {}

        self._user_ids = itertools.count(1)
        self._analysis_ids = itertools.count(1)
        self._message_ids = itertools.count(1)

        self._users_by_name: dict[str, int] = {}
        self._messages_by_analysis: dict[int, list[int]] = {}

    # ===== Users =====

    async def create_user(self, username: str, password: str) -> User:
        """
        Create a user.

        Username uniqueness is not enforced here; callers must check with
        get_user_by_username first.
        """
        user = User(id=next(self._user_ids), username=username, password=password)
        self._users[user.id] = user
        # First user registered under a name keeps the index entry
        self._users_by_name.setdefault(username, user.id)
        return user

    async def get_user(self, user_id: int) -> Optional[User]:
        return self._users.get(user_id)

    async def get_user_by_username(self, username: str) -> Optional[User]:
        user_id = self._users_by_name.get(username)
        if user_id is None:
            return None
        return self._users.get(user_id)

    # ===== Code analyses =====

    async def create_code_analysis(
        self,
        code: str,
        filename: Optional[str] = None,
        language: str = "python",
    ) -> CodeAnalysis:
        """
        Create an analysis record with no explanation or issues attached.

        Args:
            code: Submitted source code
            filename: Original filename, if the code came from an upload
            language: Source language

        Returns:
            The stored record
        """
        analysis = CodeAnalysis(
            id=next(self._analysis_ids),
            code=code,
            filename=filename,
            language=language,
            created_at=_utcnow(),
        )
        self._analyses[analysis.id] = analysis
        logger.debug(f"Created code analysis {analysis.id} ({len(code)} chars)")
        return analysis

    async def get_code_analysis(self, analysis_id: int) -> Optional[CodeAnalysis]:
        return self._analyses.get(analysis_id)

    async def update_code_analysis(
        self, analysis_id: int, **fields: Any
    ) -> Optional[CodeAnalysis]:
        """
        Merge fields over an existing analysis.

        Args:
            analysis_id: Analysis to update
            **fields: Any of filename, language, explanation, issues

        Returns:
            The updated record, or None if no analysis has that id

        Raises:
            ValueError: If a field outside UPDATABLE_ANALYSIS_FIELDS is given
        """
        unknown = set(fields) - UPDATABLE_ANALYSIS_FIELDS
        if unknown:
            raise ValueError(
                f"Cannot update code analysis field(s): {', '.join(sorted(unknown))}"
            )

        existing = self._analyses.get(analysis_id)
        if existing is None:
            return None

        updated = replace(existing, **fields)
        self._analyses[analysis_id] = updated
        return updated

    async def attach_analysis_result(
        self,
        analysis_id: int,
        explanation: StructuredExplanation,
        issues: list[Issue],
    ) -> Optional[CodeAnalysis]:
        """Shorthand for the update performed when oracle results arrive."""
        return await self.update_code_analysis(
            analysis_id, explanation=explanation, issues=list(issues)
        )

    # ===== Chat messages =====

    async def create_chat_message(
        self, analysis_id: int, message: str, response: str
    ) -> ChatMessage:
        """
        Store a question together with its resolved answer.

        The analysis id is not checked; the chat handler looks the analysis
        up before calling the oracle.
        """
        chat_message = ChatMessage(
            id=next(self._message_ids),
            analysis_id=analysis_id,
            message=message,
            response=response,
            created_at=_utcnow(),
        )
        self._messages[chat_message.id] = chat_message
        self._messages_by_analysis.setdefault(analysis_id, []).append(chat_message.id)
        return chat_message

    async def get_chat_messages(self, analysis_id: int) -> list[ChatMessage]:
        """Return messages for an analysis in creation order."""
        message_ids = self._messages_by_analysis.get(analysis_id, [])
        return [self._messages[message_id] for message_id in message_ids]

    # ===== Lifecycle =====

    def stats(self) -> dict[str, int]:
        """Record counts per kind."""
        return {
            "users": len(self._users),
            "analyses": len(self._analyses),
            "chat_messages": len(self._messages),
        }

    def close(self) -> None:
        """
        Drop all records.

        Id counters keep running so a closed store never hands out an id it
        has used before.
        """
        logger.info(f"Closing session store: {self.stats()}")
        self._users.clear()
        self._analyses.clear()
        self._messages.clear()
        self._users_by_name.clear()
        self._messages_by_analysis.clear()
