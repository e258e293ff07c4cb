"""Serialization of prior chat exchanges into oracle context."""

from typing import Sequence

from codesage.models.records import ChatMessage

EXCHANGE_SEPARATOR = "\n\n"


def format_chat_context(
    messages: Sequence[ChatMessage], max_exchanges: int = 0
) -> str:
    """
    Render prior Q/A pairs as a transcript.

    Each exchange becomes "Q: <message>\\nA: <response>"; exchanges are
    joined by a blank line in chronological order.

    Args:
        messages: Chat messages in creation order
        max_exchanges: Keep only the most recent N exchanges (0 keeps all)

    Returns:
        The transcript, or an empty string when there are no messages
    """
    if max_exchanges > 0:
        messages = messages[-max_exchanges:]
    return EXCHANGE_SEPARATOR.join(message.as_exchange() for message in messages)
