"""
Chat API routes.

Follow-up questions about an analyzed piece of code.
"""

import logging

from fastapi import APIRouter, Depends

from codesage.api.deps import get_oracle, get_settings, get_store
from codesage.api.schemas import ChatMessageResponse, ChatRequest, ErrorResponse
from codesage.config import Settings
from codesage.exceptions import NotFoundError
from codesage.oracle import CodeOracle, format_chat_context
from codesage.store import SessionStore

logger = logging.getLogger(__name__)

router = APIRouter()


@router.post(
    "",
    response_model=ChatMessageResponse,
    responses={
        400: {"model": ErrorResponse},
        404: {"model": ErrorResponse},
        500: {"model": ErrorResponse},
    },
)
async def send_chat_message(
    request: ChatRequest,
    store: SessionStore = Depends(get_store),
    oracle: CodeOracle = Depends(get_oracle),
    config: Settings = Depends(get_settings),
) -> ChatMessageResponse:
    """
    Ask a question about an analysis.

    Earlier exchanges for the same analysis are passed to the oracle as
    context. The message is stored only once the answer is available.
    """
    analysis = await store.get_code_analysis(request.analysis_id)
    if analysis is None:
        raise NotFoundError("Analysis", request.analysis_id)

    previous_messages = await store.get_chat_messages(analysis.id)
    context = format_chat_context(
        previous_messages, max_exchanges=config.chat_context_max_exchanges
    )

    answer = await oracle.request_answer(
        analysis.code, request.message, context or None
    )

    chat_message = await store.create_chat_message(
        analysis_id=analysis.id, message=request.message, response=answer
    )
    logger.info(
        f"Answered chat message {chat_message.id} for analysis {analysis.id} "
        f"({len(previous_messages)} prior exchange(s))"
    )
    return ChatMessageResponse.model_validate(chat_message)


@router.get("/{analysis_id}", response_model=list[ChatMessageResponse])
async def list_chat_messages(
    analysis_id: int,
    store: SessionStore = Depends(get_store),
) -> list[ChatMessageResponse]:
    """List chat messages for an analysis in creation order (empty if none)."""
    messages = await store.get_chat_messages(analysis_id)
    return [ChatMessageResponse.model_validate(message) for message in messages]
