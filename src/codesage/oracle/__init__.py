"""Model oracle clients.

The oracle is the external text-generation service that explains code and
answers follow-up questions. Supported providers:
- OpenAI (gpt-3.5-turbo, gpt-4o-mini, etc.)
- Anthropic (claude-sonnet-4-5, claude-3-5-haiku, etc.)

Usage:
    from codesage.oracle import create_oracle

    oracle = create_oracle(settings)
    result = await oracle.request_analysis(code, filename="main.py")
    answer = await oracle.request_answer(code, "What does line 3 do?")
"""

import logging
from typing import Optional

from codesage.config import Settings, settings
from codesage.oracle.base import (
    FALLBACK_ANSWER,
    CodeOracle,
    LLMOracle,
    OracleResponse,
    parse_analysis_result,
)
from codesage.oracle.context import format_chat_context
from codesage.oracle.llm_logger import OracleCallLogger

logger = logging.getLogger(__name__)

def create_oracle(config: Optional[Settings] = None) -> CodeOracle:
    """Factory function to create the configured oracle.

    API keys are not checked here; a missing key fails the first call.

    Args:
        config: Settings to read from (defaults to the global settings)

    Returns:
        Configured CodeOracle instance

    Raises:
        ValueError: If the configured provider is unknown
    """
    config = config or settings
    provider_type = config.oracle_provider.lower()
    call_logger = OracleCallLogger(config)

    if provider_type == "openai":
        from codesage.oracle.openai_oracle import OpenAIOracle

        return OpenAIOracle(
            api_key=config.openai_api_key,
            model=config.openai_model,
            max_tokens=config.oracle_max_tokens,
            analysis_temperature=config.analysis_temperature,
            chat_temperature=config.chat_temperature,
            timeout=config.oracle_timeout,
            call_logger=call_logger,
        )

    elif provider_type == "anthropic":
        from codesage.oracle.anthropic_oracle import AnthropicOracle

        return AnthropicOracle(
            api_key=config.anthropic_api_key,
            model=config.anthropic_model,
            max_tokens=config.oracle_max_tokens,
            analysis_temperature=config.analysis_temperature,
            chat_temperature=config.chat_temperature,
            timeout=config.oracle_timeout,
            call_logger=call_logger,
        )

    else:
        raise ValueError(
            f"Unknown oracle provider: {config.oracle_provider}. "
            f"Supported providers: openai, anthropic"
        )


def get_available_providers() -> list[str]:
    """Get list of available provider types."""
    return ["openai", "anthropic"]


__all__ = [
    "FALLBACK_ANSWER",
    "CodeOracle",
    "LLMOracle",
    "OracleCallLogger",
    "OracleResponse",
    "create_oracle",
    "format_chat_context",
    "get_available_providers",
    "parse_analysis_result",
]
