"""Anthropic oracle implementation."""

import logging
import time
from typing import Any, Optional

from anthropic import AnthropicError, AsyncAnthropic

from codesage.exceptions import OracleError
from codesage.oracle.base import LLMOracle, OracleResponse
from codesage.oracle.llm_logger import OracleCallLogger
from codesage.oracle.prompts import JSON_ONLY_INSTRUCTION

logger = logging.getLogger(__name__)


class AnthropicOracle(LLMOracle):
    """Oracle using the Anthropic Python SDK.

    Structured output is requested through strict JSON instructions in the
    system prompt; any markdown fence the model adds is stripped when the
    result is parsed.
    """

    def __init__(
        self,
        api_key: str,
        model: str = "claude-sonnet-4-5-20250514",
        max_tokens: int = 2000,
        analysis_temperature: float = 0.3,
        chat_temperature: float = 0.5,
        timeout: Optional[float] = None,
        call_logger: Optional[OracleCallLogger] = None,
    ):
        super().__init__(
            model=model,
            max_tokens=max_tokens,
            analysis_temperature=analysis_temperature,
            chat_temperature=chat_temperature,
            call_logger=call_logger,
        )
        self._api_key = api_key
        self._timeout = timeout
        self._client: Optional[AsyncAnthropic] = None
        logger.info(f"Configured Anthropic oracle with model: {model}")

    @property
    def provider_name(self) -> str:
        return "anthropic"

    @property
    def client(self) -> AsyncAnthropic:
        if self._client is None:
            if not self._api_key:
                raise OracleError("Anthropic API key is not configured")
            kwargs: dict[str, Any] = {"api_key": self._api_key}
            if self._timeout is not None:
                kwargs["timeout"] = self._timeout
            self._client = AsyncAnthropic(**kwargs)
        return self._client

    async def _complete(
        self,
        system_prompt: str,
        user_prompt: str,
        temperature: float,
        json_output: bool,
    ) -> OracleResponse:
        start_time = time.time()

        if json_output:
            system_prompt = system_prompt + JSON_ONLY_INSTRUCTION

        try:
            response = await self.client.messages.create(
                model=self._model,
                max_tokens=self.max_tokens,
                temperature=temperature,
                system=system_prompt,
                messages=[{"role": "user", "content": user_prompt}],
            )
        except AnthropicError as e:
            raise OracleError(str(e), cause=e) from e
        duration_ms = (time.time() - start_time) * 1000

        content = ""
        for block in response.content:
            if hasattr(block, "text"):
                content += block.text

        usage = response.usage
        prompt_tokens = usage.input_tokens if usage else 0
        completion_tokens = usage.output_tokens if usage else 0

        return OracleResponse(
            content=content,
            prompt_tokens=prompt_tokens,
            completion_tokens=completion_tokens,
            total_tokens=prompt_tokens + completion_tokens,
            finish_reason=response.stop_reason or "unknown",
            model=response.model,
            duration_ms=duration_ms,
            raw_response=response,
        )
