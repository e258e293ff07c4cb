"""OpenAI oracle implementation."""

import logging
import time
from typing import Any, Optional

from openai import AsyncOpenAI, OpenAIError

from codesage.exceptions import OracleError
from codesage.oracle.base import LLMOracle, OracleResponse
from codesage.oracle.llm_logger import OracleCallLogger

logger = logging.getLogger(__name__)


class OpenAIOracle(LLMOracle):
    """Oracle using the OpenAI Python SDK.

    Uses JSON mode via the response_format parameter for analysis requests.
    The SDK client is created on first use, so a missing API key only
    surfaces when the oracle is actually called.
    """

    def __init__(
        self,
        api_key: str,
        model: str = "gpt-3.5-turbo",
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
        self._client: Optional[AsyncOpenAI] = None
        logger.info(f"Configured OpenAI oracle with model: {model}")

    @property
    def provider_name(self) -> str:
        return "openai"

    @property
    def client(self) -> AsyncOpenAI:
        if self._client is None:
            if not self._api_key:
                raise OracleError("OpenAI API key is not configured")
            kwargs: dict[str, Any] = {"api_key": self._api_key}
            if self._timeout is not None:
                kwargs["timeout"] = self._timeout
            self._client = AsyncOpenAI(**kwargs)
        return self._client

    async def _complete(
        self,
        system_prompt: str,
        user_prompt: str,
        temperature: float,
        json_output: bool,
    ) -> OracleResponse:
        start_time = time.time()

        request_params: dict[str, Any] = {
            "model": self._model,
            "messages": [
                {"role": "system", "content": system_prompt},
                {"role": "user", "content": user_prompt},
            ],
            "max_tokens": self.max_tokens,
            "temperature": temperature,
        }

        # OpenAI's JSON mode ensures syntactically valid JSON output
        if json_output:
            request_params["response_format"] = {"type": "json_object"}

        try:
            response = await self.client.chat.completions.create(**request_params)
        except OpenAIError as e:
            raise OracleError(str(e), cause=e) from e
        duration_ms = (time.time() - start_time) * 1000

        if not response.choices:
            return OracleResponse(
                content="",
                prompt_tokens=0,
                completion_tokens=0,
                total_tokens=0,
                finish_reason="unknown",
                model=response.model,
                duration_ms=duration_ms,
                raw_response=response,
            )

        usage = response.usage
        return OracleResponse(
            content=response.choices[0].message.content or "",
            prompt_tokens=usage.prompt_tokens if usage else 0,
            completion_tokens=usage.completion_tokens if usage else 0,
            total_tokens=usage.total_tokens if usage else 0,
            finish_reason=response.choices[0].finish_reason or "unknown",
            model=response.model,
            duration_ms=duration_ms,
            raw_response=response,
        )
