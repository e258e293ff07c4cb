"""Base interface and shared behaviour for model oracles."""

import json
import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any, Optional

from pydantic import ValidationError

from codesage.exceptions import MalformedOracleResponseError, OracleError
from codesage.models.analysis import AnalysisResult
from codesage.oracle.llm_logger import OracleCallLogger
from codesage.oracle.prompts import (
    ANALYSIS_SYSTEM_PROMPT,
    ANSWER_SYSTEM_PROMPT,
    build_analysis_prompt,
    build_answer_prompt,
)

logger = logging.getLogger(__name__)

FALLBACK_ANSWER = "I'm sorry, I couldn't generate a response to your question."

FAILURE_MESSAGES = {
    "analysis": "Failed to analyze code",
    "answer": "Failed to answer question",
}


@dataclass
class OracleResponse:
    """Standardized completion returned by a provider.

    Attributes:
        content: The generated text (JSON for analysis requests)
        prompt_tokens: Number of tokens in the prompt
        completion_tokens: Number of tokens in the completion
        total_tokens: Total tokens used
        finish_reason: Why generation stopped (stop, length, etc.)
        model: The actual model used (may differ from requested)
        duration_ms: Time taken for the API call in milliseconds
        raw_response: Provider-specific raw response for debugging
    """

    content: str
    prompt_tokens: int
    completion_tokens: int
    total_tokens: int
    finish_reason: str
    model: str
    duration_ms: float
    raw_response: Any = None


class CodeOracle(ABC):
    """The two questions the service can ask of the external model."""

    @abstractmethod
    async def request_analysis(
        self, code: str, filename: Optional[str] = None
    ) -> AnalysisResult:
        """Explain the code and list its issues.

        Raises:
            OracleError: If the call fails
            MalformedOracleResponseError: If the output is not a valid
                AnalysisResult
        """
        ...

    @abstractmethod
    async def request_answer(
        self, code: str, question: str, context: Optional[str] = None
    ) -> str:
        """Answer a follow-up question about the code.

        Raises:
            OracleError: If the call fails
        """
        ...


def _strip_code_fence(content: str) -> str:
    text = content.strip()
    if text.startswith("```"):
        text = text.split("\n", 1)[1] if "\n" in text else ""
        if text.rstrip().endswith("```"):
            text = text.rstrip()[:-3]
    return text.strip()


def parse_analysis_result(content: str) -> AnalysisResult:
    """
    Parse and validate model output as an AnalysisResult.

    Raises:
        MalformedOracleResponseError: If the content is not JSON or does not
            match the expected shape
    """
    try:
        payload = json.loads(_strip_code_fence(content))
    except json.JSONDecodeError as e:
        raise MalformedOracleResponseError(
            f"Failed to analyze code: model returned invalid JSON ({e.msg})",
            raw_content=content,
            cause=e,
        ) from e

    try:
        return AnalysisResult.model_validate(payload)
    except ValidationError as e:
        raise MalformedOracleResponseError(
            f"Failed to analyze code: model response did not match the expected "
            f"structure ({e.error_count()} error(s))",
            raw_content=content,
            cause=e,
        ) from e


class LLMOracle(CodeOracle):
    """
    Oracle backed by a chat-completion provider.

    Subclasses implement _complete(); prompt construction, logging and
    result parsing live here.
    """

    def __init__(
        self,
        model: str,
        max_tokens: int = 2000,
        analysis_temperature: float = 0.3,
        chat_temperature: float = 0.5,
        call_logger: Optional[OracleCallLogger] = None,
    ):
        self._model = model
        self.max_tokens = max_tokens
        self.analysis_temperature = analysis_temperature
        self.chat_temperature = chat_temperature
        self.call_logger = call_logger or OracleCallLogger()

    @property
    @abstractmethod
    def provider_name(self) -> str:
        """Return the provider identifier (e.g., 'openai', 'anthropic')."""
        ...

    @property
    def model_name(self) -> str:
        return self._model

    @abstractmethod
    async def _complete(
        self,
        system_prompt: str,
        user_prompt: str,
        temperature: float,
        json_output: bool,
    ) -> OracleResponse:
        """Run one completion.

        Implementations translate SDK and transport failures into OracleError.
        """
        ...

    async def _call(
        self,
        kind: str,
        system_prompt: str,
        user_prompt: str,
        temperature: float,
        json_output: bool,
    ) -> OracleResponse:
        request_id = self.call_logger.log_request(
            kind=kind,
            provider=self.provider_name,
            model=self._model,
            prompt=user_prompt,
            max_tokens=self.max_tokens,
            temperature=temperature,
        )
        try:
            response = await self._complete(
                system_prompt, user_prompt, temperature, json_output
            )
        except OracleError as e:
            self.call_logger.log_error(request_id, e)
            logger.error(f"Oracle {kind} request failed: {e}")
            raise OracleError(f"{FAILURE_MESSAGES[kind]}: {e}", cause=e.cause) from e
        self.call_logger.log_response(request_id, response)
        logger.info(
            f"Oracle {kind} completed in {response.duration_ms:.0f}ms "
            f"({response.total_tokens} tokens)"
        )
        return response

    async def request_analysis(
        self, code: str, filename: Optional[str] = None
    ) -> AnalysisResult:
        response = await self._call(
            "analysis",
            ANALYSIS_SYSTEM_PROMPT,
            build_analysis_prompt(code, filename),
            self.analysis_temperature,
            json_output=True,
        )
        if not response.content:
            logger.warning(f"Empty analysis response from {self.provider_name}")
        return parse_analysis_result(response.content or "{}")

    async def request_answer(
        self, code: str, question: str, context: Optional[str] = None
    ) -> str:
        response = await self._call(
            "answer",
            ANSWER_SYSTEM_PROMPT,
            build_answer_prompt(code, question, context),
            self.chat_temperature,
            json_output=False,
        )
        if not response.content:
            logger.warning(f"Empty answer from {self.provider_name}")
            return FALLBACK_ANSWER
        return response.content
