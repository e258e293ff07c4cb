"""
Oracle interaction logging.

Provides detailed logging of model requests and responses for debugging,
cost tracking, and auditing purposes.
"""

import json
import logging
import logging.handlers
import time
from datetime import datetime, timezone
from typing import TYPE_CHECKING, Optional

from codesage.config import Settings, settings

if TYPE_CHECKING:
    from codesage.oracle.base import OracleResponse

logger = logging.getLogger(__name__)


class OracleCallLogger:
    """
    Logger for model oracle calls.

    Writes requests, responses, token usage, and errors to a separate log
    file when LLM logging is enabled in configuration.
    """

    def __init__(self, config: Optional[Settings] = None):
        self.config = config or settings
        self.llm_logger = logging.getLogger("codesage.llm")
        self.enabled = self.config.llm_logging_enabled

        if self.enabled and self.config.log_file_enabled:
            self._setup_file_handler()

    def _setup_file_handler(self) -> None:
        """Setup dedicated file handler for oracle logs."""
        llm_dir = self.config.log_directory / "llm"
        llm_dir.mkdir(parents=True, exist_ok=True)
        llm_log_path = llm_dir / "requests.log"

        # Several oracles may share the process-wide logger
        for handler in self.llm_logger.handlers:
            if getattr(handler, "baseFilename", None) == str(llm_log_path.resolve()):
                return

        handler = logging.handlers.RotatingFileHandler(
            llm_log_path,
            maxBytes=self.config.log_max_bytes,
            backupCount=self.config.log_backup_count,
            encoding="utf-8",
        )
        handler.setFormatter(
            logging.Formatter(
                fmt="[%(asctime)s] [%(levelname)s] %(message)s",
                datefmt="%Y-%m-%d %H:%M:%S",
            )
        )

        self.llm_logger.addHandler(handler)
        self.llm_logger.setLevel(logging.INFO)
        self.llm_logger.propagate = False

    def log_request(
        self,
        kind: str,
        provider: str,
        model: str,
        prompt: str,
        max_tokens: int,
        temperature: float,
    ) -> str:
        """
        Log an oracle request.

        Args:
            kind: "analysis" or "answer"
            provider: Provider name
            model: Model name
            prompt: Full user prompt
            max_tokens: Maximum tokens requested
            temperature: Temperature parameter

        Returns:
            str: Request ID for correlating with the response
        """
        if not self.enabled or not self.config.llm_log_requests:
            return ""

        request_id = f"{kind}_{int(time.time() * 1000)}"
        prompt_preview = prompt[:500] + "..." if len(prompt) > 500 else prompt

        log_entry = {
            "type": "request",
            "request_id": request_id,
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "kind": kind,
            "provider": provider,
            "model": model,
            "parameters": {
                "max_tokens": max_tokens,
                "temperature": temperature,
            },
            "prompt_preview": prompt_preview,
            "prompt_length": len(prompt),
        }

        self.llm_logger.info(f"REQUEST: {json.dumps(log_entry)}")
        return request_id

    def log_response(self, request_id: str, response: "OracleResponse") -> None:
        """Log response metadata and, if enabled, token usage."""
        if not self.enabled or not self.config.llm_log_responses:
            return

        log_entry = {
            "type": "response",
            "request_id": request_id,
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "model": response.model,
            "finish_reason": response.finish_reason,
            "content_length": len(response.content),
            "duration_ms": round(response.duration_ms, 2),
        }

        if self.config.llm_log_tokens:
            log_entry["tokens"] = {
                "prompt": response.prompt_tokens,
                "completion": response.completion_tokens,
                "total": response.total_tokens,
            }

        if response.content:
            content = response.content
            log_entry["content_preview"] = (
                content[:200] + "..." if len(content) > 200 else content
            )

        self.llm_logger.info(f"RESPONSE: {json.dumps(log_entry)}")

    def log_error(self, request_id: str, error: Exception) -> None:
        """Log a failed oracle call."""
        if not self.enabled:
            return

        log_entry = {
            "type": "error",
            "request_id": request_id,
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "error_type": type(error).__name__,
            "error_message": str(error),
        }

        self.llm_logger.error(f"ERROR: {json.dumps(log_entry)}")
