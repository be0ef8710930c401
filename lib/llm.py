# =============================================================================
# lib/llm.py - Structured LLM Answers
# =============================================================================
# Asks a chat model for JSON that matches a response type, and keeps asking
# until it gets one or the attempt budget runs out.
#
# One attempt:
#   1. call chat.completions with response_format=json_object
#   2. json.loads the reply
#   3. validate it with pydantic
# Any failure in 1-3 (provider error, empty reply, bad JSON, wrong shape)
# is retried after sleeping 1s * attempt number, with a firmer "return ONLY
# JSON" reminder appended to both prompts. max_retries counts total attempts.
#
# Uses the OpenAI SDK against any OpenAI-compatible endpoint (Groq by
# default, see LLM_BASE_URL).
#
# Usage:
#   from lib.llm import StructuredLLM
#   llm = StructuredLLM()
#   person = llm.answer_structured(
#       system_prompt="Extract the person.",
#       user_prompt="Ada Lovelace, 36",
#       response_model=Person,
#   )
# =============================================================================

from __future__ import annotations

import json
import logging
import time
from typing import Any, Callable, TypeVar

from openai import OpenAI
from pydantic import TypeAdapter

from app.config import settings
from lib.schema_shape import derive_shape
from lib.utils import ApplicationError

# Set up logging for this module
logger = logging.getLogger(__name__)

T = TypeVar("T")

BACKOFF_SECONDS = 1.0


# =============================================================================
# Exceptions
# =============================================================================

class LLMNotConfiguredError(ApplicationError):
    """Raised when no API key is available for the LLM provider."""

    def __init__(self):
        super().__init__(
            "LLM provider is not configured",
            code="LLM_NOT_CONFIGURED",
            suggestion="Set GROQ_API_KEY (and LLM_BASE_URL for other providers) in your .env file",
        )


class EmptyResponseError(ApplicationError):
    """The provider returned no message content."""

    def __init__(self):
        super().__init__("No response content from LLM", code="EMPTY_RESPONSE")


class GenerationValidationError(ApplicationError):
    """
    Every attempt failed to produce a valid structured answer.

    Attributes:
        attempts: Number of attempts made
        last_error: The failure from the final attempt
    """

    def __init__(self, attempts: int, last_error: Exception):
        super().__init__(
            f"Failed to get valid structured response after {attempts} attempts. "
            f"Last error: {last_error}",
            code="GENERATION_VALIDATION_FAILED",
            suggestion="Simplify the response schema or raise max_retries",
            details={"attempts": attempts, "last_error": str(last_error)},
        )
        self.attempts = attempts
        self.last_error = last_error


# =============================================================================
# Prompt Building
# =============================================================================

def build_system_prompt(system_prompt: str, shape: dict[str, Any]) -> str:
    return (
        f"{system_prompt}\n\n"
        "IMPORTANT: You MUST return a valid JSON object that matches exactly this schema:\n"
        f"{json.dumps(shape, indent=2)}\n\n"
        "Return ONLY the JSON object, no markdown formatting, no backticks, no additional text."
    )


def retry_system_suffix(attempt: int, max_attempts: int) -> str:
    """Extra system instruction for attempt > 1 (1-based)."""
    if attempt <= 1:
        return ""
    return (
        f"\n\nIMPORTANT: Your previous response failed validation (attempt {attempt} of {max_attempts}). "
        "PLEASE RETURN ONLY VALID JSON AS INSTRUCTED ABOVE. "
        "No markdown, no backticks, just the raw JSON object."
    )


def retry_user_suffix(attempt: int) -> str:
    if attempt <= 1:
        return ""
    return "\n\nREMINDER: Return ONLY valid JSON matching the specified schema."


# =============================================================================
# Structured LLM
# =============================================================================

class StructuredLLM:
    """
    Chat model wrapper that returns validated structured answers.

    Attributes:
        client: OpenAI-compatible client
        model: Default model ID
        temperature: Default temperature
        max_tokens: Default completion budget
        max_retries: Default total attempts
        sleep: Called with seconds between attempts (injectable for tests)
    """

    def __init__(
        self,
        client: OpenAI | None = None,
        model: str | None = None,
        temperature: float | None = None,
        max_tokens: int | None = None,
        max_retries: int | None = None,
        sleep: Callable[[float], None] = time.sleep,
    ):
        if client is None:
            if not settings.has_llm:
                raise LLMNotConfiguredError()
            client = OpenAI(api_key=settings.GROQ_API_KEY, base_url=settings.LLM_BASE_URL)

        self.client = client
        self.model = model or settings.LLM_MODEL
        self.temperature = temperature if temperature is not None else settings.LLM_TEMPERATURE
        self.max_tokens = max_tokens if max_tokens is not None else settings.LLM_MAX_TOKENS
        self.max_retries = max_retries if max_retries is not None else settings.LLM_MAX_RETRIES
        self.sleep = sleep

    def answer_structured(
        self,
        system_prompt: str,
        user_prompt: str,
        response_model: type[T],
        model: str | None = None,
        temperature: float | None = None,
        max_tokens: int | None = None,
        max_retries: int | None = None,
    ) -> T:
        """
        Get an answer that validates against response_model.

        Args:
            system_prompt: Task instructions
            user_prompt: The input to process
            response_model: pydantic model (or any TypeAdapter-compatible type)
            model, temperature, max_tokens: Per-call overrides
            max_retries: Total attempts for this call (>= 1)

        Returns:
            The validated value

        Raises:
            GenerationValidationError: If every attempt fails
        """
        attempts = max_retries if max_retries is not None else self.max_retries
        if attempts < 1:
            raise ValueError("max_retries must be at least 1")

        adapter = TypeAdapter(response_model)
        enhanced_system_prompt = build_system_prompt(system_prompt, derive_shape(response_model))
        last_error: Exception | None = None

        for attempt in range(1, attempts + 1):
            try:
                content = self._complete(
                    system=enhanced_system_prompt + retry_system_suffix(attempt, attempts),
                    user=user_prompt + retry_user_suffix(attempt),
                    model=model or self.model,
                    temperature=temperature if temperature is not None else self.temperature,
                    max_tokens=max_tokens if max_tokens is not None else self.max_tokens,
                )
                return adapter.validate_python(json.loads(content))

            except Exception as e:
                last_error = e
                logger.warning(f"Structured answer attempt {attempt}/{attempts} failed: {e}")

                if attempt == attempts:
                    break
                self.sleep(BACKOFF_SECONDS * attempt)

        raise GenerationValidationError(attempts, last_error) from last_error

    def _complete(
        self,
        system: str,
        user: str,
        model: str,
        temperature: float,
        max_tokens: int,
    ) -> str:
        response = self.client.chat.completions.create(
            model=model,
            temperature=temperature,
            max_tokens=max_tokens,
            top_p=1,
            response_format={"type": "json_object"},
            messages=[
                {"role": "system", "content": system},
                {"role": "user", "content": user},
            ],
        )

        content = response.choices[0].message.content if response.choices else None
        if not content:
            raise EmptyResponseError()

        logger.debug(f"LLM response: {content[:200]}...")
        return content
