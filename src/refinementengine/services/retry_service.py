"""Retry service with exponential backoff for generation API calls."""

import asyncio
import logging
from typing import Any, Awaitable, Callable, Optional, TypeVar

import httpx
from pydantic import BaseModel, ConfigDict, Field
from tenacity import (
    AsyncRetrying,
    RetryCallState,
    before_sleep_log,
    retry_if_exception,
    stop_after_attempt,
)

from refinementengine.models.errors import (
    RATE_LIMIT_MESSAGE,
    RETRYABLE_ERRORS,
    ErrorCode,
    RateLimitExhausted,
    RecoverableFailureExhausted,
)

logger = logging.getLogger(__name__)

T = TypeVar("T")

SleepFunc = Callable[[float], Awaitable[None]]

BACKOFF_MULTIPLIER = 2


class RetryPolicy(BaseModel):
    """How many times to try a call and how long to wait in between."""

    model_config = ConfigDict(frozen=True)

    max_attempts: int = Field(5, ge=1, description="Total attempts, including the first one")
    initial_delay_ms: int = Field(1000, ge=0, description="Wait before the first retry")
    retryable_codes: frozenset[ErrorCode] = Field(RETRYABLE_ERRORS, description="Outcome kinds that are retried")

    @property
    def backoff_multiplier(self) -> int:
        return BACKOFF_MULTIPLIER

    def delay_for_attempt(self, attempt: int) -> int:
        """Wait in milliseconds after the failed 0-indexed ``attempt``."""
        return self.initial_delay_ms * BACKOFF_MULTIPLIER**attempt

    def wait_seconds(self, retry_state: RetryCallState) -> float:
        # tenacity numbers attempts from 1
        return self.delay_for_attempt(retry_state.attempt_number - 1) / 1000.0

    def retry_config(self) -> dict[str, Any]:
        """Keyword arguments for ``tenacity.AsyncRetrying``."""
        return {
            "stop": stop_after_attempt(self.max_attempts),
            "wait": self.wait_seconds,
            "retry": retry_if_exception(self.is_retryable_error),
            "before_sleep": before_sleep_log(logger, logging.WARNING),
            "reraise": True,
        }

    def is_retryable_error(self, exc: BaseException) -> bool:
        return isinstance(exc, RetryableError) and exc.error_code in self.retryable_codes


# Standard policy for every generation call: 5 attempts, waits of 1s, 2s, 4s, 8s
DEFAULT_RETRY_POLICY = RetryPolicy()


class RetryableError(Exception):
    """Classified outcome of a single failed attempt."""

    def __init__(self, error_code: ErrorCode, message: str, original_exception: Exception | None = None):
        super().__init__(message)
        self.error_code = error_code
        self.message = message
        self.original_exception = original_exception


async def retry_with_backoff(
    func: Callable[..., Awaitable[T]],
    *args: Any,
    policy: RetryPolicy | None = None,
    sleep: SleepFunc = asyncio.sleep,
    **kwargs: Any,
) -> T:
    """
    Execute an async function with retry logic and exponential backoff.

    Args:
        func: Async function to execute; raises RetryableError on retryable outcomes
        *args: Positional arguments for func
        policy: Retry policy. If None, uses DEFAULT_RETRY_POLICY.
        sleep: Coroutine used for backoff waits (seconds)
        **kwargs: Keyword arguments for func

    Returns:
        Result from func

    Raises:
        RateLimitExhausted: If the last attempt was rate limited
        RecoverableFailureExhausted: If the last attempt failed for any other reason
        Exception: Exceptions other than RetryableError are re-raised immediately
    """
    policy = policy or DEFAULT_RETRY_POLICY

    try:
        async for attempt in AsyncRetrying(sleep=sleep, **policy.retry_config()):
            with attempt:
                return await func(*args, **kwargs)
    except RetryableError as e:
        logger.error(f"❌ [Retry] Giving up after {policy.max_attempts} attempt(s): {e.message}")
        if e.error_code == ErrorCode.RATE_LIMITED:
            raise RateLimitExhausted() from e
        raise RecoverableFailureExhausted(e.message) from e

    raise RuntimeError("retry loop exited without a result")


def should_retry(error_code: ErrorCode, policy: RetryPolicy | None = None) -> bool:
    """Check if an error code is retried under ``policy``."""
    return error_code in (policy or DEFAULT_RETRY_POLICY).retryable_codes


class RetryingInvoker:
    """Posts JSON to an endpoint under a retry policy. Knows nothing of payloads."""

    def __init__(self, http_client: httpx.AsyncClient, sleep: SleepFunc = asyncio.sleep):
        """
        Initialize the invoker.

        Args:
            http_client: Client used for every attempt
            sleep: Coroutine used for backoff waits (seconds)
        """
        self._http_client = http_client
        self._sleep = sleep

    async def invoke(
        self,
        url: str,
        payload: dict[str, Any],
        policy: RetryPolicy | None = None,
        params: Optional[dict[str, str]] = None,
    ) -> Any:
        """
        POST ``payload`` to ``url`` and return the decoded JSON body.

        Raises:
            RateLimitExhausted: Every attempt up to the last one ended in HTTP 429
            RecoverableFailureExhausted: The last attempt failed for another reason
        """
        return await retry_with_backoff(
            self._attempt,
            url,
            payload,
            params,
            policy=policy,
            sleep=self._sleep,
        )

    async def _attempt(self, url: str, payload: dict[str, Any], params: Optional[dict[str, str]]) -> Any:
        """Single attempt; raises RetryableError for every unsuccessful outcome."""
        try:
            response = await self._http_client.post(url, json=payload, params=params)
        except httpx.HTTPError as e:
            raise RetryableError(
                ErrorCode.RECOVERABLE_FAILURE,
                f"Request failed: {str(e) or type(e).__name__}",
                original_exception=e,
            )

        if response.status_code == 429:
            raise RetryableError(ErrorCode.RATE_LIMITED, RATE_LIMIT_MESSAGE)

        if not response.is_success:
            raise RetryableError(
                ErrorCode.RECOVERABLE_FAILURE,
                f"API error: {_error_message(response)}",
            )

        try:
            return response.json()
        except ValueError as e:
            raise RetryableError(
                ErrorCode.RECOVERABLE_FAILURE,
                f"Invalid JSON in response: {str(e)}",
                original_exception=e,
            )


def _error_message(response: httpx.Response) -> str:
    """Pull ``error.message`` out of an error body, falling back to the status line."""
    try:
        body = response.json()
    except ValueError:
        body = None

    if isinstance(body, dict):
        error = body.get("error")
        if isinstance(error, dict) and error.get("message"):
            return str(error["message"])

    return response.reason_phrase or f"HTTP {response.status_code}"
