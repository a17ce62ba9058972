"""Retry policy for transient failures talking to an appliance.

Only connection-level failures are retried. An HTTP error status is an answer
from the appliance and goes straight back to the caller.
"""
import logging
from functools import wraps
from typing import Any, Awaitable, Callable, TypeVar

import httpx
from tenacity import (
    AsyncRetrying,
    RetryCallState,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential,
)

logger = logging.getLogger(__name__)

T = TypeVar("T")

RETRYABLE_EXCEPTIONS = (
    httpx.ConnectError,
    httpx.ReadError,
    httpx.WriteError,
    httpx.RemoteProtocolError,
    httpx.TimeoutException,
    ConnectionResetError,
)


def _before_sleep(label: str) -> Callable[[RetryCallState], None]:
    def log(retry_state: RetryCallState) -> None:
        exc = retry_state.outcome.exception() if retry_state.outcome else None
        wait = retry_state.next_action.sleep if retry_state.next_action else 0
        logger.warning(
            f"{label}: attempt {retry_state.attempt_number} failed "
            f"({type(exc).__name__}: {exc}), retrying in {wait:.2f}s"
        )
    return log


def retrying(
    attempts: int = 3,
    delay: float = 1.0,
    max_delay: float = 10.0,
    label: str = "request",
) -> AsyncRetrying:
    """Build the retry controller for one logical request.

    Args:
        attempts: Total attempts including the first one
        delay: First backoff interval in seconds, doubled on each retry
        max_delay: Upper bound for a single backoff interval
        label: Prefix for the retry warnings, usually the appliance name
    """
    return AsyncRetrying(
        stop=stop_after_attempt(max(1, attempts)),
        wait=wait_exponential(multiplier=delay, min=delay, max=max(delay, max_delay)),
        retry=retry_if_exception_type(RETRYABLE_EXCEPTIONS),
        before_sleep=_before_sleep(label),
        reraise=True,
    )


def with_retry(
    attempts: int = 3,
    delay: float = 1.0,
    max_delay: float = 10.0,
    label: str = "request",
) -> Callable[[Callable[..., Awaitable[T]]], Callable[..., Awaitable[T]]]:
    """Retry a coroutine function on connection-level failures."""
    def decorator(func: Callable[..., Awaitable[T]]) -> Callable[..., Awaitable[T]]:
        @wraps(func)
        async def wrapper(*args: Any, **kwargs: Any) -> T:
            async for attempt in retrying(attempts, delay, max_delay, label):
                with attempt:
                    return await func(*args, **kwargs)
        return wrapper

    return decorator
