"""Retry policy and structured log events for chat-completion calls."""

from __future__ import annotations

import asyncio
import logging
import time
from typing import Any, Awaitable, Callable, Dict, Optional

from tenacity import (
    AsyncRetrying,
    before_sleep_log,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential,
)

logger = logging.getLogger(__name__)

SleepFunc = Callable[[float], Awaitable[Any]]


def log_llm_request(provider: str, model: str, url: str, prompt: str, system_prompt: str) -> float:
    """Emit an ``llm_request`` event and return the start time for ``log_llm_response``."""

    logger.info(
        f"LLM request to {provider}/{model}",
        extra={
            "event": "llm_request",
            "provider": provider,
            "model": model,
            "url": url,
            "prompt_chars": len(prompt),
            "system_prompt_chars": len(system_prompt),
        },
    )
    return time.monotonic()


def log_llm_response(
    provider: str,
    model: str,
    started: float,
    *,
    content: Optional[str] = None,
    error: Optional[str] = None,
) -> None:
    """Emit an ``llm_response`` event; ``error`` marks the call as failed."""

    duration_ms = (time.monotonic() - started) * 1000
    event: Dict[str, Any] = {
        "event": "llm_response",
        "provider": provider,
        "model": model,
        "duration_ms": round(duration_ms, 2),
        "success": error is None,
    }
    if error is not None:
        event["error"] = error
        logger.error(f"LLM request to {provider}/{model} failed after {duration_ms:.0f}ms: {error}", extra=event)
        return
    event["response_chars"] = len(content or "")
    logger.info(f"LLM response from {provider}/{model} ({duration_ms:.0f}ms)", extra=event)


def create_llm_retrying(
    max_attempts: int = 3,
    backoff_base_seconds: float = 2.0,
    sleep: Optional[SleepFunc] = None,
) -> AsyncRetrying:
    """Create an async retry controller for LLM calls.

    Every ``Exception`` counts as a failed attempt. The wait before retry ``n``
    is ``backoff_base_seconds * 2 ** (n - 1)``, i.e. 2s, 4s, 8s with the
    defaults. No jitter, no upper bound. The last error is re-raised once the
    attempts are used up. ``asyncio.CancelledError`` is not an ``Exception``,
    so cancelling the caller interrupts the backoff sleep and ends the loop.

    Args:
        max_attempts: Total number of attempts, including the first
        backoff_base_seconds: Wait before the first retry
        sleep: Awaitable sleep used between attempts (``asyncio.sleep``)

    Returns:
        AsyncRetrying instance to iterate with ``async for``
    """
    return AsyncRetrying(
        retry=retry_if_exception_type(Exception),
        stop=stop_after_attempt(max(1, max_attempts)),
        wait=wait_exponential(multiplier=backoff_base_seconds, exp_base=2),
        before_sleep=before_sleep_log(logger, logging.WARNING),
        sleep=sleep or asyncio.sleep,
        reraise=True,
    )
