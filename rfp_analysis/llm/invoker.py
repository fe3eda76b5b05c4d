"""Retrying, caching wrapper that turns a chat completion into parsed JSON."""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from typing import Any, Callable, Optional, Union

from pydantic import TypeAdapter

from rfp_analysis.common.cache import NullResponseCache, ResponseCache, generate_cache_key
from rfp_analysis.common.llm_retry import SleepFunc, create_llm_retrying

from .client import ChatCompletionClient, LLMResponseFormatError

logger = logging.getLogger(__name__)

_CLOSERS = {"{": "}", "[": "]"}


@dataclass
class InvokeOptions:
    max_retries: int = 3
    temperature: float = 0.3
    max_tokens: int = 2000
    use_cache: bool = True


def extract_json_payload(text: str) -> str:
    """Return the span from the first ``{`` or ``[`` to the last matching closer.

    Greedy: everything between the first opening bracket and the last bracket
    of the same kind is returned, so prose around the JSON is dropped but the
    payload itself is not checked for balance here.
    """
    if not text:
        raise LLMResponseFormatError("Empty response from LLM")

    candidates = [pos for pos in (text.find("{"), text.find("[")) if pos >= 0]
    if not candidates:
        raise LLMResponseFormatError("No JSON found in AI response")
    start = min(candidates)
    end = text.rfind(_CLOSERS[text[start]])
    if end <= start:
        raise LLMResponseFormatError("Unbalanced JSON in AI response")
    return text[start : end + 1]


def parse_json_response(text: str) -> Any:
    payload = extract_json_payload(text)
    try:
        return json.loads(payload)
    except json.JSONDecodeError as exc:
        raise LLMResponseFormatError(f"AI response JSON is invalid: {exc.msg}") from exc


class LLMInvoker:
    """Call the backend, parse and validate JSON, retry with backoff, cache hits."""

    def __init__(
        self,
        client: ChatCompletionClient,
        cache: Optional[Union[ResponseCache, NullResponseCache]] = None,
        *,
        sleep: Optional[SleepFunc] = None,
        backoff_base_seconds: float = 2.0,
    ) -> None:
        self._client = client
        self._cache = cache if cache is not None else ResponseCache()
        self._sleep = sleep
        self._backoff_base_seconds = backoff_base_seconds

    @property
    def cache(self) -> Union[ResponseCache, NullResponseCache]:
        return self._cache

    async def invoke(
        self,
        prompt: str,
        system_prompt: str,
        options: Optional[InvokeOptions] = None,
        *,
        schema: Optional[TypeAdapter] = None,
        check: Optional[Callable[[Any], None]] = None,
    ) -> Any:
        """Return the parsed (and, with ``schema``, validated) JSON answer.

        ``check`` runs on the validated value and may raise to reject it; a
        rejected answer counts as a failed attempt and is never cached.

        Raises the last attempt's error once ``options.max_retries`` attempts
        have failed.
        """
        options = options or InvokeOptions()
        cache_key = generate_cache_key(prompt, system_prompt)
        if options.use_cache:
            cached = self._cache.get(cache_key)
            if cached is not None:
                logger.info("Returning cached AI response", extra={"cache_key": cache_key})
                return cached

        retrying = create_llm_retrying(
            max_attempts=options.max_retries,
            backoff_base_seconds=self._backoff_base_seconds,
            sleep=self._sleep,
        )
        result: Any = None
        async for attempt in retrying:
            number = attempt.retry_state.attempt_number
            with attempt:
                logger.info(f"AI analysis attempt {number}/{max(1, options.max_retries)}")
                try:
                    result = await self._attempt(prompt, system_prompt, options, schema, check)
                except Exception as exc:
                    logger.error(f"AI analysis attempt {number} failed: {exc}")
                    raise

        if options.use_cache:
            self._cache.put(cache_key, result)
        logger.info("AI analysis successful")
        return result

    async def _attempt(
        self,
        prompt: str,
        system_prompt: str,
        options: InvokeOptions,
        schema: Optional[TypeAdapter],
        check: Optional[Callable[[Any], None]],
    ) -> Any:
        text = await self._client.complete(
            prompt=prompt,
            system_prompt=system_prompt,
            temperature=options.temperature,
            max_tokens=options.max_tokens,
        )
        data = parse_json_response(text)
        if schema is not None:
            data = schema.validate_python(data)
        if check is not None:
            check(data)
        return data
