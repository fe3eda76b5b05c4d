"""Async client for OpenAI compatible chat-completion endpoints."""

from __future__ import annotations

import logging
from typing import Any, Dict, Optional

import httpx

from rfp_analysis.common.llm_retry import log_llm_request, log_llm_response
from rfp_analysis.core.config import Settings, get_settings

logger = logging.getLogger(__name__)

PROVIDER = "openai_compatible"


class LLMNotConfiguredError(RuntimeError):
    """Raised when the external LLM endpoint has not been configured."""


class LLMRequestError(RuntimeError):
    """Raised when the completion request fails at transport or HTTP level."""


class LLMResponseFormatError(RuntimeError):
    """Raised when the LLM response cannot be parsed into the expected schema."""


class ChatCompletionClient:
    """Send a system + user prompt pair and return the completion text.

    The API key is read once at construction. A missing key only logs a
    warning; every call then fails with ``LLMNotConfiguredError``.
    """

    def __init__(
        self,
        settings: Optional[Settings] = None,
        *,
        http_client: Optional[httpx.AsyncClient] = None,
    ) -> None:
        self._settings = settings or get_settings()
        self._http_client = http_client
        self._owns_client = http_client is None
        if not self._settings.llm_api_key:
            logger.warning("LLM API key is not set. AI proposal analysis will fall back to manual review.")

    @property
    def is_configured(self) -> bool:
        return bool(self._settings.llm_api_key and self._settings.endpoint and self._settings.llm_model)

    async def complete(
        self,
        *,
        prompt: str,
        system_prompt: str,
        temperature: float = 0.3,
        max_tokens: int = 2000,
    ) -> str:
        """Return the first choice's message content.

        Raises:
            LLMNotConfiguredError: If endpoint, model or API key is missing
            LLMRequestError: If the request fails or returns an error status
            LLMResponseFormatError: If the response carries no content
        """
        if not self._settings.endpoint or not self._settings.llm_model:
            raise LLMNotConfiguredError("LLM endpoint or model is not configured")
        if not self._settings.llm_api_key:
            raise LLMNotConfiguredError("LLM API key is missing")

        url = f"{self._settings.endpoint}/chat/completions"
        model = self._settings.llm_model
        headers = {
            "Content-Type": "application/json",
            "Authorization": f"Bearer {self._settings.llm_api_key}",
        }
        payload = {
            "model": model,
            "messages": [
                {"role": "system", "content": system_prompt},
                {"role": "user", "content": prompt},
            ],
            "temperature": temperature,
            "max_tokens": max_tokens,
        }

        started = log_llm_request(PROVIDER, model, url, prompt, system_prompt)
        try:
            response = await self._client().post(url, json=payload, headers=headers)
            response.raise_for_status()
            data = response.json()
        except httpx.HTTPStatusError as exc:
            status = exc.response.status_code
            body = exc.response.text[:200]
            self._log_failure(model, started, f"HTTP {status}: {body}")
            raise LLMRequestError(f"LLM request failed (HTTP {status}): {body}") from exc
        except httpx.TimeoutException as exc:
            self._log_failure(model, started, "Timeout")
            raise LLMRequestError(f"LLM request timed out: {exc}") from exc
        except httpx.RequestError as exc:
            self._log_failure(model, started, str(exc))
            raise LLMRequestError(f"LLM request error: {exc}") from exc
        except ValueError as exc:
            self._log_failure(model, started, "Response body is not JSON")
            raise LLMResponseFormatError("LLM response body is not JSON") from exc

        content = self._extract_content(data)
        log_llm_response(PROVIDER, model, started, content=content)
        return content

    async def aclose(self) -> None:
        if self._http_client is not None and self._owns_client:
            await self._http_client.aclose()
            self._http_client = None

    def _client(self) -> httpx.AsyncClient:
        if self._http_client is None:
            self._http_client = httpx.AsyncClient(timeout=self._settings.llm_timeout)
        return self._http_client

    def _log_failure(self, model: str, started: float, error: str) -> None:
        log_llm_response(PROVIDER, model, started, error=error)

    def _extract_content(self, response: Dict[str, Any]) -> str:
        content: Optional[str] = None

        if isinstance(response, dict) and response.get("choices"):
            first_choice = response["choices"][0]
            if isinstance(first_choice, dict):
                message = first_choice.get("message") or {}
                content = message.get("content")
                if content is None:
                    content = first_choice.get("text")
            else:
                content = str(first_choice)
        elif isinstance(response, dict) and "generated_text" in response:
            content = response.get("generated_text")

        if not content:
            raise LLMResponseFormatError("No content field found in LLM response")
        return content
