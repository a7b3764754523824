"""
AI completion clients.

The orchestrator only needs two things from a client: whether it is
configured, and the assistant text for a list of role-tagged messages.
"""

import os
from typing import Dict, List, Optional

import requests

from .retry import exponential_backoff, should_retry_http_status

GROQ_API_URL = "https://api.groq.com/openai/v1/chat/completions"
DEFAULT_MODEL = "llama-3.3-70b-versatile"
DEFAULT_MAX_TOKENS = 2000
DEFAULT_TEMPERATURE = 0.7
DEFAULT_TIMEOUT = 30

Message = Dict[str, str]


class CompletionError(Exception):
    """The completion endpoint returned an error or an unusable payload."""

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.status_code = status_code


class TransientCompletionError(CompletionError):
    """A completion error worth retrying (timeouts, rate limits, 5xx)."""


class CompletionClient:
    """Interface for chat-completion backends."""

    def is_configured(self) -> bool:
        raise NotImplementedError

    def complete(
        self,
        messages: List[Message],
        model: str = DEFAULT_MODEL,
        max_tokens: int = DEFAULT_MAX_TOKENS,
        temperature: float = DEFAULT_TEMPERATURE,
    ) -> str:
        """Send ``messages`` and return the assistant's reply text."""
        raise NotImplementedError


class GroqClient(CompletionClient):
    """Chat completions against Groq's OpenAI-compatible endpoint.

    Retries are off by default; pass ``max_retries`` to retry timeouts,
    connection errors and retryable HTTP statuses with exponential backoff.
    """

    def __init__(
        self,
        api_key: Optional[str] = None,
        api_url: str = GROQ_API_URL,
        timeout: float = DEFAULT_TIMEOUT,
        max_retries: int = 0,
        base_delay: float = 1.0,
        session: Optional[requests.Session] = None,
    ):
        self.api_key = api_key if api_key is not None else os.getenv("GROQ_API_KEY")
        self.api_url = api_url
        self.timeout = timeout
        self.session = session or requests.Session()
        self._post = self._post_once
        if max_retries > 0:
            # Exhausted retries surface as RetryError chained to the last failure
            self._post = exponential_backoff(
                max_retries=max_retries,
                base_delay=base_delay,
                exceptions=(
                    requests.exceptions.Timeout,
                    requests.exceptions.ConnectionError,
                    TransientCompletionError,
                ),
            )(self._post_once)

    def is_configured(self) -> bool:
        return bool(self.api_key)

    def complete(
        self,
        messages: List[Message],
        model: str = DEFAULT_MODEL,
        max_tokens: int = DEFAULT_MAX_TOKENS,
        temperature: float = DEFAULT_TEMPERATURE,
    ) -> str:
        if not self.is_configured():
            raise CompletionError("Groq API key not found. Set GROQ_API_KEY in your environment.")

        payload = {
            "model": model,
            "messages": messages,
            "max_tokens": max_tokens,
            "temperature": temperature,
            "stream": False,
        }
        data = self._post(payload)
        try:
            content = data["choices"][0]["message"]["content"]
        except (KeyError, IndexError, TypeError):
            raise CompletionError("Completion response has no choices[0].message.content")
        if not isinstance(content, str):
            raise CompletionError("Completion content is not text")
        return content

    def _post_once(self, payload: dict) -> dict:
        resp = self.session.post(
            self.api_url,
            json=payload,
            headers={
                "Authorization": f"Bearer {self.api_key}",
                "Content-Type": "application/json",
            },
            timeout=self.timeout,
        )
        if not resp.ok:
            message = _error_message(resp)
            if should_retry_http_status(resp.status_code):
                raise TransientCompletionError(message, status_code=resp.status_code)
            raise CompletionError(message, status_code=resp.status_code)
        try:
            return resp.json()
        except ValueError:
            raise CompletionError("Completion response is not valid JSON", status_code=resp.status_code)


def _error_message(resp: requests.Response) -> str:
    """Prefer the API's own error.message, then the HTTP reason."""
    fallback = resp.reason or "Failed to get AI response"
    try:
        data = resp.json()
    except ValueError:
        return fallback
    if isinstance(data, dict) and isinstance(data.get("error"), dict):
        return data["error"].get("message") or fallback
    return fallback
