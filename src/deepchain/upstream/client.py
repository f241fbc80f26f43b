"""Async client for the DeepSeek completions endpoint.

Example:
    >>> async with CompletionClient(api_key="sk-...") as client:
    ...     text = await client.complete("### Task: Code Generation ...", temperature=0.2)
"""

from __future__ import annotations

from typing import TYPE_CHECKING

import httpx

from deepchain.foundation.errors import UpstreamError
from deepchain.observability import get_logger

if TYPE_CHECKING:
    from deepchain.foundation.config import UpstreamSettings

DEFAULT_BASE_URL = "https://api.deepseek.com/v1"
DEFAULT_MAX_TOKENS = 2000

_log = get_logger("deepchain.upstream")


class CompletionClient:
    """Thin wrapper over httpx.AsyncClient exposing complete(prompt) -> text.

    The underlying client is created lazily and reused until aclose().

    Args:
        api_key: Bearer token
        base_url: API root (the /completions path is appended)
        timeout: Request timeout in seconds
        max_tokens: Default completion length
        transport: Optional httpx transport (tests use httpx.MockTransport)
    """

    __slots__ = ("_api_key", "_base_url", "_timeout", "_max_tokens", "_transport", "_client")

    def __init__(
        self,
        api_key: str,
        *,
        base_url: str = DEFAULT_BASE_URL,
        timeout: float = 60.0,
        max_tokens: int = DEFAULT_MAX_TOKENS,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._api_key = api_key
        self._base_url = base_url.rstrip("/")
        self._timeout = timeout
        self._max_tokens = max_tokens
        self._transport = transport
        self._client: httpx.AsyncClient | None = None

    @classmethod
    def from_settings(cls, settings: UpstreamSettings, **kwargs: object) -> CompletionClient:
        if settings.api_key is None or not settings.api_key.get_secret_value():
            raise ValueError("DEEPSEEK_API_KEY environment variable is required")
        return cls(
            settings.api_key.get_secret_value(),
            base_url=settings.base_url,
            timeout=settings.timeout,
            max_tokens=settings.max_tokens,
            **kwargs,  # type: ignore[arg-type]
        )

    def _get_client(self) -> httpx.AsyncClient:
        if self._client is None:
            self._client = httpx.AsyncClient(
                base_url=self._base_url,
                headers={
                    "Authorization": f"Bearer {self._api_key}",
                    "Content-Type": "application/json",
                },
                timeout=self._timeout,
                transport=self._transport,
            )
        return self._client

    async def complete(self, prompt: str, *, temperature: float, max_tokens: int | None = None) -> str:
        """Return the first choice's text for prompt. Raises UpstreamError on any failure."""
        body = {"prompt": prompt, "temperature": temperature, "max_tokens": max_tokens or self._max_tokens}
        try:
            response = await self._get_client().post("/completions", json=body)
            response.raise_for_status()
        except httpx.HTTPStatusError as e:
            detail = _error_detail(e.response) or str(e)
            _log.warning("completion request rejected", status=e.response.status_code, error=detail)
            raise UpstreamError(f"DeepSeek API error: {detail}", status_code=e.response.status_code) from e
        except httpx.HTTPError as e:
            _log.warning("completion request failed", error=str(e))
            raise UpstreamError(f"DeepSeek API error: {e}") from e

        try:
            return response.json()["choices"][0]["text"]
        except (ValueError, KeyError, IndexError, TypeError) as e:
            raise UpstreamError(f"DeepSeek API error: unexpected response shape ({e})") from e

    async def aclose(self) -> None:
        if self._client is not None:
            await self._client.aclose()
            self._client = None

    async def __aenter__(self) -> CompletionClient:
        return self

    async def __aexit__(self, *_: object) -> None:
        await self.aclose()


def _error_detail(response: httpx.Response) -> str | None:
    """Provider error payload, as a string, when the body carries one."""
    try:
        error = response.json().get("error")
    except (ValueError, AttributeError):
        return None
    if isinstance(error, dict):
        return str(error.get("message") or error)
    return str(error) if error else None
