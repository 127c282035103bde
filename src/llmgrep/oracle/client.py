"""Client for the local Ollama text-generation server."""

from __future__ import annotations

import asyncio
import logging
from typing import Any, Protocol

import httpx

from llmgrep.config import DEFAULT_HOST, DEFAULT_MODEL, normalize_host

LOGGER = logging.getLogger(__name__)


class OracleError(RuntimeError):
    """Base error for failed oracle requests."""


class OracleUnavailableError(OracleError):
    """The oracle server could not be reached."""


class OracleTimeoutError(OracleError):
    """A single request did not complete before its deadline."""


class OracleResponseError(OracleError):
    """The server answered with an error status or an unexpected body."""


class Oracle(Protocol):
    async def generate(self, system: str, prompt: str, *, json_format: bool = True) -> str:
        ...


class OllamaClient:
    """Thin async wrapper around ``/api/generate``.

    Every call is bounded by ``timeout`` seconds (``None`` waits forever).
    """

    def __init__(
        self,
        model: str = DEFAULT_MODEL,
        *,
        host: str = DEFAULT_HOST,
        timeout: float | None = 120.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self.model = model
        self.host = normalize_host(host)
        self.timeout = timeout
        # The deadline is enforced by asyncio.wait_for, not by httpx.
        self._client = httpx.AsyncClient(base_url=self.host, timeout=None, transport=transport)

    async def __aenter__(self) -> "OllamaClient":
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        await self._client.aclose()

    async def _request(self, method: str, url: str, **kwargs: Any) -> httpx.Response:
        try:
            response = await asyncio.wait_for(
                self._client.request(method, url, **kwargs), timeout=self.timeout
            )
        except asyncio.TimeoutError as exc:
            raise OracleTimeoutError(
                f"{method} {url} timed out after {self.timeout}s"
            ) from exc
        except (httpx.ConnectError, httpx.ConnectTimeout) as exc:
            raise OracleUnavailableError(
                f"Cannot reach Ollama at {self.host}: {exc}"
            ) from exc
        except httpx.HTTPError as exc:
            raise OracleResponseError(f"{method} {url} failed: {exc}") from exc

        try:
            response.raise_for_status()
        except httpx.HTTPStatusError as exc:
            raise OracleResponseError(
                f"Ollama returned {response.status_code}: {response.text.strip()}"
            ) from exc
        return response

    async def check_model(self) -> None:
        """Fail fast when the server is down or the model is not pulled."""
        response = await self._request("GET", "/api/tags")
        try:
            names = {entry["name"] for entry in response.json().get("models", [])}
        except (ValueError, KeyError, TypeError, AttributeError) as exc:
            raise OracleResponseError(f"Unexpected /api/tags reply: {exc}") from exc

        wanted = {self.model}
        if ":" not in self.model:
            wanted.add(f"{self.model}:latest")
        if not wanted & names:
            raise OracleError(
                f"Model {self.model!r} is not available on {self.host}; "
                f"run `ollama pull {self.model}`"
            )
        LOGGER.debug("Model %s available on %s", self.model, self.host)

    async def generate(self, system: str, prompt: str, *, json_format: bool = True) -> str:
        """Run one non-streaming completion and return the raw response text."""
        payload: dict[str, Any] = {
            "model": self.model,
            "prompt": prompt,
            "system": system,
            "stream": False,
        }
        if json_format:
            payload["format"] = "json"

        response = await self._request("POST", "/api/generate", json=payload)
        try:
            text = response.json()["response"]
        except (ValueError, KeyError, TypeError) as exc:
            raise OracleResponseError(f"Unexpected /api/generate reply: {exc}") from exc
        if not isinstance(text, str):
            raise OracleResponseError("Ollama reply has a non-string 'response' field")
        return text
