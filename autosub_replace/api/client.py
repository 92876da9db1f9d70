"""Async HTTP client for the Gemini generateContent endpoint.

WHY: Every batch goes through one POST to the reshaping service. Callers
(the pipeline, tests) should not deal with URLs, auth headers, timeouts
or status checks, only with "send this prompt, give me the raw answer".

HOW: Uses httpx.AsyncClient. GeminiClient is an async context manager:
enter it to open the connection pool, exit to close it.
generate_content() builds the request body from the Config, POSTs it and
returns the raw response body text. Decoding is left to protocol.py so
the pipeline can dump the raw body before interpreting it.

RULES:
- Always use: async with GeminiClient(config) as client: ...
- Request timeout is 120 seconds
- API key goes in the x-goog-api-key header, never in the URL
- Non-200 status or transport failure → ServiceError
- Retries only when config.max_retries > 0, and only for timeouts,
  transport errors, 429 and 5xx; exhaustion re-raises the last error
"""

from __future__ import annotations

import asyncio
import logging
from typing import Optional

import httpx

from autosub_replace.api.protocol import build_request_body
from autosub_replace.config import Config

logger = logging.getLogger(__name__)

# ---------------------------------------------------------------------------
# Constants
# ---------------------------------------------------------------------------

REQUEST_TIMEOUT_S = 120.0

_RETRY_INITIAL_DELAY_S = 2.0
_RETRY_BACKOFF_FACTOR = 2.0
_RETRY_MAX_DELAY_S = 30.0


class ServiceError(Exception):
    """Raised when the reshaping service call does not succeed.

    WHY: Callers need a typed exception that carries the status and raw
    body for diagnostics, separate from decode problems.

    RULES:
    - status_code is None for timeouts and transport failures
    - body is the response text, or a description of the failure
    """

    def __init__(self, status_code: Optional[int], body: str) -> None:
        self.status_code = status_code
        self.body = body
        if status_code is None:
            super().__init__("API request failed: {}".format(body))
        else:
            super().__init__("API request failed with status {}: {}".format(status_code, body))

    @property
    def retryable(self) -> bool:
        return self.status_code is None or self.status_code == 429 or self.status_code >= 500


class GeminiClient:
    """Async client for one-shot generateContent calls.

    RULES:
    - config supplies api_key, base_url, model, temperature, max_tokens
    - transport is for tests (httpx.MockTransport)
    """

    def __init__(
        self,
        config: Config,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        self._config = config
        self._transport = transport
        self._client: Optional[httpx.AsyncClient] = None

    async def __aenter__(self) -> GeminiClient:
        self._client = httpx.AsyncClient(
            base_url=self._config.base_url.rstrip("/"),
            headers={"x-goog-api-key": self._config.api_key},
            timeout=httpx.Timeout(REQUEST_TIMEOUT_S),
            transport=self._transport,
        )
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:  # noqa: ANN001
        if self._client:
            await self._client.aclose()
            self._client = None

    def _ensure_client(self) -> httpx.AsyncClient:
        if self._client is None:
            raise RuntimeError(
                "GeminiClient must be used as an async context manager: "
                "async with GeminiClient(config) as client: ..."
            )
        return self._client

    @property
    def endpoint(self) -> str:
        return "/models/{}:generateContent".format(self._config.model)

    async def generate_content(self, prompt: str) -> str:
        """Send one prompt and return the raw response body.

        Args:
            prompt: The full reshaping prompt for one batch.

        Returns:
            The response body text of a 200 response.

        Raises:
            ServiceError: on timeout, transport failure or non-200 status,
                after any configured retries are used up.
        """
        attempts = max(self._config.max_retries, 0) + 1
        delay = _RETRY_INITIAL_DELAY_S
        attempt = 1

        while True:
            try:
                return await self._post_once(prompt)
            except ServiceError as exc:
                if not exc.retryable or attempt >= attempts:
                    raise
                logger.warning(
                    "Gemini request failed (attempt %d/%d): %s; retrying in %.1fs",
                    attempt, attempts, exc, delay,
                )
            await asyncio.sleep(delay)
            delay = min(delay * _RETRY_BACKOFF_FACTOR, _RETRY_MAX_DELAY_S)
            attempt += 1

    async def _post_once(self, prompt: str) -> str:
        client = self._ensure_client()
        body = build_request_body(prompt, self._config.temperature, self._config.max_tokens)
        logger.debug("Sending request to Gemini API (model: %s)", self._config.model)

        try:
            resp = await client.post(self.endpoint, json=body)
        except httpx.TimeoutException as exc:
            raise ServiceError(
                None, "request timed out after {:.0f}s".format(REQUEST_TIMEOUT_S)
            ) from exc
        except httpx.HTTPError as exc:
            raise ServiceError(None, "error making API request: {}".format(exc)) from exc

        if resp.status_code != 200:
            raise ServiceError(resp.status_code, resp.text)
        return resp.text
