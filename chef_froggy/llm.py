"""LLM client — HTTP connection to a remote text-generation service.

The session code injects an LLM callable matching the protocol:

    async def __call__(self, provider: str, prompt: str) -> str: ...

`provider` names the upstream model vendor the request should be routed to
(e.g. "openai"). Aggregator backends such as EdenAI use it to pick the
vendor; single-model backends only log it.

Two implementations are provided:

    HttpLLM   — real HTTP client, supports EdenAI, OpenAI-compatible and
                 KoboldCpp backends. Selected by provider_format.
    EchoLLM   — returns the prompt back unchanged. Useful for smoke-testing
                 a cooking session without a running model.

Every failure surfaces as ProviderError; callers never see httpx exceptions.
"""

from __future__ import annotations

import logging
from typing import Literal, Protocol

import httpx

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Protocol — every LLM implementation must match this signature
# ---------------------------------------------------------------------------

class LLM(Protocol):
    async def __call__(self, provider: str, prompt: str) -> str: ...


# ---------------------------------------------------------------------------
# ProviderError — raised for all connection and protocol failures
# ---------------------------------------------------------------------------

class ProviderError(RuntimeError):
    """Raised when the generation backend cannot be reached or returns an error.

    The underlying exception, if any, is chained and exposed as `cause`.
    """

    def __init__(self, message: str, provider: str = "") -> None:
        super().__init__(message)
        self.provider = provider

    @property
    def cause(self) -> BaseException | None:
        return self.__cause__


# ---------------------------------------------------------------------------
# HttpLLM — connects to a real backend
# ---------------------------------------------------------------------------

ProviderFormat = Literal["edenai", "openai", "koboldcpp"]


def _has_text(items: object) -> bool:
    """True for a non-empty list whose first item is {"text": <str>, ...}."""
    if not isinstance(items, list) or not items:
        return False
    first = items[0]
    return isinstance(first, dict) and isinstance(first.get("text"), str)


class HttpLLM:
    """Async HTTP client for text-generation backends.

    Supported formats:
      "edenai"     — POST /v2/text/chat     {"providers": ..., "text": ...}
                     Response: {"<provider>": {"status": "success",
                                               "generated_text": "..."}}
      "openai"     — POST /v1/completions   {"model": ..., "prompt": ...}
                     Response: {"choices": [{"text": "..."}]}
      "koboldcpp"  — POST /api/v1/generate  {"prompt": ...}
                     Response: {"results": [{"text": "..."}]}

    Args:
        provider_url:    Base URL of the backend, e.g. "https://api.edenai.run".
        api_key:         Bearer token, or empty string if not required.
        provider_format: Wire format to use. Defaults to "edenai".
        model:           Model identifier, used only by the openai format.
        timeout:         HTTP timeout in seconds. Defaults to 120.
    """

    def __init__(
        self,
        provider_url: str,
        api_key: str = "",
        provider_format: ProviderFormat = "edenai",
        model: str = "",
        timeout: float = 120.0,
    ) -> None:
        self._base_url = provider_url.rstrip("/")
        self._api_key = api_key
        self._format = provider_format
        self._model = model
        self._timeout = timeout

    def _headers(self) -> dict[str, str]:
        headers: dict[str, str] = {"Content-Type": "application/json"}
        if self._api_key:
            headers["Authorization"] = f"Bearer {self._api_key}"
        return headers

    def _build_request(self, provider: str, prompt: str) -> tuple[str, dict]:
        """Return (url, body) for the configured format."""
        if self._format == "openai":
            body: dict = {"prompt": prompt}
            if self._model:
                body["model"] = self._model
            return f"{self._base_url}/v1/completions", body

        if self._format == "koboldcpp":
            return f"{self._base_url}/api/v1/generate", {"prompt": prompt}

        # edenai (default)
        return f"{self._base_url}/v2/text/chat", {"providers": provider, "text": prompt}

    def _parse_response(self, provider: str, data: dict) -> str:
        """Extract the generated text from the response body."""
        if self._format == "openai":
            if not _has_text(data.get("choices")):
                raise ProviderError(
                    "Unexpected response format from OpenAI-compatible backend", provider
                )
            return data["choices"][0]["text"]

        if self._format == "koboldcpp":
            if not _has_text(data.get("results")):
                raise ProviderError(
                    "Unexpected response format from KoboldCpp backend", provider
                )
            return data["results"][0]["text"]

        # edenai — one entry per requested provider
        entry = data.get(provider)
        if not isinstance(entry, dict):
            raise ProviderError(
                f"Unexpected response format from EdenAI: no {provider!r} entry", provider
            )
        if entry.get("status") == "fail":
            detail = entry.get("error", {})
            if isinstance(detail, dict):
                detail = detail.get("message", "")
            raise ProviderError(f"EdenAI provider {provider!r} failed: {detail}", provider)
        if not isinstance(entry.get("generated_text"), str):
            raise ProviderError(
                "Unexpected response format from EdenAI: missing generated_text", provider
            )
        return entry["generated_text"]

    async def __call__(self, provider: str, prompt: str) -> str:
        url, body = self._build_request(provider, prompt)
        logger.debug("llm call provider=%s url=%s prompt_len=%d", provider, url, len(prompt))

        try:
            async with httpx.AsyncClient(timeout=self._timeout) as client:
                resp = await client.post(url, json=body, headers=self._headers())
                resp.raise_for_status()
        except httpx.ConnectError as e:
            raise ProviderError(
                f"Cannot connect to generation backend at {self._base_url}", provider
            ) from e
        except httpx.HTTPStatusError as e:
            raise ProviderError(
                f"Generation backend returned HTTP {e.response.status_code}", provider
            ) from e
        except httpx.TimeoutException as e:
            raise ProviderError(
                f"Generation backend timed out after {self._timeout}s", provider
            ) from e
        except httpx.HTTPError as e:
            raise ProviderError(
                f"Request to generation backend failed: {type(e).__name__}: {e}", provider
            ) from e

        try:
            data = resp.json()
        except ValueError as e:
            raise ProviderError("Generation backend returned invalid JSON", provider) from e
        if not isinstance(data, dict):
            raise ProviderError("Generation backend returned a non-object body", provider)

        text = self._parse_response(provider, data)
        logger.debug("llm response provider=%s len=%d", provider, len(text))
        return text


# ---------------------------------------------------------------------------
# EchoLLM — returns the prompt unchanged; useful for smoke tests
# ---------------------------------------------------------------------------

class EchoLLM:
    """Returns the prompt text as-is. No network calls.

    Lets you play through a whole recipe, recap included, without a
    running model.
    """

    async def __call__(self, provider: str, prompt: str) -> str:
        logger.debug("EchoLLM provider=%s prompt_len=%d", provider, len(prompt))
        return prompt
