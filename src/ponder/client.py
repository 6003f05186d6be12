"""Client for an OpenAI-compatible completion endpoint."""

from __future__ import annotations

from collections.abc import Iterable
from typing import Any

import requests
from loguru import logger

from ponder.config import Settings
from ponder.errors import CompletionError, RemoteError
from ponder.types import Message


class CompletionClient:
    """The two remote operations the orchestrator depends on."""

    def __init__(self, settings: Settings, *, session: requests.Session | None = None) -> None:
        self._settings = settings
        self._base_url = settings.api_base.rstrip("/")
        self._session = session if session is not None else requests.Session()
        api_key = settings.resolved_api_key
        if api_key:
            self._session.headers["Authorization"] = f"Bearer {api_key}"

    def __enter__(self) -> CompletionClient:
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()

    def close(self) -> None:
        self._session.close()

    def list_models(self) -> list[str]:
        url = f"{self._base_url}/models"
        logger.debug("client.list_models url={}", url)
        try:
            response = self._session.get(url, timeout=self._settings.timeout_seconds)
        except requests.RequestException as exc:
            raise RemoteError(None, f"request to {url} failed: {exc}") from exc
        if not response.ok:
            raise RemoteError(response.status_code, response.reason)

        try:
            data = response.json()["data"]
            return sorted(str(item["id"]) for item in data)
        except (ValueError, KeyError, TypeError) as exc:
            raise RemoteError(response.status_code, f"unexpected models payload: {exc}") from exc

    def get_completion(
        self,
        messages: Iterable[Message],
        *,
        model: str | None = None,
        max_tokens: int | None = None,
        **options: Any,
    ) -> str:
        """Request one completion and return the first choice's content.

        Args:
            messages: Transcript sent as the prompt
            model: Model override, defaults to the configured model
            max_tokens: Optional cap sent as ``max_completion_tokens``
            options: Extra request fields passed through verbatim

        Returns:
            The content of the first choice

        Raises:
            CompletionError: On a non-success status, transport failure or unexpected payload
        """
        body: dict[str, Any] = {
            "model": model or self._settings.model,
            "messages": [message.to_payload() for message in messages],
        }
        if max_tokens is not None:
            body["max_completion_tokens"] = max_tokens
        body.update(options)

        url = f"{self._base_url}/chat/completions"
        logger.info(
            "client.completion model={} messages={} max_tokens={}", body["model"], len(body["messages"]), max_tokens
        )
        try:
            response = self._session.post(url, json=body, timeout=self._settings.timeout_seconds)
        except requests.RequestException as exc:
            raise CompletionError(None, f"request to {url} failed: {exc}") from exc
        if not response.ok:
            raise CompletionError(response.status_code, response.reason, response.text)

        try:
            content = response.json()["choices"][0]["message"]["content"]
        except (ValueError, KeyError, IndexError, TypeError) as exc:
            raise CompletionError(response.status_code, f"unexpected completion payload: {exc!r}", response.text) from exc
        if not isinstance(content, str):
            raise CompletionError(response.status_code, "completion content is not text", response.text)
        return content
