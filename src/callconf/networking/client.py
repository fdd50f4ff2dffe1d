"""Requests-backed transport for merged request configurations.

``HttpClient`` performs exactly one HTTP exchange per merged config and
reports the outcome as a Result. ``RequestsTransport`` adapts it to the
transport-function contract ``RequestBuilder`` expects: an awaitable that
returns the response or raises a ``TransportError``.
"""

from __future__ import annotations

import asyncio
import json as jsonlib
import logging
from dataclasses import dataclass, field
from typing import Any, Callable, Mapping

import requests

from ..errors import (
    HttpClientError,
    HttpStatusError,
    RequestTimeoutError,
    RetryableHttpError,
)
from ..state import MergedConfig
from ..types import Err, Ok, Result
from .config import HttpClientConfig

logger = logging.getLogger(__name__)

Timeout = float | tuple[float, float] | None


def jsonable(body: Mapping[str, Any] | list[Any]) -> Any:
    """Copy read-only mappings into plain dicts requests can encode."""
    if isinstance(body, Mapping):
        return dict(body)
    return body


@dataclass(frozen=True)
class HttpResponse:
    """Settled HTTP response detached from the requests session."""

    status_code: int
    url: str
    reason: str | None = None
    headers: Mapping[str, str] = field(default_factory=dict)
    content: bytes = b""
    meta: Mapping[str, Any] = field(default_factory=dict)

    @property
    def is_success(self) -> bool:
        return 200 <= self.status_code < 300

    @property
    def text(self) -> str:
        return self.content.decode("utf-8", errors="replace")

    def json(self) -> Any:
        return jsonlib.loads(self.content)


class HttpClient:
    """Synchronous HTTP client bound to one requests session.

    The client applies no retry or rate-limit policy; it performs one
    attempt and normalizes the outcome and its metadata.
    """

    def __init__(self, config: HttpClientConfig | None = None) -> None:
        """Create a new HttpClient.

        Args:
            config: Session-wide timeouts, headers and TLS settings.
        """
        self._config = config or HttpClientConfig()
        self._session = requests.Session()
        if self._config.user_agent:
            self._session.headers["User-Agent"] = self._config.user_agent
        self._session.headers.update(self._config.default_headers)

    def close(self) -> None:
        self._session.close()

    def _get_timeout(self, override: float | None) -> Timeout:
        """Resolve timeout preference."""
        if override is not None:
            if override <= 0:
                raise ValueError("timeout override must be > 0 when provided")
            return override
        if (
            self._config.connect_timeout_seconds is not None
            and self._config.read_timeout_seconds is not None
        ):
            return (
                self._config.connect_timeout_seconds,
                self._config.read_timeout_seconds,
            )
        return self._config.timeout_seconds

    def _build_meta(
        self,
        method: str,
        request_url: str,
        response: requests.Response | None,
        context: Mapping[str, Any] | None,
        timeout: Timeout,
        final_error: str | None = None,
    ) -> dict[str, Any]:
        """Construct metadata dictionary from response and context."""
        meta: dict[str, Any] = {}
        meta["method"] = method
        meta["url"] = request_url
        meta["timeout_s"] = timeout
        if context:
            context_dict = dict(context)
            meta["context"] = context_dict
            for key, value in context_dict.items():
                meta.setdefault(key, value)

        if response is not None:
            meta["status_code"] = response.status_code
            meta["url"] = response.url
            meta["reason"] = response.reason
            try:
                meta["elapsed_s"] = response.elapsed.total_seconds()
            except AttributeError:
                pass  # In case elapsed is not available or mocked
        if final_error is not None:
            meta["final_error"] = final_error

        return meta

    def _handle_request_exception(
        self,
        method: str,
        request_url: str,
        e: requests.exceptions.RequestException,
        context: Mapping[str, Any] | None,
        timeout: Timeout,
    ) -> Err[Exception]:
        """Map requests exceptions to transport errors."""
        meta = self._build_meta(
            method,
            request_url,
            e.response,
            context,
            timeout,
            final_error=type(e).__name__,
        )

        if isinstance(e, requests.exceptions.Timeout):
            return Err(RequestTimeoutError(str(e)), meta=meta)

        if isinstance(e, requests.exceptions.ConnectionError):
            return Err(RetryableHttpError(str(e)), meta=meta)

        return Err(HttpClientError(str(e)), meta=meta)

    def _request(
        self,
        method: str,
        url: str,
        *,
        context: Mapping[str, Any] | None,
        timeout: Timeout,
        request_fn: Callable[[], requests.Response],
    ) -> Result[HttpResponse, Exception]:
        """Execute one request and normalize its outcome."""
        try:
            response = request_fn()
        except requests.exceptions.RequestException as exc:
            return self._handle_request_exception(
                method, url, exc, context, timeout
            )

        meta = self._build_meta(method, url, response, context, timeout)
        if self._config.raise_for_status and response.status_code >= 400:
            meta["final_error"] = HttpStatusError.__name__
            return Err(
                HttpStatusError(
                    f"{response.status_code} {response.reason} for {url}",
                    status_code=response.status_code,
                ),
                meta=meta,
            )
        return Ok(
            HttpResponse(
                status_code=response.status_code,
                url=meta["url"],
                reason=response.reason,
                headers=dict(response.headers),
                content=response.content,
                meta=meta,
            ),
            meta=meta,
        )

    def send(self, config: MergedConfig) -> Result[HttpResponse, Exception]:
        """Perform the HTTP exchange a merged configuration describes.

        Mapping and list bodies are sent as JSON; anything else is sent as
        the raw request body.

        Args:
            config: Fully merged request configuration.

        Returns:
            Result containing the response on success, or a TransportError
            on failure. Non-2xx statuses are successes unless the client is
            configured with ``raise_for_status``.
        """
        resolved_timeout = self._get_timeout(config.timeout)
        url = config.url
        data: Any = config.body
        json: Any = None
        if isinstance(data, (Mapping, list)):
            data, json = None, jsonable(data)
        logger.debug("%s %s", config.method, url)
        return self._request(
            method=config.method,
            url=url,
            context=config.context,
            timeout=resolved_timeout,
            request_fn=lambda: self._session.request(
                config.method,
                url,
                headers=dict(config.headers),
                params=dict(config.query_params),
                data=data,
                json=json,
                timeout=resolved_timeout,
                verify=self._config.verify_tls,
            ),
        )


class RequestsTransport:
    """Transport function running ``HttpClient.send`` off the event loop."""

    def __init__(self, client: HttpClient) -> None:
        self._client = client

    async def __call__(self, config: MergedConfig) -> HttpResponse:
        result = await asyncio.to_thread(self._client.send, config)
        if isinstance(result, Err):
            raise result.error
        return result.value
