"""Configuration records for one pending call.

``ConfigState`` is the mutable record a single ``RequestBuilder`` owns.
``GlobalDefaults`` is the frozen partial configuration stored per endpoint
in the registry. ``MergedConfig`` is the frozen result of reconciling the
two; it is what hooks observe and what the transport receives.
"""

from __future__ import annotations

import copy
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import TYPE_CHECKING, Any, Iterable, Mapping
from urllib.parse import quote

from requests.structures import CaseInsensitiveDict

from .types import UNSET, EndpointKey

if TYPE_CHECKING:
    from .interceptors import PostCallHook, PreCallHook

DEFAULT_METHOD = "GET"


def validate_timeout(timeout: float | None) -> float | None:
    """Return the timeout unchanged, rejecting non-positive values."""
    if timeout is not None and timeout <= 0:
        raise ValueError("timeout must be > 0 when provided")
    return timeout


def normalize_method(method: str) -> str:
    if not method or not method.strip():
        raise ValueError("method must be a non-empty string")
    return method.strip().upper()


def url_segments(values: Iterable[Any]) -> list[str]:
    """Coerce path-segment values to strings."""
    return [str(value) for value in values]


def _frozen(mapping: Mapping[str, Any]) -> Mapping[str, Any]:
    return MappingProxyType(dict(mapping))


def _frozen_headers(headers: Mapping[str, str]) -> Mapping[str, str]:
    return MappingProxyType(CaseInsensitiveDict(headers))


@dataclass
class ConfigState:
    """Mutable description of one pending call.

    Removal sets record keys/values removed locally so the merge can drop
    them from global defaults too. Header removals are stored lower-cased.
    """

    base_url: str
    url_params: list[str] = field(default_factory=list)
    query_params: dict[str, Any] = field(default_factory=dict)
    headers: CaseInsensitiveDict = field(default_factory=CaseInsensitiveDict)
    body: Any = UNSET
    method: Any = UNSET
    timeout: Any = UNSET
    context: dict[str, Any] = field(default_factory=dict)
    pre_call: list[PreCallHook] = field(default_factory=list)
    post_call: list[PostCallHook] = field(default_factory=list)
    removed_url_params: set[str] = field(default_factory=set)
    removed_query_params: set[str] = field(default_factory=set)
    removed_headers: set[str] = field(default_factory=set)
    executed: bool = False


@dataclass(frozen=True)
class GlobalDefaults:
    """Partial configuration applied underneath every call to one endpoint."""

    url_params: tuple[str, ...] = ()
    query_params: Mapping[str, Any] = field(default_factory=dict)
    headers: Mapping[str, str] = field(default_factory=dict)
    body: Any = UNSET
    method: Any = UNSET
    timeout: Any = UNSET
    context: Mapping[str, Any] = field(default_factory=dict)

    def __post_init__(self) -> None:
        object.__setattr__(
            self, "url_params", tuple(url_segments(self.url_params))
        )
        object.__setattr__(self, "query_params", _frozen(self.query_params))
        object.__setattr__(self, "headers", _frozen_headers(self.headers))
        object.__setattr__(self, "context", _frozen(self.context))
        if self.method is not UNSET:
            object.__setattr__(self, "method", normalize_method(self.method))
        if self.timeout is not UNSET:
            validate_timeout(self.timeout)
        if self.body is not UNSET:
            object.__setattr__(self, "body", copy.deepcopy(self.body))

    def overlay(self, newer: GlobalDefaults) -> GlobalDefaults:
        """Combine with a newer partial config; the newer one wins."""
        headers = CaseInsensitiveDict(self.headers)
        headers.update(newer.headers)
        return GlobalDefaults(
            url_params=newer.url_params or self.url_params,
            query_params={**self.query_params, **newer.query_params},
            headers=headers,
            body=self.body if newer.body is UNSET else newer.body,
            method=self.method if newer.method is UNSET else newer.method,
            timeout=self.timeout if newer.timeout is UNSET else newer.timeout,
            context={**self.context, **newer.context},
        )


EMPTY_DEFAULTS = GlobalDefaults()


@dataclass(frozen=True)
class MergedConfig:
    """Read-only, fully merged configuration of one call."""

    endpoint_key: EndpointKey
    base_url: str
    method: str = DEFAULT_METHOD
    url_params: tuple[str, ...] = ()
    query_params: Mapping[str, Any] = field(default_factory=dict)
    headers: Mapping[str, str] = field(default_factory=dict)
    body: Any = None
    timeout: float | None = None
    context: Mapping[str, Any] = field(default_factory=dict)

    def __post_init__(self) -> None:
        # Freeze copies so neither hooks nor the caller can mutate them.
        object.__setattr__(self, "url_params", tuple(self.url_params))
        object.__setattr__(self, "query_params", _frozen(self.query_params))
        object.__setattr__(self, "headers", _frozen_headers(self.headers))
        object.__setattr__(self, "context", _frozen(self.context))

    @property
    def url(self) -> str:
        """Base URL followed by the percent-encoded path segments."""
        if not self.url_params:
            return self.base_url
        path = "/".join(quote(segment, safe="") for segment in self.url_params)
        return f"{self.base_url.rstrip('/')}/{path}"
