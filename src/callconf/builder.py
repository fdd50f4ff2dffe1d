"""Deferred request builder and the configuration merge.

A ``RequestBuilder`` collects per-call overrides on top of the defaults a
model method seeded. Nothing is sent until ``execute()``, which merges the
endpoint's global registry state with the builder's own state, runs the
interceptor chains and dispatches to the transport function.
"""

from __future__ import annotations

import copy
import logging
from typing import Any, Awaitable, Callable, Iterable, Mapping

from requests.structures import CaseInsensitiveDict

from .errors import InvalidStateError
from .interceptors import (
    PostCallHook,
    PreCallHook,
    run_post_call,
    run_pre_call,
    settle,
    validate_hooks,
)
from .registry import (
    EndpointKey,
    GlobalRegistry,
    RegistryEntry,
    validate_endpoint_key,
)
from .state import (
    DEFAULT_METHOD,
    EMPTY_DEFAULTS,
    ConfigState,
    GlobalDefaults,
    MergedConfig,
    normalize_method,
    url_segments,
    validate_timeout,
)
from .types import UNSET, Err, Ok, Result

logger = logging.getLogger(__name__)

Transport = Callable[[MergedConfig], Any]


def _pick(local: Any, inherited: Any, fallback: Any) -> Any:
    if local is not UNSET:
        return local
    if inherited is not UNSET:
        return inherited
    return fallback


def merge_config(
    endpoint_key: EndpointKey,
    state: ConfigState,
    defaults: GlobalDefaults = EMPTY_DEFAULTS,
) -> MergedConfig:
    """Overlay a builder's state on an endpoint's global defaults.

    Maps are unioned with local values winning, URL params are the global
    prefix followed by the local suffix, scalars set locally replace global
    ones, and anything removed locally is dropped even if a global default
    supplies it. The body is deep-copied so neither hooks nor the transport
    can reach the registry's defaults or the builder's state through it.
    """
    headers = CaseInsensitiveDict(
        {
            key: value
            for key, value in defaults.headers.items()
            if key.lower() not in state.removed_headers
        }
    )
    headers.update(state.headers)

    query_params = {
        key: value
        for key, value in defaults.query_params.items()
        if key not in state.removed_query_params
    }
    query_params.update(state.query_params)

    url_params = [
        segment
        for segment in defaults.url_params
        if segment not in state.removed_url_params
    ]
    url_params.extend(state.url_params)

    return MergedConfig(
        endpoint_key=endpoint_key,
        base_url=state.base_url,
        method=_pick(state.method, defaults.method, DEFAULT_METHOD),
        url_params=tuple(url_params),
        query_params=query_params,
        headers=headers,
        body=copy.deepcopy(_pick(state.body, defaults.body, None)),
        timeout=_pick(state.timeout, defaults.timeout, None),
        context={**defaults.context, **state.context},
    )


class RequestBuilder:
    """Single-use, chainable configuration of one transport call.

    Every mutation returns the builder itself. Once ``execute()`` has been
    invoked, all further mutations and executions raise
    ``InvalidStateError``.
    """

    def __init__(
        self,
        endpoint_key: EndpointKey,
        base_url: str,
        transport: Transport,
        *,
        registry: GlobalRegistry | None = None,
    ) -> None:
        """Create a builder.

        Args:
            endpoint_key: Stable identity used for global registry lookups.
            base_url: Base endpoint; fixed for the builder's lifetime.
            transport: Called with the merged config on execution; may
                return the response or an awaitable of it.
            registry: Registry consulted at execution time. Without one the
                call runs with local state only.
        """
        validate_endpoint_key(endpoint_key)
        if not base_url:
            raise ValueError("base_url must be non-empty")
        if not callable(transport):
            raise TypeError("transport must be callable")
        self._endpoint_key = endpoint_key
        self._state = ConfigState(base_url=base_url)
        self._transport = transport
        self._registry = registry

    def __repr__(self) -> str:
        return (
            f"RequestBuilder({self._endpoint_key!r}, "
            f"{self._state.base_url!r}, executed={self._state.executed})"
        )

    @property
    def endpoint_key(self) -> EndpointKey:
        return self._endpoint_key

    @property
    def base_url(self) -> str:
        return self._state.base_url

    @property
    def executed(self) -> bool:
        return self._state.executed

    def _mutable_state(self) -> ConfigState:
        if self._state.executed:
            raise InvalidStateError(
                f"request for {self._endpoint_key!r} was already executed"
            )
        return self._state

    def add_url_params(self, *values: Any) -> RequestBuilder:
        state = self._mutable_state()
        state.url_params.extend(url_segments(values))
        return self

    def remove_url_params(self, values: Iterable[Any]) -> RequestBuilder:
        """Remove path segments by value, locally and from global defaults."""
        state = self._mutable_state()
        removed = set(url_segments(values))
        state.url_params[:] = [
            segment for segment in state.url_params if segment not in removed
        ]
        state.removed_url_params.update(removed)
        return self

    def add_query_params(self, params: Mapping[str, Any]) -> RequestBuilder:
        state = self._mutable_state()
        for key, value in params.items():
            state.removed_query_params.discard(key)
            state.query_params[key] = value
        return self

    def remove_query_params(self, keys: Iterable[str]) -> RequestBuilder:
        state = self._mutable_state()
        for key in keys:
            state.query_params.pop(key, None)
            state.removed_query_params.add(key)
        return self

    def add_headers(self, headers: Mapping[str, str]) -> RequestBuilder:
        """Merge headers in; keys compare case-insensitively."""
        state = self._mutable_state()
        for key, value in headers.items():
            if not key:
                raise ValueError("header name must be non-empty")
            state.removed_headers.discard(key.lower())
            state.headers[key] = value
        return self

    def remove_headers(self, keys: Iterable[str]) -> RequestBuilder:
        state = self._mutable_state()
        for key in keys:
            state.headers.pop(key, None)
            state.removed_headers.add(key.lower())
        return self

    def set_body(self, payload: Any) -> RequestBuilder:
        self._mutable_state().body = payload
        return self

    def set_method(self, method: str) -> RequestBuilder:
        self._mutable_state().method = normalize_method(method)
        return self

    def set_timeout(self, seconds: float | None) -> RequestBuilder:
        self._mutable_state().timeout = validate_timeout(seconds)
        return self

    def add_context(self, context: Mapping[str, Any]) -> RequestBuilder:
        self._mutable_state().context.update(context)
        return self

    def add_interceptor(
        self,
        pre_call: PreCallHook | None = None,
        post_call: PostCallHook | None = None,
    ) -> RequestBuilder:
        """Attach hooks that apply to this call only."""
        state = self._mutable_state()
        validate_hooks(pre_call, post_call)
        if pre_call is not None:
            state.pre_call.append(pre_call)
        if post_call is not None:
            state.post_call.append(post_call)
        return self

    def _registry_entry(self) -> RegistryEntry | None:
        if self._registry is None:
            return None
        return self._registry.entry(self._endpoint_key)

    def preview(self) -> MergedConfig:
        """Return the configuration ``execute()`` would dispatch right now."""
        entry = self._registry_entry()
        defaults = entry.defaults if entry is not None else EMPTY_DEFAULTS
        return merge_config(self._endpoint_key, self._state, defaults)

    def execute(self) -> Awaitable[Any]:
        """Merge, intercept and dispatch the call.

        The builder is spent as soon as this is invoked; the registry is
        read at that moment, so later registrations do not affect it.

        Returns:
            Awaitable resolving to the final success value, or raising
            ``CallAbortedError``, the transport's error, or whatever a hook
            raised.
        """
        state = self._mutable_state()
        state.executed = True
        entry = self._registry_entry()
        defaults = entry.defaults if entry is not None else EMPTY_DEFAULTS
        merged = merge_config(self._endpoint_key, state, defaults)
        pre_call: tuple[PreCallHook, ...] = tuple(state.pre_call)
        post_call: tuple[PostCallHook, ...] = tuple(state.post_call)
        if entry is not None:
            pre_call = entry.interceptors.pre_call + pre_call
            post_call = post_call + entry.interceptors.post_call
        logger.debug(
            "Merged config for %r: %s %s",
            self._endpoint_key,
            merged.method,
            merged.url,
        )
        return self._run(merged, pre_call, post_call)

    async def _run(
        self,
        merged: MergedConfig,
        pre_call: tuple[PreCallHook, ...],
        post_call: tuple[PostCallHook, ...],
    ) -> Any:
        await run_pre_call(pre_call, merged)

        logger.debug("Dispatching %s %s", merged.method, merged.url)
        outcome: Result[Any, Exception]
        try:
            outcome = Ok(await settle(self._transport(merged)))
        except Exception as exc:
            outcome = Err(exc)

        outcome = await run_post_call(post_call, outcome, merged)
        if isinstance(outcome, Ok):
            return outcome.value
        raise outcome.error
