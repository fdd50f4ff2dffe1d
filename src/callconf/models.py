"""Model-method factories and data-source resolution.

A model method is the one canonical definition of an API call. Decorating a
seeding function with ``model_method`` turns it into a factory that returns
a fresh ``RequestBuilder`` per invocation, targeted at whatever data source
the resolver picks for the endpoint key.
"""

from __future__ import annotations

import functools
from dataclasses import dataclass
from typing import Any, Callable, Mapping, Protocol

from .builder import RequestBuilder, Transport
from .errors import UnknownDataSourceError
from .registry import EndpointKey, GlobalRegistry, validate_endpoint_key


@dataclass(frozen=True)
class DataSource:
    """Backend a model method targets: base URL plus transport function."""

    base_url: str
    transport: Transport

    def __post_init__(self) -> None:
        if not self.base_url:
            raise ValueError("base_url must be non-empty")
        if not callable(self.transport):
            raise TypeError("transport must be callable")


class DataSourceResolver(Protocol):
    def resolve(self, endpoint_key: EndpointKey) -> DataSource: ...


class StaticDataSourceResolver:
    """Resolve data sources from a fixed mapping with an optional fallback."""

    def __init__(
        self,
        sources: Mapping[EndpointKey, DataSource] | None = None,
        default: DataSource | None = None,
    ) -> None:
        self._sources = dict(sources or {})
        self._default = default

    def resolve(self, endpoint_key: EndpointKey) -> DataSource:
        source = self._sources.get(endpoint_key, self._default)
        if source is None:
            raise UnknownDataSourceError(
                f"no data source configured for {endpoint_key!r}"
            )
        return source


def model_method(
    endpoint_key: EndpointKey,
    *,
    resolver: DataSourceResolver | None = None,
    base_url: str | None = None,
    transport: Transport | None = None,
    registry: GlobalRegistry | None = None,
) -> Callable[[Callable[..., Any]], Callable[..., RequestBuilder]]:
    """Turn a seeding function into a ``RequestBuilder`` factory.

    The decorated function receives the new builder followed by the model
    arguments and applies endpoint defaults to it; its return value is
    ignored. The endpoint key is registered when the decorator is applied.

    The backend comes from ``resolver`` at every call, or is fixed by
    passing ``base_url`` and ``transport`` instead.

    Example::

        @model_method("user.getDetails", resolver=resolver, registry=registry)
        def get_user_details(builder, user_id):
            builder.add_url_params("users", user_id)
    """
    validate_endpoint_key(endpoint_key)
    if resolver is None:
        if base_url is None or transport is None:
            raise TypeError(
                "model_method needs a resolver or both base_url and transport"
            )
        resolver = StaticDataSourceResolver(
            default=DataSource(base_url, transport)
        )
    elif base_url is not None or transport is not None:
        raise TypeError(
            "pass either a resolver or base_url and transport, not both"
        )
    source_resolver: DataSourceResolver = resolver
    if registry is not None:
        registry.register(endpoint_key)

    def decorator(seed: Callable[..., Any]) -> Callable[..., RequestBuilder]:
        @functools.wraps(seed)
        def factory(*args: Any, **kwargs: Any) -> RequestBuilder:
            source = source_resolver.resolve(endpoint_key)
            builder = RequestBuilder(
                endpoint_key,
                source.base_url,
                source.transport,
                registry=registry,
            )
            seed(builder, *args, **kwargs)
            return builder

        factory.endpoint_key = endpoint_key  # type: ignore[attr-defined]
        return factory

    return decorator
