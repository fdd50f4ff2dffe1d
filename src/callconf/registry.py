"""Process-wide registry of per-endpoint interceptors and defaults."""

from __future__ import annotations

import logging
import threading
from dataclasses import dataclass, replace
from types import MappingProxyType
from typing import Any, Callable, Iterator, Mapping

from .interceptors import (
    EMPTY_INTERCEPTORS,
    InterceptorSet,
    PostCallHook,
    PreCallHook,
)
from .state import EMPTY_DEFAULTS, GlobalDefaults
from .types import EndpointKey

logger = logging.getLogger(__name__)


def validate_endpoint_key(endpoint_key: EndpointKey) -> EndpointKey:
    if isinstance(endpoint_key, str):
        if not endpoint_key:
            raise ValueError("endpoint key must be non-empty")
        return endpoint_key
    if isinstance(endpoint_key, tuple) and endpoint_key:
        if all(isinstance(part, str) for part in endpoint_key):
            return endpoint_key
    raise TypeError(
        f"endpoint key must be a str or a non-empty tuple of str, "
        f"got {endpoint_key!r}"
    )


@dataclass(frozen=True)
class RegistryEntry:
    """Immutable snapshot of the global state for one endpoint."""

    endpoint_key: EndpointKey
    interceptors: InterceptorSet = EMPTY_INTERCEPTORS
    defaults: GlobalDefaults = EMPTY_DEFAULTS


class GlobalRegistry:
    """Registry of global interceptors and defaults keyed by endpoint.

    Entries are immutable and the entry table is swapped wholesale on every
    write, so a reader sees either the state before a write or after it.
    Reads never lock; writes are serialized.
    """

    def __init__(self) -> None:
        self._entries: Mapping[EndpointKey, RegistryEntry] = (
            MappingProxyType({})
        )
        self._write_lock = threading.Lock()

    def __contains__(self, endpoint_key: object) -> bool:
        return endpoint_key in self._entries

    def __len__(self) -> int:
        return len(self._entries)

    def keys(self) -> Iterator[EndpointKey]:
        return iter(tuple(self._entries))

    def entry(self, endpoint_key: EndpointKey) -> RegistryEntry | None:
        """Return the current snapshot for ``endpoint_key``, if any."""
        return self._entries.get(endpoint_key)

    def register(self, endpoint_key: EndpointKey) -> RegistryEntry:
        """Create an empty entry for ``endpoint_key`` unless one exists."""
        validate_endpoint_key(endpoint_key)
        existing = self._entries.get(endpoint_key)
        if existing is not None:
            return existing
        return self._update(endpoint_key, lambda entry: entry)

    def add_global_interceptor(
        self,
        endpoint_key: EndpointKey,
        pre_call: PreCallHook | None = None,
        post_call: PostCallHook | None = None,
    ) -> None:
        """Append hooks that run for every call to ``endpoint_key``."""
        validate_endpoint_key(endpoint_key)
        self._update(
            endpoint_key,
            lambda entry: replace(
                entry,
                interceptors=entry.interceptors.extended(pre_call, post_call),
            ),
        )

    def set_global_defaults(
        self,
        endpoint_key: EndpointKey,
        defaults: GlobalDefaults | None = None,
        **fields: Any,
    ) -> None:
        """Overlay partial defaults for ``endpoint_key``.

        Pass either a ``GlobalDefaults`` instance or its fields as keyword
        arguments. Successive calls accumulate, newer values winning.
        """
        validate_endpoint_key(endpoint_key)
        if defaults is not None and fields:
            raise TypeError("pass either defaults or keyword fields, not both")
        newer = defaults if defaults is not None else GlobalDefaults(**fields)
        self._update(
            endpoint_key,
            lambda entry: replace(
                entry, defaults=entry.defaults.overlay(newer)
            ),
        )

    def clear(self, endpoint_key: EndpointKey | None = None) -> None:
        """Drop one entry, or every entry when no key is given."""
        with self._write_lock:
            if endpoint_key is None:
                self._entries = MappingProxyType({})
                logger.debug("Cleared all registry entries")
                return
            entries = dict(self._entries)
            entries.pop(endpoint_key, None)
            self._entries = MappingProxyType(entries)
            logger.debug("Cleared registry entry %r", endpoint_key)

    def _update(
        self,
        endpoint_key: EndpointKey,
        change: Callable[[RegistryEntry], RegistryEntry],
    ) -> RegistryEntry:
        with self._write_lock:
            current = self._entries.get(endpoint_key) or RegistryEntry(
                endpoint_key
            )
            updated = change(current)
            entries = dict(self._entries)
            entries[endpoint_key] = updated
            self._entries = MappingProxyType(entries)
        logger.debug("Updated registry entry %r", endpoint_key)
        return updated
