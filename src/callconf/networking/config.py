"""Session-wide settings for the requests-backed HttpClient."""

from __future__ import annotations

from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Mapping


def _empty_headers() -> Mapping[str, str]:
    return MappingProxyType({})


def _require_positive(name: str, value: float | None) -> None:
    if value is not None and value <= 0:
        raise ValueError(f"{name} must be > 0 when provided")


@dataclass(frozen=True)
class HttpClientConfig:
    """Settings shared by every call a client sends.

    Per-call values from the merged request configuration (headers, query
    params, timeout) are applied on top of these.
    """

    user_agent: str | None = None
    default_headers: Mapping[str, str] = field(default_factory=_empty_headers)
    verify_tls: bool = True
    timeout_seconds: float | None = None
    connect_timeout_seconds: float | None = None
    read_timeout_seconds: float | None = None
    raise_for_status: bool = False

    def __post_init__(self) -> None:
        if (self.connect_timeout_seconds is None) != (
            self.read_timeout_seconds is None
        ):
            raise ValueError(
                "connect_timeout_seconds and read_timeout_seconds "
                "must be set together"
            )
        for name in (
            "timeout_seconds",
            "connect_timeout_seconds",
            "read_timeout_seconds",
        ):
            _require_positive(name, getattr(self, name))

        # Copy so later changes to the caller's dict do not leak in.
        object.__setattr__(
            self,
            "default_headers",
            MappingProxyType(dict(self.default_headers)),
        )
