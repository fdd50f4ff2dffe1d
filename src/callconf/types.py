"""Small value types shared across the request pipeline."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, ClassVar, Generic, Mapping, Tuple, TypeVar, Union

T = TypeVar("T")
E = TypeVar("E", bound=BaseException)

EndpointKey = Union[str, Tuple[str, ...]]


@dataclass(frozen=True)
class Ok(Generic[T]):
    """Successful outcome carrying a value and optional metadata."""

    value: T
    meta: Mapping[str, Any] = field(default_factory=dict)
    ok: ClassVar[bool] = True


@dataclass(frozen=True)
class Err(Generic[E]):
    """Failed outcome carrying the error and optional metadata."""

    error: E
    meta: Mapping[str, Any] = field(default_factory=dict)
    ok: ClassVar[bool] = False


Result = Union[Ok[T], Err[E]]


@dataclass(frozen=True)
class Abort:
    """Pre-call verdict that stops the chain and fails the call."""

    reason: str


class _Sentinel:
    def __init__(self, name: str) -> None:
        self._name = name

    def __repr__(self) -> str:
        return self._name

    def __bool__(self) -> bool:
        return False


# Pre-call verdict; returning None means the same thing.
CONTINUE: Any = _Sentinel("CONTINUE")

# Marks a scalar field that was never set, as opposed to set to None.
UNSET: Any = _Sentinel("UNSET")
