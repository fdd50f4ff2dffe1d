"""Pre-call and post-call interceptor chains.

A pre-call hook sees the merged configuration before dispatch and may veto
the call. A post-call hook sees the settled outcome and may replace it.
Hooks may be plain callables or coroutine functions.
"""

from __future__ import annotations

import inspect
import logging
from dataclasses import dataclass
from typing import Any, Awaitable, Callable, Iterable, Union

from .errors import CallAbortedError
from .state import MergedConfig
from .types import CONTINUE, Abort, Err, Ok, Result

logger = logging.getLogger(__name__)

PreCallVerdict = Union[Abort, None]
PreCallHook = Callable[
    [MergedConfig], Union[PreCallVerdict, Awaitable[PreCallVerdict]]
]
PostCallHook = Callable[[Result[Any, Exception], MergedConfig], Any]


def _hook_name(hook: Callable[..., Any]) -> str:
    return getattr(hook, "__qualname__", None) or repr(hook)


async def settle(value: Any) -> Any:
    """Await ``value`` if it is awaitable, else return it as is."""
    if inspect.isawaitable(value):
        return await value
    return value


@dataclass(frozen=True)
class InterceptorSet:
    """Ordered pre-call and post-call hooks of one scope."""

    pre_call: tuple[PreCallHook, ...] = ()
    post_call: tuple[PostCallHook, ...] = ()

    def extended(
        self,
        pre_call: PreCallHook | None = None,
        post_call: PostCallHook | None = None,
    ) -> InterceptorSet:
        """Return a copy with the given hooks appended."""
        validate_hooks(pre_call, post_call)
        pre = self.pre_call
        post = self.post_call
        if pre_call is not None:
            pre += (pre_call,)
        if post_call is not None:
            post += (post_call,)
        return InterceptorSet(pre_call=pre, post_call=post)


EMPTY_INTERCEPTORS = InterceptorSet()


def validate_hooks(
    pre_call: PreCallHook | None, post_call: PostCallHook | None
) -> None:
    """Reject registrations that carry no hook or a non-callable one."""
    if pre_call is None and post_call is None:
        raise ValueError("at least one of pre_call or post_call is required")
    for label, hook in (("pre_call", pre_call), ("post_call", post_call)):
        if hook is not None and not callable(hook):
            raise TypeError(f"{label} must be callable, got {hook!r}")


async def run_pre_call(
    hooks: Iterable[PreCallHook], config: MergedConfig
) -> None:
    """Run pre-call hooks in order; the first abort wins.

    Raises:
        CallAbortedError: A hook returned ``Abort`` or raised it directly.
        TypeError: A hook returned something other than a verdict.
    """
    for hook in hooks:
        try:
            verdict = await settle(hook(config))
        except CallAbortedError as exc:
            logger.info(
                "Call to %s aborted by %s: %s",
                config.endpoint_key,
                _hook_name(hook),
                exc.reason,
            )
            raise
        if isinstance(verdict, Abort):
            logger.info(
                "Call to %s aborted by %s: %s",
                config.endpoint_key,
                _hook_name(hook),
                verdict.reason,
            )
            raise CallAbortedError(verdict.reason)
        if verdict is not None and verdict is not CONTINUE:
            raise TypeError(
                f"pre-call hook {_hook_name(hook)} returned {verdict!r}; "
                "expected None, CONTINUE or Abort"
            )


async def run_post_call(
    hooks: Iterable[PostCallHook],
    outcome: Result[Any, Exception],
    config: MergedConfig,
) -> Result[Any, Exception]:
    """Thread the settled outcome through post-call hooks.

    A hook that raises ends the chain and its exception becomes the outcome.
    Only an explicit ``Ok`` turns a failure into a success.
    """
    for hook in hooks:
        try:
            returned = await settle(hook(outcome, config))
        except Exception as exc:
            logger.debug(
                "Post-call hook %s for %s raised %s",
                _hook_name(hook),
                config.endpoint_key,
                type(exc).__name__,
            )
            return Err(exc, meta=outcome.meta)
        if returned is None:
            continue
        if isinstance(returned, (Ok, Err)):
            outcome = returned
        elif outcome.ok:
            outcome = Ok(returned, meta=outcome.meta)
        else:
            logger.warning(
                "Post-call hook %s for %s returned a plain value on a failed "
                "call; return Ok(value) to recover",
                _hook_name(hook),
                config.endpoint_key,
            )
    return outcome
