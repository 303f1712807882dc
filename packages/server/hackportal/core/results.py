"""
Action results: the uniform success/failure shape returned by the service layer.

Every service operation returns ``Ok(data)`` or ``Err(kind, message)``. Nothing
raises out of the service layer; the ``action`` decorator converts any
unexpected exception into a backend failure.
"""

from __future__ import annotations

import functools
from dataclasses import dataclass
from typing import Any, Awaitable, Callable, Generic, Optional, TypeVar, Union

import structlog

from hackportal_shared.schemas.common import ErrorKind

log = structlog.get_logger()

T = TypeVar("T")


@dataclass(frozen=True)
class Ok(Generic[T]):
    data: T


@dataclass(frozen=True)
class Err:
    kind: ErrorKind
    message: str
    field: Optional[str] = None


ActionResult = Union[Ok[T], Err]


# ---------------------------------------------------------------------------
# Error constructors (messages shown to users verbatim)
# ---------------------------------------------------------------------------

def auth_required() -> Err:
    return Err(ErrorKind.AUTH_REQUIRED, "Authentication required")


def no_org_selected() -> Err:
    return Err(ErrorKind.NO_ORG_SELECTED, "No organization selected")


def not_a_member() -> Err:
    return Err(ErrorKind.NOT_A_MEMBER, "Not a member of the selected organization")


def validation_failed(field: str, message: str) -> Err:
    return Err(ErrorKind.VALIDATION_FAILED, message, field=field)


def not_found(message: str) -> Err:
    return Err(ErrorKind.NOT_FOUND, message)


def backend(message: str) -> Err:
    return Err(ErrorKind.BACKEND, message)


class ActionError(Exception):
    """Raised inside an action to short-circuit with a failure result."""

    def __init__(self, err: Err):
        super().__init__(err.message)
        self.err = err


class RedirectRequired(Exception):
    """Raised by page-level guards that send the caller somewhere else."""

    def __init__(self, location: str):
        super().__init__(location)
        self.location = location


def action(fallback_message: str) -> Callable:
    """Wrap a service coroutine ``fn(ctx, ...)`` so that it always returns a result.

    ``ActionError`` becomes its ``Err``. Any other exception rolls back the
    request session, is logged, and becomes ``Err(backend)`` prefixed with
    ``fallback_message``.
    """

    def decorator(fn: Callable[..., Awaitable[Any]]) -> Callable[..., Awaitable[Any]]:
        @functools.wraps(fn)
        async def wrapper(ctx, *args, **kwargs):
            try:
                return await fn(ctx, *args, **kwargs)
            except ActionError as exc:
                return exc.err
            except Exception as exc:
                await ctx.session.rollback()
                log.exception("action.failed", action=fn.__name__)
                return backend(f"{fallback_message}: {exc}")

        return wrapper

    return decorator
