"""
HTTP mapping for action results.

Failure body: ``{"error": {"code", "message", "field", "status"}}``.
"""

from __future__ import annotations

from typing import TypeVar

from fastapi import Request
from fastapi.responses import JSONResponse, RedirectResponse

from hackportal.core.results import ActionResult, Err, RedirectRequired
from hackportal_shared.schemas.common import ErrorDetail, ErrorKind, ErrorResponse

T = TypeVar("T")

STATUS_BY_KIND = {
    ErrorKind.AUTH_REQUIRED: 401,
    ErrorKind.NO_ORG_SELECTED: 409,
    ErrorKind.NOT_A_MEMBER: 403,
    ErrorKind.VALIDATION_FAILED: 422,
    ErrorKind.NOT_FOUND: 404,
    ErrorKind.BACKEND: 500,
}


class ActionFailed(Exception):
    """Carries a failed result out of a route handler."""

    def __init__(self, err: Err, status_code: int | None = None):
        super().__init__(err.message)
        self.err = err
        self.status_code = status_code or STATUS_BY_KIND[err.kind]


def unwrap(result: ActionResult[T]) -> T:
    """Data of a successful result; raises ActionFailed otherwise."""
    if isinstance(result, Err):
        raise ActionFailed(result)
    return result.data


def error_response(err: Err, status_code: int) -> JSONResponse:
    body = ErrorResponse(
        error=ErrorDetail(code=err.kind, message=err.message, field=err.field, status=status_code)
    )
    return JSONResponse(status_code=status_code, content=body.model_dump(mode="json"))


async def action_failed_handler(request: Request, exc: ActionFailed) -> JSONResponse:
    return error_response(exc.err, exc.status_code)


async def redirect_required_handler(request: Request, exc: RedirectRequired) -> RedirectResponse:
    return RedirectResponse(exc.location, status_code=303)
