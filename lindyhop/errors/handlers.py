"""Failure Normalization

Maps whatever stopped the pipeline onto a Rejection so the error phase can
serialize it through the route's output format.
"""
from __future__ import annotations

from starlette.responses import JSONResponse

from lindyhop.logging import pipeline_logger

from .types import ErrorKind, FailedResult, Rejection

log = pipeline_logger()


def normalize_failure(failure: BaseException) -> Rejection:
    """Normalize a pipeline failure.

    - Rejection: used as is.
    - FailedResult (a plain value returned through ``Err``): payload passes
      through unchanged, status 500.
    - Any other exception is a fault: logged with traceback and replaced by
      a generic InternalError payload so internals never reach the client.
    """
    if isinstance(failure, Rejection):
        return failure

    if isinstance(failure, FailedResult):
        return Rejection(ErrorKind.INTERNAL_ERROR.http_status, failure.value)

    log.error(
        "pipeline_fault",
        error_type=type(failure).__name__,
        error_message=str(failure),
        exc_info=failure,
    )
    return Rejection(
        ErrorKind.INTERNAL_ERROR.http_status,
        {"error": ErrorKind.INTERNAL_ERROR.label, "message": str(failure)},
    )


def fallback_response(rejection: Rejection) -> JSONResponse:
    """Plain JSON response used when the route's own output cannot render."""
    return JSONResponse(status_code=rejection.status_code, content=rejection.payload)
