"""Report error taxonomy and the FastAPI handlers that render it.

Lookup misses are deliberately absent: an id with no reference row resolves
to "Unknown" during enrichment and is never raised.
"""

import logging

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

logger = logging.getLogger(__name__)

INTERNAL_ERROR = "Internal Server Error"


class ReportError(Exception):
    status_code = 500


class ValidationError(ReportError):
    """A required query parameter is missing or malformed."""

    status_code = 400


class UpstreamQueryError(ReportError):
    """A source database query failed or timed out."""

    def __init__(self, source: str, cause: BaseException | None = None):
        super().__init__(f"{source} query failed")
        self.source = source
        self.cause = cause


async def _validation_error(request: Request, exc: ValidationError):
    return JSONResponse(status_code=400, content={"error": str(exc)})


async def _request_validation_error(request: Request, exc: RequestValidationError):
    problems = []
    for err in exc.errors():
        field = ".".join(str(p) for p in err.get("loc", ())[1:]) or "request"
        problems.append(f"{field}: {err.get('msg', 'invalid value')}")
    return JSONResponse(status_code=400, content={"error": "; ".join(problems)})


async def _upstream_error(request: Request, exc: UpstreamQueryError):
    logger.error("%s %s aborted: %s", request.method, request.url.path, exc, exc_info=exc.cause)
    return JSONResponse(status_code=500, content={"error": INTERNAL_ERROR})


def install_error_handlers(app: FastAPI) -> None:
    app.add_exception_handler(ValidationError, _validation_error)
    app.add_exception_handler(RequestValidationError, _request_validation_error)
    app.add_exception_handler(UpstreamQueryError, _upstream_error)
