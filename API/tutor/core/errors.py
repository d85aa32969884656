import logging
import uuid

from fastapi import Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException

from tutor.core.cors import CORS_HEADERS

logger = logging.getLogger(__name__)


class TutorError(Exception):
    """Base class for failures surfaced to the caller with a fixed status code."""

    status_code = 500
    default_message = "Unknown error"

    def __init__(self, message: str | None = None):
        super().__init__(message or self.default_message)
        self.message = message or self.default_message


class RateLimitedError(TutorError):
    """Upstream gateway answered 429."""

    status_code = 429
    default_message = "Rate limit exceeded"


class QuotaExhaustedError(TutorError):
    """Upstream gateway answered 402: the AI credits are used up."""

    status_code = 402
    default_message = "Payment required"


class UpstreamFailureError(TutorError):
    """Any other upstream status, transport failure or malformed upstream payload."""

    status_code = 500
    default_message = "AI gateway error"


class StreamTruncatedError(TutorError):
    """Raised client-side when an event stream ends without its [DONE] marker."""

    status_code = 502
    default_message = "Stream ended before completion"


def get_request_id(request: Request) -> str:
    return getattr(request.state, "request_id", "unknown")


def error_response(
    request: Request,
    *,
    message: str,
    status_code: int,
    details=None,
) -> JSONResponse:
    # Body is exactly {"error": ...}; the request id travels in the x-request-id header.
    payload = {"error": message}
    if details is not None:
        payload["details"] = details
    headers = dict(CORS_HEADERS)
    request_id = get_request_id(request)
    if request_id != "unknown":
        headers["x-request-id"] = request_id
    return JSONResponse(status_code=status_code, content=payload, headers=headers)


async def tutor_exception_handler(request: Request, exc: TutorError):
    if exc.status_code >= 500:
        logger.error("Request failed | request_id=%s | %s", get_request_id(request), exc.message)
    else:
        logger.warning("Request rejected upstream | request_id=%s | %s", get_request_id(request), exc.message)
    return error_response(request, message=exc.message, status_code=exc.status_code)


async def http_exception_handler(request: Request, exc: HTTPException):
    return error_response(request, message=str(exc.detail), status_code=exc.status_code)


async def validation_exception_handler(request: Request, exc: RequestValidationError):
    return error_response(
        request,
        message="Request validation failed",
        status_code=422,
        details=jsonable_errors(exc),
    )


def jsonable_errors(exc: RequestValidationError) -> list[dict]:
    # ctx may hold the raw exception object, which JSONResponse cannot encode.
    cleaned = []
    for err in exc.errors():
        item = {k: v for k, v in err.items() if k in ("type", "loc", "msg")}
        item["loc"] = [str(part) for part in item.get("loc", ())]
        cleaned.append(item)
    return cleaned


async def unhandled_exception_handler(request: Request, exc: Exception):
    # Served by ServerErrorMiddleware, outside every http middleware, so error_response
    # carries the CORS and request-id headers itself.
    logger.exception("Unhandled exception | request_id=%s", get_request_id(request), exc_info=exc)
    return error_response(
        request,
        message=str(exc) or "Internal server error",
        status_code=500,
    )


async def request_id_middleware(request: Request, call_next):
    incoming = request.headers.get("x-request-id")
    request.state.request_id = incoming or str(uuid.uuid4())
    response = await call_next(request)
    response.headers["x-request-id"] = request.state.request_id
    return response
