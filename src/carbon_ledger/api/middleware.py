"""Custom middleware and exception handlers for API request/response processing."""

from typing import Callable, Dict, Optional

from fastapi import FastAPI, Request, Response, status
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import HTTPException, RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.types import ASGIApp

from ..core.enums import LedgerErrorCode
from ..domain.errors import LedgerError
from ..utils.logging_config import get_logger, log_exception

logger = get_logger('api')

LEDGER_ERROR_STATUS: Dict[LedgerErrorCode, int] = {
    LedgerErrorCode.NOT_AUTHORIZED: status.HTTP_403_FORBIDDEN,
    LedgerErrorCode.NOT_OWNER: status.HTTP_403_FORBIDDEN,
    LedgerErrorCode.TOKEN_NOT_FOUND: status.HTTP_404_NOT_FOUND,
    LedgerErrorCode.INVALID_URI: status.HTTP_422_UNPROCESSABLE_ENTITY,
    LedgerErrorCode.INVALID_BATCH_SIZE: status.HTTP_422_UNPROCESSABLE_ENTITY,
    LedgerErrorCode.INVALID_PAGE_REQUEST: status.HTTP_422_UNPROCESSABLE_ENTITY,
    LedgerErrorCode.BURNED_TOKEN: status.HTTP_409_CONFLICT,
    LedgerErrorCode.BURN_FAILED: status.HTTP_409_CONFLICT,
}

_DEFAULT_TITLES = {
    400: "Bad Request",
    401: "Unauthorized",
    403: "Forbidden",
    404: "Not Found",
    405: "Method Not Allowed",
    409: "Conflict",
    413: "Payload Too Large",
    422: "Unprocessable Entity",
    500: "Internal Server Error",
    503: "Service Unavailable",
}


def default_title(status_code: int) -> str:
    """Get default title for HTTP status codes."""
    return _DEFAULT_TITLES.get(status_code, "HTTP Error")


def problem_response(
    status_code: int,
    title: str,
    detail: Optional[str] = None,
    type_uri: Optional[str] = None,
    instance: Optional[str] = None,
    headers: Optional[Dict[str, str]] = None,
    **extra_fields,
) -> JSONResponse:
    """Create a JSON response in RFC 9457 Problem Details format."""
    problem = {
        "type": type_uri or f"https://httpstatuses.com/{status_code}",
        "title": title,
        "status": status_code,
    }

    if detail:
        problem["detail"] = detail
    if instance:
        problem["instance"] = instance

    problem.update(extra_fields)

    return JSONResponse(
        status_code=status_code,
        content=problem,
        media_type="application/problem+json",
        headers=headers,
    )


class ProblemDetailsException(HTTPException):
    """Enhanced HTTPException that includes RFC 9457 Problem Details."""

    def __init__(
        self,
        status_code: int,
        title: str,
        detail: Optional[str] = None,
        type_uri: Optional[str] = None,
        instance: Optional[str] = None,
        **extra_fields,
    ):
        super().__init__(status_code=status_code, detail=detail)
        self.title = title
        self.type_uri = type_uri or f"https://httpstatuses.com/{status_code}"
        self.instance = instance
        self.extra_fields = extra_fields


class ProblemDetailsMiddleware(BaseHTTPMiddleware):
    """Converts exceptions escaping the inner middleware into Problem Details.

    Must be the outermost custom middleware so it also sees what the
    request size limit raises.
    """

    def __init__(self, app: ASGIApp):
        super().__init__(app)

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        try:
            return await call_next(request)
        except ProblemDetailsException as exc:
            return problem_response(
                status_code=exc.status_code,
                title=exc.title,
                detail=exc.detail,
                type_uri=exc.type_uri,
                instance=exc.instance or str(request.url),
                **exc.extra_fields,
            )
        except HTTPException as exc:
            return problem_response(
                status_code=exc.status_code,
                title=default_title(exc.status_code),
                detail=exc.detail,
                instance=str(request.url),
            )
        except Exception as exc:
            log_exception('api', exc, {'method': request.method, 'path': request.url.path})
            return problem_response(
                status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
                title="Internal Server Error",
                detail="An unexpected error occurred",
                instance=str(request.url),
            )


class RequestSizeLimitMiddleware(BaseHTTPMiddleware):
    """Middleware to enforce request size limits."""

    def __init__(
        self,
        app: ASGIApp,
        single_request_limit: int = 16 * 1024,  # 16KB
        batch_request_limit: int = 64 * 1024,  # 64KB
    ):
        super().__init__(app)
        self.single_request_limit = single_request_limit
        self.batch_request_limit = batch_request_limit

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        content_length = request.headers.get("content-length")
        if content_length:
            try:
                length = int(content_length)
            except ValueError:
                raise ProblemDetailsException(
                    status_code=status.HTTP_400_BAD_REQUEST,
                    title="Bad Request",
                    detail="Invalid Content-Length header",
                )

            is_batch = request.url.path.endswith(":batch")
            limit = self.batch_request_limit if is_batch else self.single_request_limit
            if length > limit:
                logger.warning(
                    f"Rejected {request.method} {request.url.path}: {length} bytes > {limit}"
                )
                raise ProblemDetailsException(
                    status_code=status.HTTP_413_REQUEST_ENTITY_TOO_LARGE,
                    title="Request Entity Too Large",
                    detail=f"Request size {length} bytes exceeds limit of {limit} bytes",
                    type_uri="https://datatracker.ietf.org/doc/html/rfc7231#section-6.5.11",
                )

        return await call_next(request)


async def ledger_error_handler(request: Request, exc: LedgerError) -> JSONResponse:
    status_code = LEDGER_ERROR_STATUS.get(exc.code, status.HTTP_400_BAD_REQUEST)
    return problem_response(
        status_code=status_code,
        title=default_title(status_code),
        detail=exc.message,
        type_uri=f"urn:carbon-ledger:error:{exc.code.value}",
        instance=str(request.url),
        code=exc.code.value,
        token_id=exc.token_id,
    )


async def http_exception_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    return problem_response(
        status_code=exc.status_code,
        title=default_title(exc.status_code),
        detail=str(exc.detail) if exc.detail else None,
        instance=str(request.url),
        headers=getattr(exc, "headers", None),
    )


async def validation_exception_handler(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    return problem_response(
        status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
        title="Validation Error",
        detail="Request validation failed",
        instance=str(request.url),
        errors=jsonable_encoder(exc.errors()),
    )


def register_exception_handlers(app: FastAPI) -> None:
    """Route ledger, HTTP and validation errors through Problem Details."""
    app.add_exception_handler(LedgerError, ledger_error_handler)
    app.add_exception_handler(StarletteHTTPException, http_exception_handler)
    app.add_exception_handler(RequestValidationError, validation_exception_handler)
