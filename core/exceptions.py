"""
Business exception to HTTP mapping and global exception handlers.
"""
import traceback
import uuid

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette import status as http_status
from starlette.exceptions import HTTPException as StarletteHTTPException

from core.logging_config import get_logger
from core.response import error_response
from domain.common.exceptions import BusinessException
from shared.codes import BusinessCode


logger = get_logger(__name__)

_STATUS_BY_CODE = {
    BusinessCode.PARAM_ERROR: http_status.HTTP_400_BAD_REQUEST,
    BusinessCode.PARAM_VALIDATION_ERROR: http_status.HTTP_400_BAD_REQUEST,
    BusinessCode.BUSINESS_ERROR: http_status.HTTP_400_BAD_REQUEST,
    BusinessCode.RESOURCE_ALREADY_EXISTS: http_status.HTTP_409_CONFLICT,
    BusinessCode.NOT_FOUND: http_status.HTTP_404_NOT_FOUND,
    BusinessCode.INVALID_OPERATION: http_status.HTTP_400_BAD_REQUEST,
    BusinessCode.SEGMENT_VALIDATION_ERROR: http_status.HTTP_400_BAD_REQUEST,
    # Storage failures surface like any other rejected request
    BusinessCode.STORAGE_ERROR: http_status.HTTP_400_BAD_REQUEST,
    BusinessCode.SYSTEM_ERROR: http_status.HTTP_500_INTERNAL_SERVER_ERROR,
}


def business_code_to_http_status(code: int) -> int:
    """Map a business code to an HTTP status (400 when unknown)."""
    try:
        return _STATUS_BY_CODE.get(BusinessCode(code), http_status.HTTP_400_BAD_REQUEST)
    except ValueError:
        return http_status.HTTP_400_BAD_REQUEST


def _request_id(request: Request) -> str:
    return getattr(getattr(request, "state", object()), "request_id", None) or str(uuid.uuid4())


def register_exception_handlers(app: FastAPI):
    """
    Register the global exception handlers.

    Args:
        app: FastAPI application
    """

    @app.exception_handler(BusinessException)
    async def business_exception_handler(request: Request, exc: BusinessException):
        status_code = business_code_to_http_status(exc.code)
        logger.warning(
            "business_exception",
            error_type=exc.error_type,
            status=status_code,
            error=exc.message,
        )
        response = error_response(
            code=exc.code,
            message=exc.message,
            status=status_code,
            error_type=exc.error_type,
            details=exc.details,
            field=exc.field,
            path=request.url.path,
            request_id=_request_id(request),
        )
        return JSONResponse(status_code=status_code, content=response.model_dump(mode="json"))

    @app.exception_handler(RequestValidationError)
    async def validation_exception_handler(request: Request, exc: RequestValidationError):
        errors = exc.errors()
        first_error = errors[0] if errors else {}
        field = ".".join(str(loc) for loc in first_error.get("loc", [])[1:])

        logger.warning("request_validation_failed", errors=len(errors), field=field)
        response = error_response(
            code=BusinessCode.PARAM_VALIDATION_ERROR,
            message="Input validation failed. Please check the errors and try again.",
            status=http_status.HTTP_400_BAD_REQUEST,
            error_type="ValidationError",
            details={
                "errors": [
                    {"field": ".".join(str(loc) for loc in e.get("loc", [])[1:]), "message": e.get("msg")}
                    for e in errors
                ]
            },
            field=field or None,
            path=request.url.path,
            request_id=_request_id(request),
        )
        return JSONResponse(
            status_code=http_status.HTTP_400_BAD_REQUEST,
            content=response.model_dump(mode="json"),
        )

    @app.exception_handler(StarletteHTTPException)
    async def http_exception_handler(request: Request, exc: StarletteHTTPException):
        code_mapping = {
            404: BusinessCode.NOT_FOUND,
            409: BusinessCode.RESOURCE_ALREADY_EXISTS,
        }
        code = code_mapping.get(
            exc.status_code,
            BusinessCode.SYSTEM_ERROR if exc.status_code >= 500 else BusinessCode.PARAM_ERROR,
        )
        response = error_response(
            code=code,
            message=str(exc.detail),
            status=exc.status_code,
            error_type="HTTPError",
            path=request.url.path,
            request_id=_request_id(request),
        )
        return JSONResponse(
            status_code=exc.status_code,
            content=response.model_dump(mode="json"),
            headers=getattr(exc, "headers", None),
        )

    @app.exception_handler(Exception)
    async def global_exception_handler(request: Request, exc: Exception):
        request_id = _request_id(request)

        details = None
        if app.debug:
            details = {
                "exception": str(exc),
                "traceback": traceback.format_exc(),
            }

        logger.error(
            "unhandled_exception",
            request_id=request_id,
            error=str(exc),
            exc_info=True,
        )

        response = error_response(
            code=BusinessCode.SYSTEM_ERROR,
            message="An unexpected error occurred",
            status=http_status.HTTP_500_INTERNAL_SERVER_ERROR,
            error_type="SystemError",
            details=details,
            path=request.url.path,
            request_id=request_id,
        )
        return JSONResponse(
            status_code=http_status.HTTP_500_INTERNAL_SERVER_ERROR,
            content=response.model_dump(mode="json"),
        )
