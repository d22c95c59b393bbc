import structlog
from fastapi import Request, HTTPException
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from exceptions.custom_exceptions import BaseAppException
from utils.response_helpers import error_response

logger = structlog.get_logger(__name__)

def setup_exception_handlers(app):

    @app.exception_handler(HTTPException)
    async def http_exception_handler(request: Request, exc: HTTPException):
        logger.warning("HTTPException", path=request.url.path, detail=exc.detail)
        return error_response(exc.detail, status_code=exc.status_code)

    @app.exception_handler(RequestValidationError)
    async def validation_exception_handler(request: Request, exc: RequestValidationError):
        logger.warning("Validation error", path=request.url.path, errors=exc.errors())
        return JSONResponse(
            content={
                "success": False,
                "data": None,
                "error": "Invalid or missing request fields",
                "details": jsonable_errors(exc.errors()),
            },
            status_code=422
        )

    @app.exception_handler(BaseAppException)
    async def app_exception_handler(request: Request, exc: BaseAppException):
        logger.warning(
            "Application error",
            path=request.url.path,
            error=exc.message,
            status=exc.status_code,
        )
        return error_response(exc.message, status_code=exc.status_code, details=exc.details)

    @app.exception_handler(Exception)
    async def global_exception_handler(request: Request, exc: Exception):
        logger.error("Unhandled exception", path=request.url.path, error=str(exc), exc_info=True)
        return error_response("Something went wrong on the server", status_code=500)


def jsonable_errors(errors: list) -> list:
    # pydantic error contexts can carry exception instances
    return [
        {key: value for key, value in err.items() if key in ("type", "loc", "msg")}
        for err in errors
    ]
