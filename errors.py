"""
JSON error envelope: ``{"message": str, "errors": [{"field", "message"}]}``.
"""
import logging
from typing import Any, Dict, Iterable, List

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from pydantic import ValidationError
from pymongo.errors import PyMongoError
from starlette.exceptions import HTTPException as StarletteHTTPException

logger = logging.getLogger(__name__)

VALIDATION_FAILED = "Validation failed"
SERVER_ERROR = "Server error"


def field_errors(errors: Iterable[Dict[str, Any]]) -> List[Dict[str, str]]:
    items = []
    for err in errors:
        loc = [str(part) for part in err.get("loc", ()) if part != "body"]
        items.append({"field": ".".join(loc) or "body", "message": err.get("msg", "Invalid value")})
    return items


def validation_response(errors: Iterable[Dict[str, Any]]) -> JSONResponse:
    return JSONResponse(status_code=400, content={"message": VALIDATION_FAILED, "errors": field_errors(errors)})


def register_exception_handlers(app: FastAPI) -> None:
    @app.exception_handler(StarletteHTTPException)
    async def http_error(request: Request, exc: StarletteHTTPException):
        return JSONResponse(status_code=exc.status_code, content={"message": exc.detail}, headers=exc.headers)

    @app.exception_handler(RequestValidationError)
    async def request_validation_error(request: Request, exc: RequestValidationError):
        return validation_response(exc.errors())

    @app.exception_handler(ValidationError)
    async def model_validation_error(request: Request, exc: ValidationError):
        return validation_response(exc.errors())

    @app.exception_handler(PyMongoError)
    async def storage_error(request: Request, exc: PyMongoError):
        logger.exception("Storage error on %s %s", request.method, request.url.path, exc_info=exc)
        return JSONResponse(status_code=500, content={"message": SERVER_ERROR})

    @app.exception_handler(Exception)
    async def unhandled_error(request: Request, exc: Exception):
        # Starlette re-raises after this response, so the server logs the traceback
        return JSONResponse(status_code=500, content={"message": SERVER_ERROR})
