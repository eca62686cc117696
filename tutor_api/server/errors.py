import logging

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from ..errors import GENERIC_ERROR, ApiError, classify
from .routes import error_response, log_error

logger = logging.getLogger(__name__)


async def _api_error(request: Request, exc: Exception) -> JSONResponse:
	err = classify(exc)
	log_error(err, request.url.path)
	return error_response(err)


async def _http_error(request: Request, exc: StarletteHTTPException) -> JSONResponse:
	body = {"error": str(exc.detail) if exc.status_code < 500 else GENERIC_ERROR}
	return JSONResponse(body, status_code=exc.status_code, headers=getattr(exc, "headers", None))


async def _validation_error(request: Request, exc: RequestValidationError) -> JSONResponse:
	return JSONResponse({"error": "Invalid request", "details": str(exc.errors())[:300]}, status_code=400)


def install_error_handlers(app: FastAPI) -> None:
	"""Terminal error handling: every failure leaves as a JSON envelope."""
	app.add_exception_handler(ApiError, _api_error)
	app.add_exception_handler(StarletteHTTPException, _http_error)
	app.add_exception_handler(RequestValidationError, _validation_error)
	app.add_exception_handler(Exception, _api_error)
