import logging
from contextlib import ExitStack
from typing import Awaitable, Callable, Sequence

from starlette.requests import Request
from starlette.responses import JSONResponse, Response

from ..adapters import PlatformAdapter
from ..errors import ApiError, ErrorKind, MethodNotAllowed, classify
from ..neutral import NeutralRequest, NeutralResponse

logger = logging.getLogger(__name__)

NeutralHandler = Callable[[NeutralRequest, NeutralResponse], Awaitable[None]]


def error_response(err: ApiError) -> JSONResponse:
	return JSONResponse(err.envelope(), status_code=err.status_code)


def log_error(err: ApiError, path: str) -> None:
	if err.kind is ErrorKind.UNCLASSIFIED:
		logger.error(f"Unhandled error on {path}", exc_info=err.__cause__ or err)
	elif err.kind.client_actionable:
		logger.warning(f"{err.kind.value} on {path}: {err.message} {err.payload}")
	else:
		logger.error(f"{err.kind.value} on {path}: {err.message}", exc_info=err.__cause__)


def neutral_endpoint(
	handler: NeutralHandler,
	adapter: PlatformAdapter,
	expects_files: bool = False,
	allowed_methods: Sequence[str] | None = None,
) -> Callable[[Request], Awaitable[Response]]:
	"""Bind a neutral handler to a Starlette endpoint.

	This is the route boundary: the adapter builds the neutral pair, the
	handler runs, and any failure becomes a JSON error response. Methods
	outside ``allowed_methods`` are refused before the body is read. Upload
	storage opened during extraction is released when the ``ExitStack``
	closes, whatever the outcome.
	"""

	async def endpoint(request: Request) -> Response:
		with ExitStack() as cleanup:
			try:
				if allowed_methods is not None and request.method not in allowed_methods:
					raise MethodNotAllowed(request.method, list(allowed_methods))
				neutral_req = await adapter.adapt_request(request, cleanup, expects_files=expects_files)
				neutral_res = adapter.wrap_response(neutral_req)
				await handler(neutral_req, neutral_res)
			except Exception as e:
				err = classify(e)
				log_error(err, request.url.path)
				return error_response(err)
			return adapter.render(neutral_res)

	endpoint.__name__ = getattr(handler, "__name__", endpoint.__name__)
	return endpoint
