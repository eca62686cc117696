import json
import logging
from abc import ABC, abstractmethod
from contextlib import ExitStack
from http import HTTPMethod
from typing import Any
from urllib.parse import parse_qsl

from starlette.requests import Request
from starlette.responses import JSONResponse, Response

from ..config.config import AppConfig
from ..errors import BadRequestBody, MethodNotAllowed
from ..neutral import CancellationToken, FileBody, JsonBody, NeutralRequest, NeutralResponse, PlatformKind, RawBody
from ..uploads import UploadExtractor, UploadStorage

logger = logging.getLogger(__name__)

MULTIPART = "multipart/form-data"
URLENCODED = "application/x-www-form-urlencoded"
CLIENT_CLOSED_REQUEST = 499


def media_type_of(content_type: str | None) -> str:
	return (content_type or "").split(";", 1)[0].strip().lower()


def is_json(media_type: str) -> bool:
	return media_type == "application/json" or media_type.endswith("+json")


class PlatformAdapter(ABC):
	"""Translates one hosting model's request/response pair to the neutral model.

	Subclasses decide where uploads are stored, how cancellation is detected,
	how requests are identified and how a finished ``NeutralResponse`` is
	rendered. Everything else (method/header/query mapping and body decoding)
	is shared here.
	"""

	kind: PlatformKind

	def __init__(self, config: AppConfig, extractor: UploadExtractor | None = None) -> None:
		self.config = config
		self.extractor = extractor or UploadExtractor(config.upload_limits)

	@abstractmethod
	def upload_storage(self) -> UploadStorage:
		...

	@abstractmethod
	def cancellation(self, request: Request) -> CancellationToken:
		...

	@abstractmethod
	def request_id(self, request: Request) -> str:
		...

	@abstractmethod
	def render_file(self, body: FileBody, status_code: int, headers: dict[str, str]) -> Response:
		...

	async def adapt_request(self, request: Request, cleanup: ExitStack, expects_files: bool = False) -> NeutralRequest:
		method = self._method(request.method)
		content_type = request.headers.get("content-type")
		media_type = media_type_of(content_type)
		files: tuple = ()
		if expects_files and media_type == MULTIPART:
			files, body = await self.extractor.extract(request.stream(), content_type or "", self.upload_storage(), cleanup)
		else:
			body = self.decode_body(media_type, await request.body())
		return NeutralRequest(
			method=method,
			path=request.url.path,
			headers=request.headers,
			query=request.query_params,
			platform=self.kind,
			body=body,
			files=files,
			request_id=self.request_id(request),
			cancellation=self.cancellation(request),
		)

	def wrap_response(self, neutral_request: NeutralRequest) -> NeutralResponse:
		return NeutralResponse(neutral_request.cancellation)

	def render(self, response: NeutralResponse) -> Response:
		headers = response.headers
		body = response.body
		if body is None:
			if response.cancelled:
				return Response(status_code=CLIENT_CLOSED_REQUEST)
			return Response(status_code=response.status_code, headers=headers)
		if isinstance(body, JsonBody):
			return JSONResponse(body.data, status_code=response.status_code, headers=headers)
		if isinstance(body, RawBody):
			return Response(body.content, status_code=response.status_code, headers=headers, media_type=body.media_type)
		return self.render_file(body, response.status_code, headers)

	def decode_body(self, media_type: str, raw: bytes) -> Any:
		if not raw:
			return None
		if is_json(media_type):
			try:
				return json.loads(raw)
			except (UnicodeDecodeError, ValueError) as e:
				raise BadRequestBody(f"Invalid JSON: {e}")
		if media_type == URLENCODED:
			try:
				return dict(parse_qsl(raw.decode("utf-8"), keep_blank_values=True))
			except UnicodeDecodeError as e:
				raise BadRequestBody(f"Invalid form encoding: {e}")
		return raw

	@staticmethod
	def _method(raw: str) -> HTTPMethod:
		try:
			return HTTPMethod(raw.upper())
		except ValueError:
			raise MethodNotAllowed(raw, [m.value for m in HTTPMethod])
