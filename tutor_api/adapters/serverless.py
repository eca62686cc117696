import logging
import mimetypes
import uuid
from typing import Any

from starlette.requests import Request
from starlette.responses import Response

from ..neutral import CancellationToken, FileBody, PlatformKind
from ..uploads import ScratchDirStorage, UploadStorage
from .base import PlatformAdapter

logger = logging.getLogger(__name__)


def invocation_event(request: Request) -> dict[str, Any]:
	return request.scope.get("aws.event") or {}


def invocation_context(request: Request) -> Any:
	return request.scope.get("aws.context")


class ServerlessAdapter(PlatformAdapter):
	"""Adapter for function invocations (Lambda proxy events, Vercel functions).

	Uploads go to the platform's single writable scratch directory, the time
	left in the invocation stands in for a disconnect signal, and file bodies
	are buffered because proxy integrations cannot stream.
	"""

	kind = PlatformKind.SERVERLESS_FUNCTION

	def upload_storage(self) -> UploadStorage:
		return ScratchDirStorage(self.config.serverless_scratch_dir)

	def cancellation(self, request: Request) -> CancellationToken:
		context = invocation_context(request)
		remaining = getattr(context, "get_remaining_time_in_millis", None)
		if remaining is None:
			return CancellationToken()
		margin = self.config.cancellation_margin_ms

		def out_of_time() -> bool:
			left = remaining()
			if left <= margin:
				logger.warning(f"Invocation has {left}ms left (margin {margin}ms); treating request as cancelled")
				return True
			return False

		return CancellationToken(out_of_time)

	def request_id(self, request: Request) -> str:
		context = invocation_context(request)
		aws_request_id = getattr(context, "aws_request_id", None)
		if aws_request_id:
			return str(aws_request_id)
		request_context = invocation_event(request).get("requestContext") or {}
		if request_context.get("requestId"):
			return str(request_context["requestId"])
		return request.headers.get("x-vercel-id") or request.headers.get("x-request-id") or uuid.uuid4().hex

	def render_file(self, body: FileBody, status_code: int, headers: dict[str, str]) -> Response:
		media_type = body.media_type or mimetypes.guess_type(body.path.name)[0] or "application/octet-stream"
		return Response(body.path.read_bytes(), status_code=status_code, headers=headers, media_type=media_type)
