import uuid

from starlette.requests import Request
from starlette.responses import FileResponse, Response

from ..neutral import CancellationToken, FileBody, PlatformKind
from ..uploads import MemoryStorage, UploadStorage
from .base import PlatformAdapter


class FrameworkAdapter(PlatformAdapter):
	kind = PlatformKind.FRAMEWORK_NATIVE

	def upload_storage(self) -> UploadStorage:
		return MemoryStorage(spill_dir=self.config.upload_dir)

	def cancellation(self, request: Request) -> CancellationToken:
		return CancellationToken(request.is_disconnected)

	def request_id(self, request: Request) -> str:
		return request.headers.get("x-request-id") or uuid.uuid4().hex

	def render_file(self, body: FileBody, status_code: int, headers: dict[str, str]) -> Response:
		return FileResponse(body.path, status_code=status_code, headers=headers, media_type=body.media_type)
