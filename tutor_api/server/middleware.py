import logging

from starlette.datastructures import Headers
from starlette.types import ASGIApp, Message, Receive, Scope, Send

from ..errors import PayloadTooLarge

logger = logging.getLogger(__name__)

STREAMED_MEDIA_TYPES = frozenset({"multipart/form-data"})


class BodySizeLimitMiddleware:
	"""Caps JSON/form request bodies.

	Multipart uploads are exempt; upload extraction enforces its own per-file
	limits. ``PayloadTooLarge`` is raised on the first body read when the
	declared ``Content-Length`` is over the limit, and otherwise once the
	running total crosses it. Requests refused before their body is read
	(unknown route, wrong method) keep their own status.
	"""

	def __init__(self, app: ASGIApp, max_body_bytes: int) -> None:
		self.app = app
		self.max_body_bytes = max_body_bytes

	async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
		if scope["type"] != "http":
			await self.app(scope, receive, send)
			return
		headers = Headers(scope=scope)
		media_type = headers.get("content-type", "").split(";", 1)[0].strip().lower()
		if media_type in STREAMED_MEDIA_TYPES:
			await self.app(scope, receive, send)
			return

		declared = headers.get("content-length", "")
		oversized = declared.isdigit() and int(declared) > self.max_body_bytes
		received = 0

		async def limited_receive() -> Message:
			nonlocal received
			if oversized:
				logger.warning(f"Refusing {scope.get('path')}: declared body of {declared} bytes exceeds {self.max_body_bytes}")
				raise PayloadTooLarge(self.max_body_bytes)
			message = await receive()
			if message["type"] == "http.request":
				received += len(message.get("body", b""))
				if received > self.max_body_bytes:
					raise PayloadTooLarge(self.max_body_bytes)
			return message

		await self.app(scope, limited_receive, send)
