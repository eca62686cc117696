import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Any

from pydantic import BaseModel

from ..errors import ResponseAlreadySent
from .request import CancellationToken

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class JsonBody:
	data: Any


@dataclass(frozen=True)
class RawBody:
	content: bytes
	media_type: str | None = None


@dataclass(frozen=True)
class FileBody:
	path: Path
	media_type: str | None = None


ResponseBody = JsonBody | RawBody | FileBody


class NeutralResponse:
	"""Write-once response sink handed to handlers.

	Status and headers may be set until a body is sent. After the first
	``send_*``/``stream_file`` call every further write raises
	``ResponseAlreadySent``. Once the request is cancelled all writes are
	silently dropped.
	"""

	def __init__(self, cancellation: CancellationToken | None = None) -> None:
		self._cancellation = cancellation or CancellationToken()
		self._status_code = 200
		self._headers: dict[str, str] = {}
		self._body: ResponseBody | None = None

	@property
	def status_code(self) -> int:
		return self._status_code

	@property
	def headers(self) -> dict[str, str]:
		return dict(self._headers)

	@property
	def body(self) -> ResponseBody | None:
		return self._body

	@property
	def sent(self) -> bool:
		return self._body is not None

	@property
	def cancelled(self) -> bool:
		return self._cancellation.cancelled

	def set_status(self, code: int) -> "NeutralResponse":
		if self._writable("set_status"):
			self._status_code = int(code)
		return self

	def set_header(self, name: str, value: str) -> "NeutralResponse":
		if self._writable("set_header"):
			self._headers[name.lower()] = value
		return self

	def send_json(self, data: Any) -> None:
		if isinstance(data, BaseModel):
			data = data.model_dump(mode="json", exclude_none=True)
		self._send("send_json", JsonBody(data))

	def send_raw(self, content: bytes | str, media_type: str | None = None) -> None:
		if isinstance(content, str):
			content = content.encode("utf-8")
			media_type = media_type or "text/plain; charset=utf-8"
		self._send("send_raw", RawBody(bytes(content), media_type))

	def stream_file(self, path: str | Path, media_type: str | None = None) -> None:
		self._send("stream_file", FileBody(Path(path), media_type))

	def _send(self, operation: str, body: ResponseBody) -> None:
		if self._writable(operation):
			self._body = body

	def _writable(self, operation: str) -> bool:
		if self._cancellation.cancelled:
			logger.debug(f"Dropping {operation} after client disconnect")
			return False
		if self._body is not None:
			raise ResponseAlreadySent(operation)
		return True
