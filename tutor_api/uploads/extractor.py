import logging
from contextlib import ExitStack
from dataclasses import dataclass, field
from typing import AsyncIterator, BinaryIO

import python_multipart as multipart
from python_multipart.exceptions import MultipartParseError
from python_multipart.multipart import parse_options_header

from ..config.config import UploadLimits
from ..errors import BadRequestBody, FileTooLarge, TooManyFiles, UnsupportedFileType
from ..neutral.files import ExtractedFile
from .storage import UploadStorage

logger = logging.getLogger(__name__)

DEFAULT_FILE_TYPE = "application/octet-stream"


@dataclass
class _FieldPart:
	name: str
	data: bytearray = field(default_factory=bytearray)


@dataclass
class _FilePart:
	name: str
	filename: str
	content_type: str
	stream: BinaryIO
	size: int = 0


class _SkippedPart:
	pass


class _MultipartCollector:
	def __init__(self, limits: UploadLimits, storage: UploadStorage, cleanup: ExitStack) -> None:
		self.limits = limits
		self.storage = storage
		self.cleanup = cleanup
		self.files: list[ExtractedFile] = []
		self.fields: dict[str, str] = {}
		self._headers: dict[bytes, bytes] = {}
		self._header_field = bytearray()
		self._header_value = bytearray()
		self._part: _FieldPart | _FilePart | _SkippedPart | None = None
		self._field_bytes = 0
		self.complete = False

	def callbacks(self) -> dict:
		return {
			"on_part_begin": self.on_part_begin,
			"on_part_data": self.on_part_data,
			"on_part_end": self.on_part_end,
			"on_header_field": self.on_header_field,
			"on_header_value": self.on_header_value,
			"on_header_end": self.on_header_end,
			"on_headers_finished": self.on_headers_finished,
			"on_end": self.on_end,
		}

	def on_part_begin(self) -> None:
		self._headers = {}
		self._part = None

	def on_header_field(self, data: bytes, start: int, end: int) -> None:
		self._header_field += data[start:end]

	def on_header_value(self, data: bytes, start: int, end: int) -> None:
		self._header_value += data[start:end]

	def on_header_end(self) -> None:
		self._headers[bytes(self._header_field).lower()] = bytes(self._header_value)
		self._header_field.clear()
		self._header_value.clear()

	def on_headers_finished(self) -> None:
		_, options = parse_options_header(self._headers.get(b"content-disposition", b""))
		if b"name" not in options:
			raise BadRequestBody("Multipart part is missing a Content-Disposition name")
		name = options[b"name"].decode("utf-8", "replace")
		raw_filename = options.get(b"filename")
		if raw_filename is None:
			self._part = _FieldPart(name)
			return
		filename = raw_filename.decode("utf-8", "replace")
		if not filename:
			# empty <input type=file>
			self._part = _SkippedPart()
			return
		if len(self.files) >= self.limits.max_file_count:
			raise TooManyFiles(self.limits.max_file_count)
		content_type = self._content_type()
		if content_type not in self.limits.allowed_mime_types:
			raise UnsupportedFileType(content_type, filename, sorted(self.limits.allowed_mime_types))
		stream = self.storage.open()
		self.cleanup.callback(stream.close)
		self._part = _FilePart(name, filename, content_type, stream)

	def on_part_data(self, data: bytes, start: int, end: int) -> None:
		chunk = data[start:end]
		part = self._part
		if isinstance(part, _FilePart):
			part.size += len(chunk)
			if part.size > self.limits.max_file_size_bytes:
				raise FileTooLarge(part.filename, self.limits.max_file_size_bytes, part.size)
			part.stream.write(chunk)
		elif isinstance(part, _FieldPart):
			self._field_bytes += len(chunk)
			if self._field_bytes > self.limits.max_field_bytes:
				raise BadRequestBody(f"Form fields exceed {self.limits.max_field_bytes} bytes")
			part.data += chunk

	def on_part_end(self) -> None:
		part = self._part
		if isinstance(part, _FilePart):
			part.stream.flush()
			part.stream.seek(0)
			self.files.append(
				ExtractedFile(
					field_name=part.name,
					filename=part.filename,
					content_type=part.content_type,
					size=part.size,
					_payload=part.stream,
				)
			)
		elif isinstance(part, _FieldPart):
			self.fields[part.name] = part.data.decode("utf-8", "replace")
		self._part = None

	def on_end(self) -> None:
		self.complete = True

	def _content_type(self) -> str:
		raw = self._headers.get(b"content-type")
		if not raw:
			return DEFAULT_FILE_TYPE
		value, _ = parse_options_header(raw)
		return value.decode("latin-1").lower() or DEFAULT_FILE_TYPE


class UploadExtractor:
	"""Streams a multipart body into ``ExtractedFile`` objects.

	Limits are enforced while bytes arrive, so an oversized file aborts the
	request before it is fully buffered. Storage handles are registered on
	``cleanup``; closing that stack releases every file opened here.
	"""

	def __init__(self, limits: UploadLimits) -> None:
		self.limits = limits

	async def extract(
		self,
		chunks: AsyncIterator[bytes],
		content_type: str,
		storage: UploadStorage,
		cleanup: ExitStack,
	) -> tuple[tuple[ExtractedFile, ...], dict[str, str]]:
		_, params = parse_options_header(content_type)
		boundary = params.get(b"boundary")
		if not boundary:
			raise BadRequestBody("Missing multipart boundary")
		collector = _MultipartCollector(self.limits, storage, cleanup)
		parser = multipart.MultipartParser(boundary, collector.callbacks())
		try:
			async for chunk in chunks:
				if chunk:
					parser.write(chunk)
			parser.finalize()
		except MultipartParseError as e:
			raise BadRequestBody(f"Malformed multipart body: {e}")
		# finalize() does not check for the closing boundary
		if not collector.complete:
			raise BadRequestBody("Incomplete multipart body")
		logger.debug(f"Extracted files {[f.describe() for f in collector.files]} and fields {sorted(collector.fields)}")
		return tuple(collector.files), collector.fields
