from dataclasses import dataclass, field
from typing import BinaryIO, Iterator


@dataclass(frozen=True)
class ExtractedFile:
	field_name: str
	filename: str
	content_type: str
	size: int
	_payload: BinaryIO = field(repr=False, compare=False)

	def read(self) -> bytes:
		self._payload.seek(0)
		return self._payload.read()

	def iter_chunks(self, chunk_size: int = 64 * 1024) -> Iterator[bytes]:
		self._payload.seek(0)
		while True:
			chunk = self._payload.read(chunk_size)
			if not chunk:
				return
			yield chunk

	def describe(self) -> dict[str, object]:
		return {"name": self.filename, "type": self.content_type, "size": self.size, "field": self.field_name}
