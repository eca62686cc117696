import tempfile
from abc import ABC, abstractmethod
from pathlib import Path
from typing import BinaryIO


class UploadStorage(ABC):
	"""Where upload bytes live for the duration of one request.

	Handles returned by ``open`` delete their backing storage when closed.
	"""

	@abstractmethod
	def open(self) -> BinaryIO:
		...


class MemoryStorage(UploadStorage):
	def __init__(self, spool_bytes: int = 1024 * 1024, spill_dir: str | None = None) -> None:
		self.spool_bytes = spool_bytes
		self.spill_dir = spill_dir

	def open(self) -> BinaryIO:
		if self.spill_dir:
			Path(self.spill_dir).mkdir(parents=True, exist_ok=True)
		return tempfile.SpooledTemporaryFile(max_size=self.spool_bytes, dir=self.spill_dir)  # type: ignore[return-value]


class ScratchDirStorage(UploadStorage):
	def __init__(self, scratch_dir: str) -> None:
		self.scratch_dir = Path(scratch_dir)

	def open(self) -> BinaryIO:
		self.scratch_dir.mkdir(parents=True, exist_ok=True)
		return tempfile.NamedTemporaryFile(dir=self.scratch_dir, prefix="upload-", suffix=".part", delete=True)  # type: ignore[return-value]
