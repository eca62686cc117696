from abc import ABC, abstractmethod
from typing import Any, Sequence

from ..models import ProcessingResult
from ..neutral.files import ExtractedFile


class ProcessingError(Exception):
	"""Collaborator failure whose ``public_message`` is safe to show clients."""

	def __init__(self, public_message: str, internal: str | None = None) -> None:
		super().__init__(internal or public_message)
		self.public_message = public_message


class Processor(ABC):
	@abstractmethod
	async def process(self, body: Any, files: Sequence[ExtractedFile]) -> ProcessingResult:
		...
