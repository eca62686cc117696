import logging
import re
from typing import Any, Sequence

from ..models import Document, DocumentMetadata, DocumentPage, ProcessingResult, TextStatistics
from ..neutral.files import ExtractedFile
from .base import ProcessingError, Processor

logger = logging.getLogger(__name__)

_SIGNATURES: dict[str, tuple[bytes, ...]] = {
	"image/jpeg": (b"\xff\xd8\xff",),
	"image/png": (b"\x89PNG\r\n\x1a\n",),
}


def text_statistics(text: str) -> TextStatistics:
	stripped = text.strip()
	if not stripped:
		return TextStatistics(characters=len(text))
	return TextStatistics(
		words=len(stripped.split()),
		characters=len(text),
		sentences=len([s for s in re.split(r"[.!?]+", text) if s.strip()]),
		paragraphs=len([p for p in re.split(r"\n\s*\n", text) if p.strip()]),
	)


def _pages_label(count: int) -> str:
	return "page" if count == 1 else "pages"


class DocumentProcessor(Processor):
	"""Default collaborator: turns text or page images into a ``Document``.

	No OCR backend is wired in, so image pages carry metadata only.
	"""

	async def process(self, body: Any, files: Sequence[ExtractedFile]) -> ProcessingResult:
		text = body.get("text") if isinstance(body, dict) else None
		if isinstance(text, str) and text.strip():
			return self._from_text(text)
		return self._from_images(files)

	def _from_text(self, text: str) -> ProcessingResult:
		stats = text_statistics(text)
		document = Document(
			pages=[DocumentPage(page_number=1, content=text, confidence=1.0)],
			metadata=DocumentMetadata(source="text", total_pages=1, confidence=1.0, statistics=stats),
		)
		return ProcessingResult(document=document, message=f"Text processed successfully ({stats.words} words).")

	def _from_images(self, files: Sequence[ExtractedFile]) -> ProcessingResult:
		if not files:
			raise ProcessingError("No pages to process")
		pages = []
		for index, upload in enumerate(files, start=1):
			self._check_signature(upload)
			pages.append(
				DocumentPage(
					page_number=index,
					original_filename=upload.filename,
					content_type=upload.content_type,
					size=upload.size,
				)
			)
		count = len(pages)
		document = Document(pages=pages, metadata=DocumentMetadata(source="images", total_pages=count))
		logger.info(f"Built image document with {count} {_pages_label(count)}")
		return ProcessingResult(
			document=document,
			message=f"{count} {_pages_label(count)} uploaded successfully. Text extraction is not configured.",
		)

	@staticmethod
	def _check_signature(upload: ExtractedFile) -> None:
		signatures = _SIGNATURES.get(upload.content_type)
		if not signatures:
			return
		head = next(upload.iter_chunks(16), b"")
		if not any(head.startswith(sig) for sig in signatures):
			raise ProcessingError(
				f"{upload.filename} is not a valid {upload.content_type} image",
				internal=f"signature mismatch for {upload.filename}: {head[:8]!r}",
			)
