"""Error taxonomy shared by adapters, upload extraction and handlers.

Every failure that can reach a client is an ``ApiError`` tagged with an
``ErrorKind``. The kind decides the HTTP status; the structured ``payload``
keeps the facts (limits, MIME types, byte counts) so nothing has to be parsed
back out of a message string.
"""
from enum import Enum
from typing import Any


class ErrorKind(str, Enum):
	BAD_REQUEST_BODY = "BadRequestBody"
	MISSING_FIELDS = "MissingFields"
	METHOD_NOT_ALLOWED = "MethodNotAllowed"
	FILE_TOO_LARGE = "FileTooLarge"
	TOO_MANY_FILES = "TooManyFiles"
	UNSUPPORTED_FILE_TYPE = "UnsupportedFileType"
	PAYLOAD_TOO_LARGE = "PayloadTooLarge"
	PROCESSING_FAILURE = "ProcessingFailure"
	UNCLASSIFIED = "Unclassified"

	@property
	def status_code(self) -> int:
		return _STATUS_BY_KIND.get(self, 500)

	@property
	def client_actionable(self) -> bool:
		return 400 <= self.status_code < 500


_STATUS_BY_KIND: dict[ErrorKind, int] = {
	ErrorKind.BAD_REQUEST_BODY: 400,
	ErrorKind.MISSING_FIELDS: 400,
	ErrorKind.FILE_TOO_LARGE: 400,
	ErrorKind.TOO_MANY_FILES: 400,
	ErrorKind.UNSUPPORTED_FILE_TYPE: 400,
	ErrorKind.METHOD_NOT_ALLOWED: 405,
	ErrorKind.PAYLOAD_TOO_LARGE: 413,
	ErrorKind.PROCESSING_FAILURE: 500,
	ErrorKind.UNCLASSIFIED: 500,
}

GENERIC_ERROR = "Internal server error"
_MAX_DETAILS_CHARS = 300


class ApiError(Exception):
	kind: ErrorKind = ErrorKind.UNCLASSIFIED

	def __init__(self, message: str, details: str | None = None, **payload: Any) -> None:
		super().__init__(message)
		self.message = message
		self.details = details
		self.payload = payload

	@property
	def status_code(self) -> int:
		return self.kind.status_code

	def envelope(self) -> dict[str, str]:
		if self.kind is ErrorKind.UNCLASSIFIED:
			return {"error": GENERIC_ERROR}
		body = {"error": self.message}
		if self.details:
			body["details"] = self.details
		return body


class BadRequestBody(ApiError):
	kind = ErrorKind.BAD_REQUEST_BODY

	def __init__(self, reason: str) -> None:
		super().__init__("Malformed request body", details=reason, reason=reason)


class MissingFields(ApiError):
	kind = ErrorKind.MISSING_FIELDS

	def __init__(self, message: str, fields: list[str]) -> None:
		super().__init__(message, details=f"Expected one of: {', '.join(fields)}", fields=fields)


class MethodNotAllowed(ApiError):
	kind = ErrorKind.METHOD_NOT_ALLOWED

	def __init__(self, method: str, allowed: list[str]) -> None:
		super().__init__(
			"Method not allowed",
			details=f"{method} is not supported; use {', '.join(allowed)}",
			method=method,
			allowed=allowed,
		)


class FileTooLarge(ApiError):
	kind = ErrorKind.FILE_TOO_LARGE

	def __init__(self, filename: str, limit_bytes: int, received_bytes: int) -> None:
		limit_mb = limit_bytes / (1024 * 1024)
		super().__init__(
			f"File too large. Maximum size is {limit_mb:g}MB per file.",
			details=f"{filename} exceeded {limit_bytes} bytes",
			filename=filename,
			limit_bytes=limit_bytes,
			received_bytes=received_bytes,
		)


class TooManyFiles(ApiError):
	kind = ErrorKind.TOO_MANY_FILES

	def __init__(self, limit: int) -> None:
		super().__init__(f"Too many files. Maximum is {limit} files.", limit=limit)


class UnsupportedFileType(ApiError):
	kind = ErrorKind.UNSUPPORTED_FILE_TYPE

	def __init__(self, mime_type: str, filename: str, allowed: list[str]) -> None:
		super().__init__(
			f"Unsupported file type: {mime_type}",
			details=f"{filename} is {mime_type}; allowed types: {', '.join(sorted(allowed))}",
			mime_type=mime_type,
			filename=filename,
			allowed=allowed,
		)


class PayloadTooLarge(ApiError):
	kind = ErrorKind.PAYLOAD_TOO_LARGE

	def __init__(self, limit_bytes: int) -> None:
		super().__init__("Request body too large", details=f"Limit is {limit_bytes} bytes", limit_bytes=limit_bytes)


class ProcessingFailure(ApiError):
	kind = ErrorKind.PROCESSING_FAILURE

	def __init__(self, cause: BaseException) -> None:
		super().__init__("Processing failed", details=public_message(cause))
		self.__cause__ = cause


class ResponseAlreadySent(ApiError):
	kind = ErrorKind.UNCLASSIFIED

	def __init__(self, operation: str) -> None:
		super().__init__(f"Response already sent; refusing {operation}", operation=operation)


def public_message(exc: BaseException) -> str:
	"""Client-safe description of a collaborator failure.

	Only exceptions that opt in through a ``public_message`` attribute have
	their text forwarded; everything else collapses to a generic string.
	"""
	text = getattr(exc, "public_message", None)
	if not isinstance(text, str) or not text.strip():
		return "Unknown error"
	text = " ".join(text.split())
	return text[:_MAX_DETAILS_CHARS]


def classify(exc: BaseException) -> ApiError:
	if isinstance(exc, ApiError):
		return exc
	err = ApiError(GENERIC_ERROR)
	err.__cause__ = exc
	return err
