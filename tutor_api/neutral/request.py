import inspect
from dataclasses import dataclass, field
from http import HTTPMethod
from typing import Any, Awaitable, Callable

from starlette.datastructures import Headers, QueryParams

from .files import ExtractedFile
from .platform import PlatformKind

CancellationSignal = Callable[[], bool | Awaitable[bool]]


class CancellationToken:
	"""Latched "client went away" flag.

	Each platform supplies a signal (ASGI disconnect, remaining invocation
	time, ...). Once the signal reports cancellation the token stays cancelled.
	"""

	def __init__(self, signal: CancellationSignal | None = None) -> None:
		self._signal = signal
		self._cancelled = False

	@property
	def cancelled(self) -> bool:
		return self._cancelled

	def cancel(self) -> None:
		self._cancelled = True

	async def poll(self) -> bool:
		if self._cancelled or self._signal is None:
			return self._cancelled
		result = self._signal()
		if inspect.isawaitable(result):
			result = await result
		if result:
			self._cancelled = True
		return self._cancelled


@dataclass(frozen=True)
class NeutralRequest:
	method: HTTPMethod
	path: str
	headers: Headers
	query: QueryParams
	platform: PlatformKind
	body: Any = None
	files: tuple[ExtractedFile, ...] = ()
	request_id: str = ""
	cancellation: CancellationToken = field(default_factory=CancellationToken, compare=False, repr=False)

	def header(self, name: str, default: str | None = None) -> str | None:
		return self.headers.get(name, default)

	def files_for(self, field_name: str) -> list[ExtractedFile]:
		return [f for f in self.files if f.field_name == field_name]

	def body_field(self, name: str) -> Any:
		if isinstance(self.body, dict):
			return self.body.get(name)
		return None
