import logging
import threading
import time
from enum import Enum
from typing import Callable

from fastapi import FastAPI
from starlette.responses import JSONResponse
from starlette.types import Receive, Scope, Send

from ..config.config import AppConfig
from ..errors import GENERIC_ERROR
from ..neutral import PlatformKind
from .factory import create_application

logger = logging.getLogger(__name__)

ApplicationFactory = Callable[[AppConfig], FastAPI]


class ContextState(str, Enum):
	UNINITIALIZED = "uninitialized"
	INITIALIZING = "initializing"
	READY = "ready"


class ExecutionContext:
	"""Owns the wired application for one execution context.

	The first invocation builds the application and later invocations reuse
	it. A failed build leaves the context uninitialized so the next call
	retries. The instance is itself an ASGI app, which is what the serverless
	entry point exports.
	"""

	def __init__(
		self,
		platform: PlatformKind,
		factory: ApplicationFactory = create_application,
		config_loader: Callable[[PlatformKind], AppConfig] = AppConfig,
	) -> None:
		self.platform = platform
		self._factory = factory
		self._config_loader = config_loader
		self._state = ContextState.UNINITIALIZED
		self._app: FastAPI | None = None
		self._lock = threading.Lock()

	@property
	def state(self) -> ContextState:
		return self._state

	def get_application(self) -> FastAPI:
		app = self._app
		if self._state is ContextState.READY and app is not None:
			return app
		with self._lock:
			if self._state is ContextState.READY and self._app is not None:
				return self._app
			self._state = ContextState.INITIALIZING
			started = time.monotonic()
			try:
				app = self._factory(self._config_loader(self.platform))
			except Exception:
				self._state = ContextState.UNINITIALIZED
				raise
			self._app = app
			self._state = ContextState.READY
			logger.info(f"Cold start for {self.platform.label} completed in {(time.monotonic() - started) * 1000:.1f}ms")
			return app

	async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
		if scope["type"] == "lifespan":
			await self._lifespan(receive, send)
			return
		try:
			app = self.get_application()
		except Exception:
			logger.exception("Application construction failed; context stays uninitialized")
			if scope["type"] == "http":
				response = JSONResponse({"error": GENERIC_ERROR}, status_code=500)
				await response(scope, receive, send)
			return
		await app(scope, receive, send)

	async def _lifespan(self, receive: Receive, send: Send) -> None:
		while True:
			message = await receive()
			if message["type"] == "lifespan.startup":
				await send({"type": "lifespan.startup.complete"})
			elif message["type"] == "lifespan.shutdown":
				await send({"type": "lifespan.shutdown.complete"})
				return
