import logging
from functools import partial

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from ..adapters import build_adapter
from ..config.config import VERSION, AppConfig
from ..handlers import StaticAssets, handle_greeting, handle_health, handle_spa_fallback, handle_unified_processing
from ..processing import DocumentProcessor, Processor
from .errors import install_error_handlers
from .middleware import BodySizeLimitMiddleware
from .routes import neutral_endpoint

logger = logging.getLogger(__name__)

# Every method reaches the processing handler so non-POST calls get a 405 envelope.
PROCESS_METHODS = ["GET", "POST", "PUT", "PATCH", "DELETE"]


def create_application(
	config: AppConfig,
	processor: Processor | None = None,
	assets: StaticAssets | None = None,
) -> FastAPI:
	adapter = build_adapter(config)
	processor = processor or DocumentProcessor()
	assets = assets or StaticAssets(config.static_dir)

	app = FastAPI(
		title="Essay Tutor API",
		version=VERSION,
		docs_url="/api/docs",
		redoc_url=None,
		openapi_url="/api/openapi.json",
	)
	app.state.config = config
	app.state.adapter = adapter

	# add_middleware wraps outward: CORS ends up outermost.
	app.add_middleware(BodySizeLimitMiddleware, max_body_bytes=config.max_body_bytes)
	app.add_middleware(
		CORSMiddleware,
		allow_origins=config.cors_origins,
		allow_credentials=True,
		allow_methods=["*"],
		allow_headers=["*"],
	)

	app.add_api_route("/api/hello", neutral_endpoint(handle_greeting, adapter), methods=["GET"])
	app.add_api_route(
		"/api/process",
		neutral_endpoint(
			partial(handle_unified_processing, processor=processor),
			adapter,
			expects_files=True,
			allowed_methods=["POST"],
		),
		methods=PROCESS_METHODS,
		name="handle_unified_processing",
	)
	app.add_api_route("/health", neutral_endpoint(handle_health, adapter), methods=["GET"])
	app.add_api_route(
		"/{full_path:path}",
		neutral_endpoint(partial(handle_spa_fallback, assets=assets), adapter),
		methods=["GET"],
		include_in_schema=False,
		name="handle_spa_fallback",
	)

	install_error_handlers(app)
	logger.info(
		f"Application wired for {config.platform.label} (cors={config.cors_origins}, static={assets.root})"
	)
	return app
