import argparse
import sys

import uvicorn
from dotenv import load_dotenv

load_dotenv()

from tutor_api.config import AppConfig, configure_logging
from tutor_api.neutral import PlatformKind
from tutor_api.server import ExecutionContext

_LOGGER = configure_logging()


def build_context() -> ExecutionContext:
	return ExecutionContext(PlatformKind.FRAMEWORK_NATIVE)


def cmd_serve(args: argparse.Namespace) -> None:
	cfg = AppConfig(PlatformKind.FRAMEWORK_NATIVE)
	# Long-lived process: build eagerly so a broken configuration fails at boot.
	app = build_context().get_application()
	host = args.host or cfg.host
	port = args.port or cfg.port
	_LOGGER.info(f"Serving Essay Tutor API on {host}:{port}")
	uvicorn.run(app, host=host, port=port, log_level=args.log_level)


def cmd_routes(args: argparse.Namespace) -> None:
	app = build_context().get_application()
	for route in app.routes:
		methods = ",".join(sorted(getattr(route, "methods", None) or []))
		print(f"{methods or '-'}\t{getattr(route, 'path', '')}\t{getattr(route, 'name', '')}")


def build_arg_parser() -> argparse.ArgumentParser:
	parser = argparse.ArgumentParser(description="Essay Tutor API (self-hosted entry point)")
	sub = parser.add_subparsers(dest="command", required=True)

	p_srv = sub.add_parser("serve", help="Run the HTTP server")
	p_srv.add_argument("--host", help="Bind address (default: HOST or 0.0.0.0)")
	p_srv.add_argument("--port", type=int, help="Bind port (default: PORT or 3001)")
	p_srv.add_argument("--log-level", default="info", help="uvicorn log level")
	p_srv.set_defaults(func=cmd_serve)

	p_routes = sub.add_parser("routes", help="List the wired routes")
	p_routes.set_defaults(func=cmd_routes)
	return parser


def main() -> None:
	parser = build_arg_parser()
	args = parser.parse_args()
	try:
		args.func(args)
	except AttributeError:
		parser.print_help(sys.stderr)
		sys.exit(2)


if __name__ == "__main__":
	main()
