import os
from dataclasses import dataclass
from pathlib import Path

from ..neutral.platform import PlatformKind

VERSION = "2.0.0"
MB = 1024 * 1024
ROOT_DIR = Path(__file__).resolve().parents[2]


def read_env(name: str, default: str | None = None, required: bool = False) -> str | None:
	value = os.environ.get(name, default)
	if required and (value is None or value == ""):
		raise RuntimeError(f"Missing required environment variable: {name}")
	return value


def read_int(name: str, default: int, minimum: int = 0) -> int:
	raw = read_env(name, str(default))
	try:
		val = int(raw or default)
	except ValueError:
		raise RuntimeError(f"Environment variable {name} must be an integer, got {raw!r}")
	return max(minimum, val)


def detect_platform() -> PlatformKind:
	if os.environ.get("AWS_LAMBDA_FUNCTION_NAME") or os.environ.get("VERCEL"):
		return PlatformKind.SERVERLESS_FUNCTION
	return PlatformKind.FRAMEWORK_NATIVE


@dataclass(frozen=True)
class UploadLimits:
	max_file_size_bytes: int = 10 * MB
	max_file_count: int = 10
	allowed_mime_types: frozenset[str] = frozenset({"image/jpeg", "image/png"})
	max_field_bytes: int = 10 * MB


class AppConfig:
	def __init__(self, platform: PlatformKind | None = None) -> None:
		self.platform = platform or detect_platform()
		self.version = VERSION
		self.frontend_url = read_env("FRONTEND_URL", "http://localhost:5174") or "http://localhost:5174"
		self.host = read_env("HOST", "0.0.0.0")
		self.port = read_int("PORT", 3001, minimum=1)
		self.static_dir = Path(read_env("STATIC_DIR", str(ROOT_DIR / "frontend" / "dist")) or ".")
		self.upload_dir = read_env("UPLOAD_DIR") or None
		self.serverless_scratch_dir = read_env("SERVERLESS_SCRATCH_DIR", "/tmp") or "/tmp"
		self.max_body_bytes = read_int("MAX_BODY_BYTES", 10 * MB, minimum=1)
		self.cancellation_margin_ms = read_int("CANCELLATION_MARGIN_MS", 1000)
		self.upload_limits = UploadLimits(
			max_file_size_bytes=read_int("MAX_FILE_SIZE_BYTES", 10 * MB, minimum=1),
			max_file_count=read_int("MAX_FILE_COUNT", 10, minimum=1),
			allowed_mime_types=self._read_mime_types(),
			max_field_bytes=self.max_body_bytes,
		)

	@staticmethod
	def _read_mime_types() -> frozenset[str]:
		raw = read_env("ALLOWED_MIME_TYPES", "image/jpeg,image/png") or ""
		types = [t.strip().lower() for t in raw.split(",")]
		return frozenset(t for t in types if t)

	@property
	def cors_origins(self) -> list[str]:
		return [o.strip().rstrip("/") for o in self.frontend_url.split(",") if o.strip()]
