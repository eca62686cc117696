import asyncio
import base64
import sys
from pathlib import Path
from typing import Any, Sequence

import pytest
from fastapi.testclient import TestClient

# Ensure project root is on sys.path so `import tutor_api` works under pytest
ROOT_DIR = Path(__file__).resolve().parents[1]
if str(ROOT_DIR) not in sys.path:
	sys.path.insert(0, str(ROOT_DIR))

from tutor_api.config import AppConfig  # noqa: E402
from tutor_api.models import Document, DocumentMetadata, DocumentPage, ProcessingResult  # noqa: E402
from tutor_api.neutral import PlatformKind  # noqa: E402
from tutor_api.processing import Processor  # noqa: E402
from tutor_api.server import create_application  # noqa: E402

BOUNDARY = "----tutor-test-boundary"
JPEG_MAGIC = b"\xff\xd8\xff\xe0"
PNG_MAGIC = b"\x89PNG\r\n\x1a\n"
MB = 1024 * 1024


def jpeg_bytes(size: int) -> bytes:
	return JPEG_MAGIC + b"\x00" * max(0, size - len(JPEG_MAGIC))


def encode_multipart(files: Sequence[tuple[str, str, bytes, str]], fields: dict[str, str] | None = None) -> tuple[bytes, str]:
	"""Build a multipart/form-data body from (field, filename, content, mime) tuples."""
	parts: list[bytes] = []
	for name, value in (fields or {}).items():
		parts.append(
			f'--{BOUNDARY}\r\nContent-Disposition: form-data; name="{name}"\r\n\r\n'.encode() + value.encode() + b"\r\n"
		)
	for field, filename, content, mime in files:
		head = (
			f'--{BOUNDARY}\r\nContent-Disposition: form-data; name="{field}"; filename="{filename}"\r\n'
			f"Content-Type: {mime}\r\n\r\n"
		)
		parts.append(head.encode() + content + b"\r\n")
	body = b"".join(parts) + f"--{BOUNDARY}--\r\n".encode()
	return body, f"multipart/form-data; boundary={BOUNDARY}"


async def chunked(data: bytes, size: int = 4096):
	for i in range(0, len(data), size):
		yield data[i : i + size]


class FakeProcessor(Processor):
	def __init__(self, error: Exception | None = None) -> None:
		self.error = error
		self.calls: list[dict[str, Any]] = []

	async def process(self, body, files):
		self.calls.append(
			{
				"body": body,
				"files": [(f.field_name, f.filename, f.content_type, f.size) for f in files],
				"payload_sizes": [len(f.read()) for f in files],
			}
		)
		if self.error is not None:
			raise self.error
		document = Document(
			pages=[DocumentPage(page_number=i + 1, original_filename=f.filename) for i, f in enumerate(files)],
			metadata=DocumentMetadata(source="images", total_pages=len(files)),
		)
		return ProcessingResult(document=document, message=f"processed {len(files)}")


class FakeLambdaContext:
	def __init__(self, request_id: str = "lambda-req-1", remaining_ms: int = 30000) -> None:
		self.aws_request_id = request_id
		self.function_name = "essay-tutor"
		self.remaining_ms = remaining_ms

	def get_remaining_time_in_millis(self) -> int:
		return self.remaining_ms


def http_api_event(
	method: str,
	path: str,
	query: str = "",
	headers: dict[str, str] | None = None,
	body: bytes | None = None,
) -> dict[str, Any]:
	"""API Gateway HTTP API (payload v2.0) proxy event."""
	all_headers = {"host": "abc123.execute-api.us-east-1.amazonaws.com", "x-forwarded-proto": "https", "x-forwarded-port": "443"}
	all_headers.update(headers or {})
	event: dict[str, Any] = {
		"version": "2.0",
		"routeKey": "$default",
		"rawPath": path,
		"rawQueryString": query,
		"headers": all_headers,
		"requestContext": {
			"accountId": "123456789012",
			"apiId": "abc123",
			"domainName": all_headers["host"],
			"requestId": "event-req-1",
			"stage": "$default",
			"http": {"method": method, "path": path, "protocol": "HTTP/1.1", "sourceIp": "203.0.113.7", "userAgent": "pytest"},
		},
		"isBase64Encoded": False,
	}
	if body is not None:
		event["body"] = base64.b64encode(body).decode()
		event["isBase64Encoded"] = True
	return event


@pytest.fixture
def env(tmp_path, monkeypatch):
	monkeypatch.setenv("FRONTEND_URL", "http://localhost:3000")
	monkeypatch.setenv("STATIC_DIR", str(tmp_path / "dist"))
	monkeypatch.setenv("SERVERLESS_SCRATCH_DIR", str(tmp_path / "scratch"))
	monkeypatch.setenv("UPLOAD_DIR", str(tmp_path / "uploads"))
	monkeypatch.delenv("AWS_LAMBDA_FUNCTION_NAME", raising=False)
	monkeypatch.delenv("VERCEL", raising=False)
	return tmp_path


@pytest.fixture
def processor():
	return FakeProcessor()


@pytest.fixture
def app_client(env, processor):
	app = create_application(AppConfig(PlatformKind.FRAMEWORK_NATIVE), processor=processor)
	client = TestClient(app, follow_redirects=False)
	return client, processor


@pytest.fixture
def event_loop_for_lambda():
	# Mangum drives the app on the thread's current event loop.
	loop = asyncio.new_event_loop()
	asyncio.set_event_loop(loop)
	yield loop
	asyncio.set_event_loop(None)
	loop.close()
