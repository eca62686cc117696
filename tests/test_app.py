import logging
from datetime import datetime

import pytest
from fastapi.testclient import TestClient

from conftest import MB, PNG_MAGIC, FakeProcessor, encode_multipart, jpeg_bytes
from tutor_api.config import AppConfig
from tutor_api.neutral import PlatformKind
from tutor_api.processing import DocumentProcessor, ProcessingError
from tutor_api.server import create_application


def _jpeg(name: str = "page.jpg", size: int = 1024):
	return ("files", (name, jpeg_bytes(size), "image/jpeg"))


def test_hello_returns_message_and_iso_timestamp(app_client):
	client, _ = app_client
	r = client.get("/api/hello", params={"name": "Ada"})
	assert r.status_code == 200
	body = r.json()
	assert body["message"] == "Hello Ada! Essay Tutor API is running."
	assert datetime.fromisoformat(body["timestamp"]).tzinfo is not None
	assert body["method"] == "GET"
	assert body["platform"] == "Self-hosted"


def test_health(app_client):
	client, _ = app_client
	r = client.get("/health")
	assert r.status_code == 200
	body = r.json()
	assert body["status"] == "healthy"
	assert body["platform"] == "Self-hosted"
	assert body["version"] == "2.0.0"
	datetime.fromisoformat(body["timestamp"])


@pytest.mark.parametrize("method", ["GET", "PUT", "PATCH", "DELETE"])
def test_process_rejects_non_post_with_405(app_client, method):
	client, processor = app_client
	r = client.request(method, "/api/process")
	assert r.status_code == 405
	assert r.json()["error"] == "Method not allowed"
	assert processor.calls == []


def test_process_single_jpeg(app_client):
	client, processor = app_client
	r = client.post("/api/process", files=[_jpeg("essay.jpg", 2 * MB)], data={})
	assert r.status_code == 200
	body = r.json()
	assert body["success"] is True
	assert body["message"] == "processed 1"
	assert body["result"]["document"]["metadata"]["total_pages"] == 1
	assert isinstance(body["processing_time_ms"], int)
	assert processor.calls[0]["files"] == [("files", "essay.jpg", "image/jpeg", 2 * MB)]
	assert processor.calls[0]["payload_sizes"] == [2 * MB]


def test_oversized_file_is_rejected_without_processing_and_retry_succeeds(app_client):
	client, processor = app_client
	r = client.post("/api/process", files=[_jpeg("small.jpg"), _jpeg("huge.jpg", 10 * MB + 1)])
	assert r.status_code == 400
	assert r.json()["error"] == "File too large. Maximum size is 10MB per file."
	assert processor.calls == []

	retry = client.post("/api/process", files=[_jpeg("small.jpg"), _jpeg("huge.jpg", 10 * MB)])
	assert retry.status_code == 200
	assert len(processor.calls) == 1


def test_more_than_ten_files_is_rejected(app_client):
	client, processor = app_client
	r = client.post("/api/process", files=[_jpeg(f"p{i}.jpg", 64) for i in range(11)])
	assert r.status_code == 400
	assert r.json()["error"] == "Too many files. Maximum is 10 files."
	assert processor.calls == []

	ok = client.post("/api/process", files=[_jpeg(f"p{i}.jpg", 64) for i in range(10)])
	assert ok.status_code == 200


def test_unsupported_mime_type_names_the_type(app_client):
	client, processor = app_client
	r = client.post(
		"/api/process",
		files=[_jpeg(), ("files", ("anim.gif", b"GIF89a", "image/gif"))],
	)
	assert r.status_code == 400
	assert "image/gif" in r.json()["error"]
	assert "anim.gif" in r.json()["details"]
	assert processor.calls == []


def test_missing_files_and_text_is_rejected(app_client):
	client, _ = app_client
	r = client.post("/api/process", data={"note": "nothing here"})
	assert r.status_code == 400
	assert r.json()["error"] == "No files uploaded"


def test_text_input_is_processed(app_client):
	client, processor = app_client
	r = client.post("/api/process", json={"text": "My summer. It was long."})
	assert r.status_code == 200
	assert processor.calls[0]["body"] == {"text": "My summer. It was long."}
	assert processor.calls[0]["files"] == []


def test_malformed_json_is_400(app_client):
	client, _ = app_client
	r = client.post("/api/process", content=b'{"text": ', headers={"Content-Type": "application/json"})
	assert r.status_code == 400
	assert r.json()["error"] == "Malformed request body"


def test_processing_failure_is_sanitized(env):
	processor = FakeProcessor(error=ProcessingError("Page 1 could not be read", internal="stack: /srv/secret.py"))
	client = TestClient(create_application(AppConfig(PlatformKind.FRAMEWORK_NATIVE), processor=processor))
	r = client.post("/api/process", files=[_jpeg()])
	assert r.status_code == 500
	assert r.json() == {"error": "Processing failed", "details": "Page 1 could not be read"}


def test_unexpected_collaborator_error_does_not_leak(env):
	processor = FakeProcessor(error=RuntimeError("password=hunter2"))
	client = TestClient(create_application(AppConfig(PlatformKind.FRAMEWORK_NATIVE), processor=processor))
	r = client.post("/api/process", files=[_jpeg()])
	assert r.status_code == 500
	assert "hunter2" not in r.text
	assert r.json()["details"] == "Unknown error"


def test_collaborator_failure_is_logged_once(env, caplog):
	processor = FakeProcessor(error=RuntimeError("disk on fire"))
	client = TestClient(create_application(AppConfig(PlatformKind.FRAMEWORK_NATIVE), processor=processor))
	with caplog.at_level(logging.ERROR):
		client.post("/api/process", files=[_jpeg()])
	tracebacks = [r for r in caplog.records if r.exc_info and "disk on fire" in str(r.exc_info[1])]
	assert len(tracebacks) == 1


def test_default_document_processor(env):
	client = TestClient(create_application(AppConfig(PlatformKind.FRAMEWORK_NATIVE), processor=DocumentProcessor()))
	r = client.post("/api/process", files=[_jpeg("a.jpg"), ("files", ("b.png", PNG_MAGIC + b"data", "image/png"))])
	assert r.status_code == 200
	pages = r.json()["result"]["document"]["pages"]
	assert [p["original_filename"] for p in pages] == ["a.jpg", "b.png"]

	text = client.post("/api/process", json={"text": "One. Two!\n\nThree?"})
	stats = text.json()["result"]["document"]["metadata"]["statistics"]
	assert stats == {"words": 3, "characters": 17, "sentences": 3, "paragraphs": 2}

	bogus = client.post("/api/process", files=[("files", ("fake.jpg", b"not an image", "image/jpeg"))])
	assert bogus.status_code == 500
	assert bogus.json()["details"] == "fake.jpg is not a valid image/jpeg image"


def test_json_body_over_limit_is_413(env, monkeypatch):
	monkeypatch.setenv("MAX_BODY_BYTES", "64")
	client = TestClient(create_application(AppConfig(PlatformKind.FRAMEWORK_NATIVE), processor=FakeProcessor()))
	r = client.post("/api/process", json={"text": "x" * 200})
	assert r.status_code == 413
	assert r.json()["error"] == "Request body too large"


def test_non_post_is_405_before_body_is_read(app_client):
	client, processor = app_client
	upload = client.put("/api/process", files=[("files", ("notes.txt", b"plain text", "text/plain"))])
	assert upload.status_code == 405
	assert upload.json()["error"] == "Method not allowed"

	bad_json = client.request(
		"DELETE", "/api/process", content=b"{nope", headers={"Content-Type": "application/json"}
	)
	assert bad_json.status_code == 405

	crowded = client.patch("/api/process", files=[_jpeg(f"p{i}.jpg", 64) for i in range(11)])
	assert crowded.status_code == 405
	assert processor.calls == []


def test_non_post_with_oversized_json_is_405(env, monkeypatch):
	monkeypatch.setenv("MAX_BODY_BYTES", "64")
	client = TestClient(create_application(AppConfig(PlatformKind.FRAMEWORK_NATIVE), processor=FakeProcessor()))
	r = client.put("/api/process", json={"text": "x" * 200})
	assert r.status_code == 405


def test_truncated_upload_is_rejected(app_client):
	client, processor = app_client
	body, ctype = encode_multipart([("files", "a.jpg", jpeg_bytes(1000), "image/jpeg"), ("files", "b.jpg", jpeg_bytes(1000), "image/jpeg")])
	r = client.post("/api/process", content=body[:-600], headers={"Content-Type": ctype})
	assert r.status_code == 400
	assert r.json() == {"error": "Malformed request body", "details": "Incomplete multipart body"}
	assert processor.calls == []


def test_unknown_path_serves_spa_entry(env, app_client):
	client, _ = app_client
	dist = env / "dist"
	dist.mkdir()
	(dist / "index.html").write_text("<!doctype html><div id=app>essay tutor</div>")
	(dist / "app.js").write_text("console.log('spa')")

	r = client.get("/unknown/path")
	assert r.status_code == 200
	assert "essay tutor" in r.text
	assert r.headers["content-type"].startswith("text/html")

	asset = client.get("/app.js")
	assert asset.status_code == 200
	assert asset.text == "console.log('spa')"

	escape = client.get("/..%2F..%2Fetc%2Fpasswd")
	assert "essay tutor" in escape.text


def test_spa_fallback_without_build_serves_shell(app_client):
	client, _ = app_client
	r = client.get("/some/client/route")
	assert r.status_code == 200
	assert '<div id="root"></div>' in r.text


def test_wrong_method_on_fixed_route_is_json(app_client):
	client, _ = app_client
	r = client.post("/api/hello")
	assert r.status_code == 405
	assert r.headers["content-type"] == "application/json"
	assert "error" in r.json()


def test_cors_allows_frontend_origin(app_client):
	client, _ = app_client
	r = client.get("/api/hello", headers={"Origin": "http://localhost:3000"})
	assert r.headers.get("access-control-allow-origin") == "http://localhost:3000"
	assert r.headers.get("access-control-allow-credentials") == "true"

	preflight = client.options(
		"/api/process",
		headers={"Origin": "http://localhost:3000", "Access-Control-Request-Method": "POST"},
	)
	assert preflight.status_code == 200

	other = client.get("/api/hello", headers={"Origin": "http://evil.example"})
	assert "access-control-allow-origin" not in other.headers
