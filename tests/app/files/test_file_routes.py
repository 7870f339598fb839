"""
Unit tests for the /api/storage endpoints.

Storage and the notification hub are swapped for in-process fakes via
dependency overrides, so these run without MinIO.
"""

import io
import time
from unittest.mock import patch

import pytest
from fastapi import WebSocketDisconnect
from fastapi.testclient import TestClient

from app.files.dependencies import get_storage_service
from app.files.routes import _STATUS_BY_CODE, content_disposition
from app.notifications.hub import DROPPED_CLOSE_CODE, NotificationHub, get_notification_hub
from app.storage.local_storage import LocalStorage
from filecast_core.runtime.errors import ErrorCode, StorageUnavailableError
from tests.app.fakes import InMemoryStorage


def wait_for_clients(hub: NotificationHub, count: int, timeout: float = 2.0) -> None:
    deadline = time.monotonic() + timeout
    while len(hub) != count:
        if time.monotonic() > deadline:
            raise AssertionError(f"expected {count} clients, hub has {len(hub)}")
        time.sleep(0.01)


def upload(client: TestClient, name: str, content: bytes):
    files = {"file": (name, io.BytesIO(content), "application/octet-stream")}
    return client.post("/api/storage/upload", files=files)


class TestUpload:
    """Tests for POST /api/storage/upload."""

    def test_upload_returns_success_message(self, test_client, storage):
        response = upload(test_client, "report.pdf", b"%PDF-1.4 content")

        assert response.status_code == 200
        assert response.text == "File uploaded successfully: report.pdf"
        assert storage.objects["report.pdf"] == b"%PDF-1.4 content"

    def test_upload_requires_file(self, test_client):
        response = test_client.post("/api/storage/upload")

        assert response.status_code == 422

    def test_storage_failure_returns_500(self, test_client, storage):
        storage.fail_with = StorageUnavailableError("upload", cause=OSError("denied"))

        response = upload(test_client, "a.txt", b"a")

        assert response.status_code == 500
        assert response.json()["detail"]["code"] == "STORAGE_UNAVAILABLE"

    def test_oversized_upload_returns_413(self, test_client, storage):
        with patch("app.files.orchestrator.settings") as mock_settings:
            mock_settings.MAX_UPLOAD_BYTES = 8
            mock_settings.UPLOAD_CHUNK_BYTES = 4
            response = upload(test_client, "big.bin", b"0123456789")

        assert response.status_code == 413
        assert response.json()["detail"]["code"] == "PAYLOAD_TOO_LARGE"
        assert storage.upload_calls == []

    def test_invalid_name_returns_400(self, test_client, storage):
        response = upload(test_client, "..", b"a")

        assert response.status_code == 400
        assert storage.upload_calls == []


class TestListFiles:
    """Tests for GET /api/storage/files."""

    def test_empty_bucket_returns_empty_list(self, test_client):
        response = test_client.get("/api/storage/files")

        assert response.status_code == 200
        assert response.json() == []

    def test_lists_uploaded_names(self, test_client):
        upload(test_client, "a.txt", b"a")
        upload(test_client, "b.txt", b"b")

        response = test_client.get("/api/storage/files")

        assert sorted(response.json()) == ["a.txt", "b.txt"]

    def test_storage_failure_returns_500(self, test_client, storage):
        storage.fail_with = StorageUnavailableError("list")

        response = test_client.get("/api/storage/files")

        assert response.status_code == 500


class TestDownload:
    """Tests for GET /api/storage/download/{file_name}."""

    def test_download_returns_bytes_as_attachment(self, test_client):
        upload(test_client, "data.bin", b"\x00\x01\x02")

        response = test_client.get("/api/storage/download/data.bin")

        assert response.status_code == 200
        assert response.content == b"\x00\x01\x02"
        assert response.headers["content-type"] == "application/octet-stream"
        assert response.headers["content-disposition"] == "attachment; filename=data.bin"

    def test_missing_file_returns_404(self, test_client):
        response = test_client.get("/api/storage/download/missing.txt")

        assert response.status_code == 404
        assert response.json()["detail"]["code"] == "NOT_FOUND"

    def test_storage_failure_returns_500(self, test_client, storage):
        upload(test_client, "a.txt", b"a")
        storage.fail_with = StorageUnavailableError("fetch", "a.txt")

        response = test_client.get("/api/storage/download/a.txt")

        assert response.status_code == 500

    def test_non_latin_name_uses_rfc5987_header(self, test_client, storage):
        storage.objects["отчёт.txt"] = b"a"

        response = test_client.get("/api/storage/download/отчёт.txt")

        assert response.status_code == 200
        assert response.headers["content-disposition"].startswith("attachment; filename*=UTF-8''")

    def test_name_with_separator_is_quoted(self, test_client, storage):
        storage.objects["a;b.txt"] = b"a"

        response = test_client.get("/api/storage/download/a;b.txt")

        assert response.status_code == 200
        assert response.headers["content-disposition"] == 'attachment; filename="a;b.txt"'

    def test_name_with_quote_is_escaped(self, test_client, storage):
        storage.objects['say "hi".txt'] = b"a"

        response = test_client.get("/api/storage/download/say%20%22hi%22.txt")

        assert response.status_code == 200
        assert response.headers["content-disposition"] == 'attachment; filename="say \\"hi\\".txt"'

    def test_nul_in_name_returns_404_on_local_storage(self, tmp_path):
        """A name the filesystem cannot represent was never uploaded, so it is not found."""
        from app.main import app

        app.dependency_overrides[get_storage_service] = lambda: LocalStorage(base_path=str(tmp_path))
        try:
            response = TestClient(app).get("/api/storage/download/a%00b.txt")
        finally:
            app.dependency_overrides.clear()

        assert response.status_code == 404

    def test_reupload_serves_newest_bytes(self, test_client):
        upload(test_client, "notes.txt", b"first")
        upload(test_client, "notes.txt", b"second")

        response = test_client.get("/api/storage/download/notes.txt")

        assert response.content == b"second"


class TestErrorMapping:
    """Every error code the service raises has a documented HTTP status."""

    def test_all_error_codes_are_mapped(self):
        codes = {v for k, v in vars(ErrorCode).items() if k.isupper()}

        assert codes == set(_STATUS_BY_CODE)


class TestContentDisposition:
    """Tests for the download attachment header."""

    @pytest.mark.parametrize(
        "name, expected",
        [
            ("report.pdf", "attachment; filename=report.pdf"),
            ("my report.pdf", 'attachment; filename="my report.pdf"'),
            ("caf\u00e9.txt", 'attachment; filename="caf\u00e9.txt"'),
            ("back\\slash.txt", 'attachment; filename="back\\\\slash.txt"'),
            ("line\nbreak.txt", "attachment; filename*=UTF-8''line%0Abreak.txt"),
            ("\u6587\u4ef6.txt", "attachment; filename*=UTF-8''%E6%96%87%E4%BB%B6.txt"),
        ],
    )
    def test_header_forms(self, name, expected):
        assert content_disposition(name) == expected


class TestUploadNotifyDownloadScenarios:
    """End-to-end flows through HTTP and websockets."""

    def test_upload_list_download_report(self, test_client):
        content = bytes(i % 256 for i in range(1024))

        response = upload(test_client, "report.pdf", content)
        assert "File uploaded successfully: report.pdf" in response.text

        assert test_client.get("/api/storage/files").json() == ["report.pdf"]

        download = test_client.get("/api/storage/download/report.pdf")
        assert download.content == content
        assert download.headers["content-type"] == "application/octet-stream"

    def test_connected_clients_notified_late_client_lists(self, test_client, hub):
        with test_client.websocket_connect("/ws/client-1") as first, \
                test_client.websocket_connect("/ws/client-2") as second:
            wait_for_clients(hub, 2)

            assert upload(test_client, "a.txt", b"a").status_code == 200

            assert first.receive_text() == "File available: a.txt"
            assert second.receive_text() == "File available: a.txt"

            with test_client.websocket_connect("/ws/client-3") as third:
                wait_for_clients(hub, 3)

                assert "a.txt" in test_client.get("/api/storage/files").json()

                # the next event is the first one the late client sees
                upload(test_client, "b.txt", b"b")
                assert third.receive_text() == "File available: b.txt"
                assert first.receive_text() == "File available: b.txt"
                assert second.receive_text() == "File available: b.txt"

    def test_failed_upload_sends_no_notification(self, test_client, hub, storage):
        with test_client.websocket_connect("/ws/client-1") as ws:
            wait_for_clients(hub, 1)
            storage.fail_with = StorageUnavailableError("upload")
            assert upload(test_client, "a.txt", b"a").status_code == 500

            storage.fail_with = None
            upload(test_client, "b.txt", b"b")
            assert ws.receive_text() == "File available: b.txt"

    def test_unresponsive_client_is_disconnected(self, test_client, hub):
        """A client the broadcast gives up on should see its socket closed, not stay silently unsubscribed."""
        hub.send_timeout = 0.0
        with test_client.websocket_connect("/ws/slow-client") as ws:
            wait_for_clients(hub, 1)

            assert upload(test_client, "a.txt", b"a").status_code == 200

            with pytest.raises(WebSocketDisconnect) as exc_info:
                ws.receive_text()
            assert exc_info.value.code == DROPPED_CLOSE_CODE
            assert len(hub) == 0


# --- Fixtures ---


@pytest.fixture
def storage():
    return InMemoryStorage()


@pytest.fixture
def hub():
    return NotificationHub(send_timeout=1.0)


@pytest.fixture
def test_client(storage, hub):
    """TestClient wired to in-memory storage and a per-test hub."""
    from app.main import app

    app.dependency_overrides[get_storage_service] = lambda: storage
    app.dependency_overrides[get_notification_hub] = lambda: hub
    yield TestClient(app)
    app.dependency_overrides.clear()
