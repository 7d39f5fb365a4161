import io

import pytest
from fastapi import UploadFile
from starlette.datastructures import Headers

from investtrack.config import settings
from investtrack.core.exceptions import PayloadTooLargeException
from investtrack.core.uploads import read_upload
from investtrack.routes.file_routes import content_disposition
from tests.conftest import broker_member_payload, broker_payload, create_firm, create_member

ONE_MIB = 1024 * 1024


@pytest.fixture
def member(client, admin_headers):
    firm = create_firm(client, admin_headers, broker_payload())
    return create_member(client, admin_headers, broker_member_payload(firm["id"]))


def upload_card(client, headers, member_id: int, name: str, content: bytes, mime_type: str):
    return client.put(
        f"/api/members/{member_id}/business-card",
        headers=headers,
        files={"front": (name, content, mime_type)},
    )


class TestUploadChecks:
    """Tests for the attachment allow-list and size limit"""

    def test_unsupported_type(self, client, admin_headers, member):
        response = upload_card(client, admin_headers, member["id"], "card.zip", b"PK\x03\x04", "application/zip")

        assert response.status_code == 415
        assert response.json()["success"] is False
        assert "application/zip" in response.json()["message"]

    def test_too_large(self, client, admin_headers, member):
        """Test a file over the 15 MiB limit is rejected"""
        response = upload_card(
            client, admin_headers, member["id"], "card.pdf", b"0" * (16 * ONE_MIB), "application/pdf"
        )

        assert response.status_code == 413
        fetched = client.get(f"/api/members/{member['id']}", headers=admin_headers).json()
        assert fetched["business_card_front_id"] is None

    def test_empty_file(self, client, admin_headers, member):
        response = upload_card(client, admin_headers, member["id"], "card.png", b"", "image/png")

        assert response.status_code == 400


class TestDownload:
    """Tests for file metadata and download"""

    def test_download_is_byte_identical(self, client, admin_headers, member):
        content = bytes(range(256)) * (ONE_MIB // 256)
        card = upload_card(client, admin_headers, member["id"], "card.pdf", content, "application/pdf").json()
        file_id = card["business_card_front_id"]

        response = client.get(f"/api/files/{file_id}/download", headers=admin_headers)

        assert response.status_code == 200
        assert response.content == content
        assert response.headers["content-type"] == "application/pdf"
        assert response.headers["content-disposition"] == 'attachment; filename="card.pdf"'

    def test_metadata(self, client, admin_headers, member):
        card = upload_card(client, admin_headers, member["id"], "card.png", b"png bytes", "image/png").json()

        response = client.get(f"/api/files/{card['business_card_front_id']}", headers=admin_headers)

        data = response.json()
        assert data["original_name"] == "card.png"
        assert data["mime_type"] == "image/png"
        assert data["size"] == len(b"png bytes")
        assert data["content_base64"] is None

    def test_metadata_with_content(self, client, admin_headers, member):
        card = upload_card(client, admin_headers, member["id"], "card.png", b"png bytes", "image/png").json()

        response = client.get(
            f"/api/files/{card['business_card_front_id']}?include_content=true", headers=admin_headers
        )

        assert response.json()["content_base64"] == "cG5nIGJ5dGVz"

    def test_missing_file(self, client, admin_headers):
        assert client.get("/api/files/999", headers=admin_headers).status_code == 404
        assert client.get("/api/files/999/download", headers=admin_headers).status_code == 404

    def test_requires_authentication(self, client):
        assert client.get("/api/files/1").status_code == 401


class TestBoundedRead:
    """Tests for reading uploads no further than the size limit"""

    @pytest.fixture(autouse=True)
    def one_mib_limit(self, monkeypatch):
        monkeypatch.setattr(settings, "MAX_UPLOAD_SIZE_MB", 1)

    def make_upload(self, source: io.BytesIO) -> UploadFile:
        return UploadFile(
            file=source, filename="card.pdf", headers=Headers({"content-type": "application/pdf"})
        )

    def test_stops_one_byte_past_limit(self):
        source = io.BytesIO(b"0" * (ONE_MIB + 4096))

        with pytest.raises(PayloadTooLargeException):
            read_upload(self.make_upload(source))

        assert source.tell() == ONE_MIB + 1

    def test_exact_limit_accepted(self):
        payload = read_upload(self.make_upload(io.BytesIO(b"0" * ONE_MIB)))

        assert payload.size == ONE_MIB
        assert payload.mime_type == "application/pdf"


class TestContentDisposition:
    """Tests for the download filename header"""

    def test_plain_name(self):
        assert content_disposition("card.pdf") == 'attachment; filename="card.pdf"'

    def test_quote_is_escaped(self):
        assert content_disposition('q"1.pdf') == 'attachment; filename="q\\"1.pdf"'

    def test_backslash_is_escaped(self):
        assert content_disposition("a\\b.pdf") == 'attachment; filename="a\\\\b.pdf"'

    def test_non_latin_name(self):
        assert content_disposition("名刺.pdf") == "attachment; filename*=utf-8''%E5%90%8D%E5%88%BA.pdf"

    def test_control_characters_are_encoded(self):
        header = content_disposition("card\r\nX-Injected: 1.pdf")

        assert "\r" not in header and "\n" not in header
        assert header.startswith("attachment; filename*=utf-8''")
