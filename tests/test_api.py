"""
Tests for the HTTP API.
"""

import json
import threading

import pytest
from fastapi.testclient import TestClient

from rasterfx import __version__
from rasterfx.config import Settings
from rasterfx.api import create_api_app
from rasterfx.api.router import content_disposition
from rasterfx.probe import PNG_SIGNATURE, sniff_format
from rasterfx.selector import BackendSelector, default_backends
from rasterfx.standalone import create_standalone_app
from rasterfx.worker_pool import WorkerPool


@pytest.fixture
def client():
    pool = WorkerPool(2, 2, 30)
    app = create_api_app(Settings(), BackendSelector(default_backends(True)), pool)
    yield TestClient(app)
    pool.shutdown()


def post_effect(client, family, data, options=None, filename="photo.png", mime="image/png"):
    form = {"options": json.dumps(options)} if options is not None else {}
    return client.post(
        f"/effects/{family}",
        files={"image": (filename, data, mime)},
        data=form,
    )


class TestApplyEffect:
    """Tests for POST /effects/{family}."""

    def test_hdr(self, client, png_bytes):
        response = post_effect(client, "hdr", png_bytes, {"intensity": 50})
        assert response.status_code == 200
        assert response.headers["content-type"] == "image/png"
        assert response.headers["X-Backend-Path"] == "native:fail,software:ok"
        assert response.headers["X-Dynamic-Range-Score"] == "6.7"
        assert response.headers["X-Original-Dimensions"] == "48x32"
        assert response.headers["X-Processed-Dimensions"] == "48x32"
        assert response.headers["X-Effect-Style"] == "natural"
        assert response.headers["Content-Disposition"] == 'attachment; filename="photo_hdr.png"'
        assert "X-Processing-Time" in response.headers
        assert sniff_format(response.content) == "png"

    def test_without_options(self, client, png_bytes):
        response = post_effect(client, "vintage", png_bytes)
        assert response.status_code == 200
        assert response.headers["X-Effect-Intensity"] == "70"

    def test_jpeg_output(self, client, png_bytes):
        response = post_effect(client, "artistic", png_bytes, {"outputFormat": "jpg"}, filename="cat.webp")
        assert response.status_code == 200
        assert response.headers["content-type"] == "image/jpeg"
        assert response.headers["Content-Disposition"] == 'attachment; filename="cat_artistic.jpg"'

    def test_native_resize(self, client, png_bytes):
        response = post_effect(client, "resize", png_bytes, {"width": 24})
        assert response.status_code == 200
        assert response.headers["X-Backend-Path"] == "native:ok"
        assert response.headers["X-Processed-Dimensions"] == "24x16"
        assert response.headers["X-Compression-Ratio"] == "4"
        assert response.headers["X-Adjustments"] == "Resize 48x32 -> 24x16 (fit)"

    def test_resize_over_limit(self, client, png_bytes):
        response = post_effect(client, "resize", png_bytes, {"width": 1000})
        assert response.status_code == 422
        body = response.json()
        assert body["error"]["code"] == "INVALID_PARAMETERS"
        assert body["error"]["field"] == "width"
        assert body["error"]["accepted"] == "at most 10x the original size (48x32)"

    def test_non_ascii_filename(self, client, png_bytes):
        response = post_effect(client, "hdr", png_bytes, filename="фото.png")
        assert response.status_code == 200
        assert response.headers["Content-Disposition"] == (
            "attachment; filename=\"image_hdr.png\"; "
            "filename*=UTF-8''%D1%84%D0%BE%D1%82%D0%BE_hdr.png"
        )

    def test_invalid_parameter(self, client, png_bytes):
        response = post_effect(client, "hdr", png_bytes, {"intensity": 101})
        assert response.status_code == 422
        body = response.json()
        assert body["success"] is False
        assert body["error"]["code"] == "INVALID_PARAMETERS"
        assert body["error"]["field"] == "intensity"
        assert body["error"]["accepted"] == "in [1, 100]"

    def test_unknown_family(self, client, png_bytes):
        response = post_effect(client, "posterize", png_bytes)
        assert response.status_code == 422
        assert response.json()["error"]["field"] == "family"

    def test_malformed_options(self, client, png_bytes):
        response = client.post(
            "/effects/hdr",
            files={"image": ("photo.png", png_bytes, "image/png")},
            data={"options": "{not json"},
        )
        assert response.status_code == 422
        assert response.json()["error"]["field"] == "options"

    def test_garbage_bytes(self, client):
        response = post_effect(client, "hdr", b"definitely not an image")
        assert response.status_code == 400
        assert response.json()["error"]["code"] == "INVALID_INPUT"

    def test_oversized(self, png_bytes):
        app = create_api_app(Settings(MAX_FILE_SIZE=16), BackendSelector(), WorkerPool(1, 1, 5))
        response = post_effect(TestClient(app), "hdr", png_bytes)
        assert response.status_code == 400

    def test_unreadable_resize(self, client):
        response = post_effect(client, "resize", PNG_SIGNATURE + b"\x00" * 20, {"width": 10})
        assert response.status_code == 415
        assert response.json()["error"]["code"] == "UNREADABLE_IMAGE"

    def test_busy(self, png_bytes):
        release = threading.Event()
        pool = WorkerPool(1, 0, 5)
        client = TestClient(create_api_app(Settings(), BackendSelector(), pool))
        try:
            pool.submit(release.wait, 5)
            response = post_effect(client, "hdr", png_bytes)
            assert response.status_code == 503
            assert response.json()["error"]["code"] == "BUSY"
        finally:
            release.set()
            pool.shutdown()


class TestContentDisposition:
    """Tests for the attachment header built from upload names."""

    def test_plain_name(self):
        assert content_disposition("photo", "_hdr.png") == 'attachment; filename="photo_hdr.png"'

    def test_quote_stripped(self):
        header = content_disposition('my"photo', "_hdr.png")
        assert header == (
            'attachment; filename="myphoto_hdr.png"; '
            "filename*=UTF-8''my%22photo_hdr.png"
        )

    def test_accents_folded(self):
        header = content_disposition("café", "_vintage.jpg")
        assert header.startswith('attachment; filename="cafe_vintage.jpg"')
        assert header.endswith("filename*=UTF-8''caf%C3%A9_vintage.jpg")

    @pytest.mark.parametrize("stem", ["фото", "\\\\", "a\\b\r\nc", "写真"])
    def test_latin1_safe(self, stem):
        header = content_disposition(stem, "_resize.webp")
        header.encode("latin-1")
        assert "\r" not in header and "\n" not in header


class TestInfoEndpoints:

    def test_health(self, client):
        response = client.get("/health")
        assert response.status_code == 200
        assert response.json() == {"status": "ok", "version": __version__, "native_backend": True}

    def test_effects(self, client):
        families = client.get("/effects").json()["families"]
        assert "resize" in families
        assert "effectType" in families["hdr"]["properties"]

    def test_probe(self, client, jpeg_bytes):
        response = client.post("/probe", files={"image": ("a.jpg", jpeg_bytes, "image/jpeg")})
        assert response.json() == {"width": 48, "height": 32, "format": "jpeg"}

    def test_probe_rejects_garbage(self, client):
        response = client.post("/probe", files={"image": ("a.bin", b"\x00\x01", "application/octet-stream")})
        assert response.status_code == 400


class TestStandalone:

    def test_mounted_under_api(self):
        client = TestClient(create_standalone_app())
        response = client.get("/api/health")
        assert response.status_code == 200
        assert response.json()["status"] == "ok"
