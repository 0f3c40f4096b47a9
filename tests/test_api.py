"""
Tests for Flask API routes.

Tests the REST API endpoints against the fixture OCR backend.
"""

import io
import json

import pytest

from app import create_app
from api.routes import SCANNER_KEY, build_backend, get_scanner
from cardparse import CardScanner, CircuitBreakerConfig, OCRGateway
from cardparse.backends import FixtureBackend, OCRSpaceBackend, TesseractBackend
from cardparse.errors import TransportError


class TestAPIRoutes:
    """Test cases for API routes."""

    @pytest.fixture
    def app(self):
        """Create test Flask app."""
        app = create_app("testing")
        app.config["TESTING"] = True
        return app

    @pytest.fixture
    def client(self, app):
        """Create test client."""
        return app.test_client()

    def _use_scanner(self, app, scanner):
        app.extensions[SCANNER_KEY] = scanner

    def test_root_endpoint(self, client):
        """Test root endpoint returns API info."""
        response = client.get("/")

        assert response.status_code == 200
        data = json.loads(response.data)
        assert "name" in data
        assert "version" in data
        assert "scan" in data["endpoints"]

    def test_health_check(self, client):
        """Test health check endpoint."""
        response = client.get("/api/health")

        assert response.status_code == 200
        data = json.loads(response.data)
        assert data["success"] is True
        assert data["status"] == "healthy"

    def test_status_endpoint(self, client):
        """Test status endpoint."""
        response = client.get("/api/status")

        assert response.status_code == 200
        data = json.loads(response.data)
        assert data["success"] is True
        assert data["data"]["scanner_status"]["ocr_backend"] == "fixture"
        assert data["data"]["scanner_status"]["gateway"]["phase"] == "closed"
        assert data["data"]["ocr_configuration"]["ocr_backend"] == "fixture"

    def test_scanner_is_cached_per_app(self, app):
        with app.app_context():
            assert get_scanner() is get_scanner()

    def test_scan_json(self, client):
        response = client.post(
            "/api/scan",
            data=json.dumps({"image": "data:image/png;base64,aGVsbG8="}),
            content_type="application/json"
        )

        assert response.status_code == 200
        data = json.loads(response.data)
        assert data["success"] is True
        assert data["contact_data"]["name"] == "John Doe"
        assert data["contact_data"]["email"] == "john.doe@example.com"
        assert data["ocr_method"] == "fixture"

    def test_scan_json_japanese(self, client):
        response = client.post(
            "/api/scan",
            data=json.dumps({"image": "aGVsbG8=", "language": "jpn"}),
            content_type="application/json"
        )

        assert response.status_code == 200
        data = json.loads(response.data)
        assert data["contact_data"]["name"] == "田中太郎"
        assert data["contact_data"]["company"] is None

    def test_scan_upload(self, client):
        response = client.post(
            "/api/scan",
            data={"file": (io.BytesIO(b"fake image bytes"), "card.png")},
            content_type="multipart/form-data"
        )

        assert response.status_code == 200
        data = json.loads(response.data)
        assert data["contact_data"]["company"] == "Example Corp"

    def test_scan_invalid_extension(self, client):
        response = client.post(
            "/api/scan",
            data={"file": (io.BytesIO(b"test"), "test.txt")},
            content_type="multipart/form-data"
        )

        assert response.status_code == 400
        data = json.loads(response.data)
        assert "not allowed" in data["error"]

    def test_scan_empty_upload(self, client):
        response = client.post(
            "/api/scan",
            data={"file": (io.BytesIO(b""), "card.jpg")},
            content_type="multipart/form-data"
        )

        assert response.status_code == 400

    def test_scan_no_image(self, client):
        response = client.post("/api/scan")

        assert response.status_code == 400
        data = json.loads(response.data)
        assert data["success"] is False

    def test_scan_invalid_base64(self, client):
        response = client.post(
            "/api/scan",
            data=json.dumps({"image": "%%% not base64 %%%"}),
            content_type="application/json"
        )

        assert response.status_code == 400
        assert json.loads(response.data)["error_code"] == "decode_error"

    def test_scan_rate_limited(self, app, client):
        self._use_scanner(app, CardScanner(
            FixtureBackend(),
            gateway=OCRGateway(CircuitBreakerConfig(max_requests=0))
        ))

        response = client.post(
            "/api/scan",
            data=json.dumps({"image": "aGVsbG8="}),
            content_type="application/json"
        )

        assert response.status_code == 429
        assert json.loads(response.data)["error_code"] == "rate_limit_exceeded"

    def test_scan_backend_failure_then_circuit_open(self, app, client):
        backend = FixtureBackend(fail_with=TransportError("timeout"))
        self._use_scanner(app, CardScanner(
            backend,
            gateway=OCRGateway(CircuitBreakerConfig(failure_threshold=1))
        ))
        body = json.dumps({"image": "aGVsbG8="})

        first = client.post("/api/scan", data=body, content_type="application/json")
        second = client.post("/api/scan", data=body, content_type="application/json")

        assert first.status_code == 502
        assert json.loads(first.data)["error_code"] == "transport_error"
        assert second.status_code == 503
        assert json.loads(second.data)["error_code"] == "circuit_open"
        assert backend.calls == 1

    def test_parse_text_no_data(self, client):
        """Test parse-text without data."""
        response = client.post("/api/parse-text")

        assert response.status_code == 400

    def test_parse_text_no_text_field(self, client):
        """Test parse-text without text field."""
        response = client.post(
            "/api/parse-text",
            data=json.dumps({"other": "data"}),
            content_type="application/json"
        )

        assert response.status_code == 400

    def test_parse_text_blank(self, client):
        response = client.post(
            "/api/parse-text",
            data=json.dumps({"text": "   "}),
            content_type="application/json"
        )

        assert response.status_code == 400

    def test_parse_text_success(self, client):
        """Test successful text parsing."""
        response = client.post(
            "/api/parse-text",
            data=json.dumps({"text": "John Doe\njohn@example.com"}),
            content_type="application/json"
        )

        assert response.status_code == 200
        data = json.loads(response.data)
        assert data["success"] is True
        assert data["ocr_method"] == "text"
        assert data["contact_data"]["name"] == "John Doe"
        assert data["contact_data"]["email"] == "john@example.com"

    def test_gateway_state_and_reset(self, client):
        client.post(
            "/api/scan",
            data=json.dumps({"image": "aGVsbG8="}),
            content_type="application/json"
        )

        state = json.loads(client.get("/api/gateway").data)["state"]
        assert state["request_count"] == 1

        response = client.post("/api/gateway/reset")
        assert response.status_code == 200
        assert json.loads(response.data)["state"]["request_count"] == 0

    def test_metrics_endpoint(self, client):
        client.post(
            "/api/scan",
            data=json.dumps({"image": "aGVsbG8="}),
            content_type="application/json"
        )

        response = client.get("/metrics")

        assert response.status_code == 200
        assert b"cardparse_ocr_calls_total" in response.data

    def test_not_found(self, client):
        response = client.get("/api/nope")

        assert response.status_code == 404
        assert json.loads(response.data)["success"] is False

    def test_method_not_allowed(self, client):
        response = client.get("/api/scan")

        assert response.status_code == 405


class TestBuildBackend:

    def test_backends(self):
        assert isinstance(build_backend({"OCR_BACKEND": "fixture"}), FixtureBackend)
        assert isinstance(build_backend({"OCR_BACKEND": "tesseract"}), TesseractBackend)
        assert isinstance(build_backend({"OCR_BACKEND": "space", "OCRSPACE_API_KEY": "k"}), OCRSpaceBackend)

    def test_unknown_backend(self):
        with pytest.raises(ValueError):
            build_backend({"OCR_BACKEND": "carrier-pigeon"})
