"""
API routes for the Business Card OCR API.

Flask REST API endpoints for scanning business cards and inspecting the
OCR gateway.
"""

import base64
import logging

from flask import Blueprint, request, jsonify, current_app
from werkzeug.utils import secure_filename

from cardparse import BusinessCardParser, CardScanner, OCRGateway
from cardparse.backends import (
    FixtureBackend,
    OCRSpaceBackend,
    TesseractBackend,
    decode_base64,
)
from cardparse.errors import DecodeError

logger = logging.getLogger(__name__)

# Create Blueprint
api_bp = Blueprint("api", __name__, url_prefix="/api")

SCANNER_KEY = "card_scanner"

# Gateway error codes that map to something other than 502
ERROR_STATUS = {
    "rate_limit_exceeded": 429,
    "circuit_open": 503,
    "decode_error": 400,
}


def build_backend(config):
    """Create the OCR backend named by ``OCR_BACKEND``."""
    name = config.get("OCR_BACKEND", "space")
    if name == "space":
        return OCRSpaceBackend(
            api_key=config.get("OCRSPACE_API_KEY"),
            timeout=config.get("OCR_SPACE_TIMEOUT", 30.0),
            retries=config.get("OCR_SPACE_RETRIES", 3)
        )
    if name == "tesseract":
        return TesseractBackend(
            tesseract_cmd=config.get("TESSERACT_CMD"),
            preprocess=config.get("OCR_PREPROCESS", True)
        )
    if name == "fixture":
        return FixtureBackend()
    raise ValueError(f"Unknown OCR backend: {name}")


def get_scanner() -> CardScanner:
    """Get or create the scanner for the current app.

    Returns:
        CardScanner instance
    """
    scanner = current_app.extensions.get(SCANNER_KEY)

    if scanner is None:
        config = current_app.config
        config_class = config["CONFIG_CLASS"]
        scanner = CardScanner(
            backend=build_backend(config),
            gateway=OCRGateway(config_class.circuit_breaker_config()),
            parser=BusinessCardParser(timeout_ms=config.get("EXTRACTION_TIMEOUT_MS", 2000)),
            fallback=FixtureBackend() if config.get("OCR_FALLBACK") else None,
            language=config.get("OCR_LANGUAGE", "eng")
        )
        current_app.extensions[SCANNER_KEY] = scanner
        logger.info(f"Scanner initialized with backend: {scanner.backend.name}")

    return scanner


def _error(message: str, status: int, **extra):
    body = {"success": False, "error": message}
    body.update(extra)
    return jsonify(body), status


@api_bp.route("/health", methods=["GET"])
def health_check():
    """Health check endpoint.

    Returns:
        JSON with health status
    """
    return jsonify({
        "success": True,
        "status": "healthy",
        "message": "Business Card OCR API is running",
        "version": "1.0.0"
    }), 200


@api_bp.route("/status", methods=["GET"])
def get_status():
    """Get API and scanner status.

    Returns:
        JSON with status information
    """
    try:
        scanner = get_scanner()
        return jsonify({
            "success": True,
            "data": {
                "api_status": "running",
                "scanner_status": scanner.get_status(),
                "ocr_configuration": current_app.config["CONFIG_CLASS"].get_api_status()
            }
        }), 200

    except Exception as e:
        logger.error(f"Error getting status: {str(e)}")
        return _error(str(e), 500)


@api_bp.route("/scan", methods=["POST"])
def scan_card():
    """Scan a single business card image.

    Expects either:
        - multipart/form-data with a 'file' field and optional 'language'
        - JSON body {"image": "<base64>", "language": "eng", "file_type": "jpg"}

    Returns:
        JSON with extracted contact data. Gateway rejections map to
        429 (rate limit), 503 (circuit open) or 502 (backend failure).
    """
    if "file" in request.files:
        file = request.files["file"]

        if file.filename == "":
            return _error("No file selected", 400)

        config_class = current_app.config["CONFIG_CLASS"]
        if not config_class.is_allowed_file(file.filename):
            return _error(
                f"File type not allowed. Allowed: {', '.join(sorted(config_class.ALLOWED_EXTENSIONS))}",
                400
            )

        content = file.read()
        if not content:
            return _error("Uploaded file is empty", 400)

        image = base64.b64encode(content).decode("ascii")
        file_type = secure_filename(file.filename).rsplit(".", 1)[-1].lower()
        language = request.form.get("language")
    else:
        data = request.get_json(silent=True)
        if not data or not data.get("image"):
            return _error(
                "No image provided. Send a 'file' field or JSON with an 'image' field.",
                400
            )

        image = data["image"]
        try:
            decode_base64(image)
        except DecodeError as e:
            return _error(str(e), 400, error_code=e.code)

        file_type = data.get("file_type", "jpg")
        language = data.get("language")

    logger.info(f"Scanning card - language: {language or 'default'}, file_type: {file_type}")

    result = get_scanner().scan(image, language=language, file_type=file_type)

    if result["success"]:
        return jsonify(result), 200

    status = ERROR_STATUS.get(result.get("error_code"), 502)
    return jsonify(result), status


@api_bp.route("/parse-text", methods=["POST"])
def parse_text():
    """Parse contact information from raw text.

    Expects:
        JSON body with 'text' field and optional 'language'

    Returns:
        JSON with parsed contact data
    """
    data = request.get_json(silent=True)

    if not data or "text" not in data:
        return _error("No text provided. Send JSON with 'text' field.", 400)

    text = data["text"]
    if not isinstance(text, str) or not text.strip():
        return _error("Text must be a non-empty string", 400)

    result = get_scanner().parse_text(text, language=data.get("language"))
    return jsonify(result), 200


@api_bp.route("/gateway", methods=["GET"])
def gateway_state():
    """Report circuit breaker and rate limiter state."""
    gateway = get_scanner().gateway
    return jsonify({
        "success": True,
        "state": gateway.get_state().to_dict()
    }), 200


@api_bp.route("/gateway/reset", methods=["POST"])
def gateway_reset():
    """Close the circuit and clear all counters."""
    gateway = get_scanner().gateway
    gateway.reset()
    logger.info("OCR gateway reset via API")
    return jsonify({
        "success": True,
        "state": gateway.get_state().to_dict()
    }), 200
