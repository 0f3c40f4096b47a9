"""
Business Card OCR API - Flask Application Entry Point.

Scans business card images through a rate limited, circuit broken OCR
gateway and extracts contact fields with per-field confidence.
"""

import logging
import os

from flask import Flask, Response, jsonify
from flask_cors import CORS
from prometheus_client import CONTENT_TYPE_LATEST, generate_latest

from config import Config, get_config
from api.routes import api_bp
from cardparse import metrics, telemetry

logger = logging.getLogger(__name__)


def create_app(config_name: str = None) -> Flask:
    """Application factory for creating Flask app.

    Args:
        config_name: Configuration name (development, production, testing)

    Returns:
        Configured Flask application
    """
    app = Flask(__name__)

    # Load configuration
    config_class = get_config(config_name)
    config_class.init_app(app)
    app.config["CONFIG_CLASS"] = config_class

    # Telemetry sinks
    telemetry.attach_default_handlers()
    metrics.install()

    # Enable CORS
    CORS(app, resources={
        r"/api/*": {
            "origins": "*",
            "methods": ["GET", "POST", "OPTIONS"],
            "allow_headers": ["Content-Type", "Authorization"]
        }
    })

    # Register blueprints
    app.register_blueprint(api_bp)

    def _info():
        return {
            "name": "Business Card OCR API",
            "version": "1.0.0",
            "description": "Extract contact data from business card images",
            "endpoints": {
                "health": "/api/health",
                "status": "/api/status",
                "scan": "POST /api/scan",
                "parse_text": "POST /api/parse-text",
                "gateway": "GET /api/gateway",
                "gateway_reset": "POST /api/gateway/reset",
                "metrics": "/metrics"
            }
        }

    @app.route("/")
    def index():
        """API information at the root."""
        return jsonify(_info())

    @app.route("/api/info")
    def api_info():
        """API information endpoint."""
        return jsonify(_info())

    @app.route("/metrics")
    def prometheus_metrics():
        """Prometheus scrape endpoint."""
        return Response(generate_latest(), mimetype=CONTENT_TYPE_LATEST)

    # Favicon handler (prevents 404 errors from browsers)
    @app.route("/favicon.ico")
    def favicon():
        """Return empty response for favicon requests."""
        return "", 204

    # Global error handlers
    @app.errorhandler(400)
    def bad_request(error):
        """Handle malformed requests."""
        return jsonify({
            "success": False,
            "error": "Bad request"
        }), 400

    @app.errorhandler(404)
    def not_found(error):
        """Handle 404 errors."""
        return jsonify({
            "success": False,
            "error": "Not found"
        }), 404

    @app.errorhandler(405)
    def method_not_allowed(error):
        return jsonify({
            "success": False,
            "error": "Method not allowed"
        }), 405

    @app.errorhandler(413)
    def request_entity_too_large(error):
        """Handle file too large errors."""
        return jsonify({
            "success": False,
            "error": f"File too large. Maximum size: {Config.MAX_CONTENT_LENGTH // (1024*1024)}MB"
        }), 413

    @app.errorhandler(500)
    def internal_error(error):
        """Handle 500 errors."""
        logger.error(f"Internal error: {str(error)}")
        return jsonify({
            "success": False,
            "error": "Internal server error"
        }), 500

    @app.errorhandler(Exception)
    def handle_exception(error):
        """Handle uncaught exceptions."""
        code = getattr(error, "code", None)
        if code == 404:
            return not_found(error)
        if code == 405:
            return method_not_allowed(error)
        logger.error(f"Uncaught exception: {str(error)}", exc_info=True)
        return jsonify({
            "success": False,
            "error": "An unexpected error occurred"
        }), 500

    logger.info(f"Application created with config: {config_class.__name__}")

    return app


# Create app instance
app = create_app()


if __name__ == "__main__":
    # Get port from environment or default to 5000
    port = int(os.getenv("PORT", 5000))
    debug = os.getenv("CARD_API_DEBUG", "True").lower() == "true"

    logger.info(f"Starting server on port {port}, debug={debug}")

    app.run(
        host="0.0.0.0",
        port=port,
        debug=debug
    )
