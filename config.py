"""
Configuration management for the Business Card OCR API.

Handles environment variables, OCR backend selection and the circuit
breaker / rate limiter thresholds.
"""

import os
import logging
from typing import Optional
from dotenv import load_dotenv

from cardparse.gateway import CircuitBreakerConfig

# Load environment variables from .env file
load_dotenv()

logger = logging.getLogger(__name__)


def _env_bool(name: str, default: str) -> bool:
    return os.getenv(name, default).lower() == "true"


class Config:
    """Application configuration class.

    Attributes:
        DEBUG: Enable debug mode
        TESTING: Enable testing mode
        SECRET_KEY: Flask secret key
        MAX_CONTENT_LENGTH: Maximum upload file size (16MB default)
        ALLOWED_EXTENSIONS: Allowed image file extensions
        OCR_BACKEND: space, tesseract or fixture
        OCR_FALLBACK: Parse canned fixture text when the gateway rejects a call
    """

    # Flask Settings
    DEBUG: bool = _env_bool("CARD_API_DEBUG", "False")
    TESTING: bool = _env_bool("CARD_API_TESTING", "False")
    SECRET_KEY: str = os.getenv("CARD_API_SECRET_KEY", "dev-secret-key-change-in-production")

    # File Upload Settings
    MAX_CONTENT_LENGTH: int = 16 * 1024 * 1024  # 16MB max file size
    ALLOWED_EXTENSIONS: set = {"png", "jpg", "jpeg", "gif", "bmp", "webp", "tif", "tiff"}

    # OCR Settings
    OCR_BACKEND: str = os.getenv("CARD_API_OCR_BACKEND", "space")
    OCR_LANGUAGE: str = os.getenv("CARD_API_OCR_LANGUAGE", "eng")
    OCR_FALLBACK: bool = _env_bool("CARD_API_OCR_FALLBACK", "False")
    OCRSPACE_API_KEY: Optional[str] = os.getenv("OCRSPACE_API_KEY")
    OCR_SPACE_TIMEOUT: float = float(os.getenv("CARD_API_OCR_SPACE_TIMEOUT", "30"))
    OCR_SPACE_RETRIES: int = int(os.getenv("CARD_API_OCR_SPACE_RETRIES", "3"))
    TESSERACT_CMD: Optional[str] = os.getenv("CARD_API_TESSERACT_CMD")
    OCR_PREPROCESS: bool = _env_bool("CARD_API_OCR_PREPROCESS", "True")

    # Extraction
    EXTRACTION_TIMEOUT_MS: int = int(os.getenv("CARD_API_EXTRACTION_TIMEOUT_MS", "2000"))

    # Circuit Breaker
    CB_FAILURE_THRESHOLD: int = int(os.getenv("CARD_API_CB_FAILURE_THRESHOLD", "5"))
    CB_RECOVERY_TIMEOUT_MS: int = int(os.getenv("CARD_API_CB_RECOVERY_TIMEOUT_MS", "60000"))
    CB_HALF_OPEN_MAX_CALLS: int = int(os.getenv("CARD_API_CB_HALF_OPEN_MAX_CALLS", "3"))

    # Rate Limiting
    RATE_LIMIT_MAX_REQUESTS: int = int(os.getenv("CARD_API_RATE_LIMIT_MAX_REQUESTS", "500"))
    RATE_LIMIT_WINDOW_MS: int = int(os.getenv("CARD_API_RATE_LIMIT_WINDOW_MS", "3600000"))

    # Logging
    LOG_LEVEL: str = os.getenv("CARD_API_LOG_LEVEL", "INFO")
    LOG_FORMAT: str = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"

    @classmethod
    def init_app(cls, app) -> None:
        """Initialize Flask app with configuration.

        Args:
            app: Flask application instance
        """
        app.config.from_object(cls)

        # Configure logging
        logging.basicConfig(
            level=getattr(logging, cls.LOG_LEVEL.upper(), logging.INFO),
            format=cls.LOG_FORMAT
        )

        logger.info("Configuration initialized successfully")

    @classmethod
    def circuit_breaker_config(cls) -> CircuitBreakerConfig:
        """Build the gateway thresholds from configuration."""
        return CircuitBreakerConfig(
            failure_threshold=cls.CB_FAILURE_THRESHOLD,
            recovery_timeout_ms=cls.CB_RECOVERY_TIMEOUT_MS,
            half_open_max_calls=cls.CB_HALF_OPEN_MAX_CALLS,
            max_requests=cls.RATE_LIMIT_MAX_REQUESTS,
            window_ms=cls.RATE_LIMIT_WINDOW_MS,
        )

    @classmethod
    def is_allowed_file(cls, filename: str) -> bool:
        """Check if file extension is allowed.

        Args:
            filename: Name of the file to check

        Returns:
            True if file extension is allowed, False otherwise
        """
        return "." in filename and \
            filename.rsplit(".", 1)[1].lower() in cls.ALLOWED_EXTENSIONS

    @classmethod
    def get_api_status(cls) -> dict:
        """Get status of configured OCR options.

        Returns:
            Dictionary with OCR configuration status
        """
        return {
            "ocr_backend": cls.OCR_BACKEND,
            "ocr_space_key": cls.OCRSPACE_API_KEY is not None,
            "tesseract_cmd": cls.TESSERACT_CMD,
            "fallback_enabled": cls.OCR_FALLBACK
        }


class DevelopmentConfig(Config):
    """Development configuration."""
    DEBUG = True
    LOG_LEVEL = "DEBUG"


class ProductionConfig(Config):
    """Production configuration."""
    DEBUG = False
    LOG_LEVEL = "INFO"


class TestingConfig(Config):
    """Testing configuration."""
    TESTING = True
    DEBUG = True
    LOG_LEVEL = "DEBUG"
    OCR_BACKEND = "fixture"
    OCR_FALLBACK = False


# Configuration mapping
config_by_name = {
    "development": DevelopmentConfig,
    "production": ProductionConfig,
    "testing": TestingConfig,
    "default": DevelopmentConfig
}


def get_config(config_name: Optional[str] = None) -> Config:
    """Get configuration class by name.

    Args:
        config_name: Configuration name (development, production, testing)

    Returns:
        Configuration class
    """
    if config_name is None:
        config_name = os.getenv("CARD_API_ENV", "development")
    return config_by_name.get(config_name, DevelopmentConfig)
