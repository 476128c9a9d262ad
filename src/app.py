"""
Flask application for the signing gateway.

Local gateway between the UI and the upstream APIs: signs OCR requests with
the configured AK/SK, forwards chat completions with the bearer token, and
returns classified failures with diagnostics.
"""
import os
import logging
from typing import Optional
from flask import Flask, request
from dotenv import load_dotenv

# Load environment variables from .env file FIRST
load_dotenv()

# Configure Loki logging with mazza-base
# Must be done before any other imports that might log
from mazza_base import configure_logging

debug_mode = os.environ.get('DEBUG_LOCAL', 'true').lower() == 'true'
log_level = os.environ.get('LOG_LEVEL', 'INFO')
configure_logging(
    application_tag='signing-gateway',
    debug_local=debug_mode,
    local_level=log_level
)

from src.config import GatewayConfig, load_config
from src.dispatch import AuthenticatedDispatcher
from src.upstream import ChatClient, OcrClient
from src.blueprints import health_bp, chat_bp, ocr_bp, connectivity_bp
from src.signing import mask_value
from pythonjsonlogger import jsonlogger

logger = logging.getLogger(__name__)


# Configure JSON formatter for structured logging
# This ensures extra fields are included in log output
def _configure_json_formatter():
    """Add JSON formatter to root logger to capture extra fields."""
    formatter = jsonlogger.JsonFormatter(
        '%(asctime)s %(name)s %(levelname)s %(message)s',
        timestamp=True
    )

    # Apply JSON formatter to all existing handlers
    for handler in logging.root.handlers:
        handler.setFormatter(formatter)

# Apply JSON formatting (works with both local and Loki modes)
_configure_json_formatter()


def _register_cors(app: Flask, origins) -> None:
    """
    Allow the configured browser origins to call the gateway.

    Args:
        app: Flask application
        origins: Allowed origins
    """
    allowed = set(origins)

    @app.after_request
    def add_cors_headers(response):
        origin = request.headers.get('Origin')
        if origin and origin in allowed:
            response.headers['Access-Control-Allow-Origin'] = origin
            response.headers['Access-Control-Allow-Methods'] = 'GET, POST, OPTIONS'
            response.headers['Access-Control-Allow-Headers'] = 'Content-Type, Authorization, x-api-key'
            response.headers['Vary'] = 'Origin'
        return response


def create_app(
    config: Optional[GatewayConfig] = None,
    ocr_client: Optional[OcrClient] = None,
    chat_client: Optional[ChatClient] = None,
    dispatcher: Optional[AuthenticatedDispatcher] = None
) -> Flask:
    """
    Create and configure Flask application.

    Args:
        config: Optional configuration (for testing). If None, loads from env.
        ocr_client: Optional OCR client (for testing). If None, created from config.
        chat_client: Optional chat client (for testing). If None, created from config.
        dispatcher: Optional shared dispatcher (for testing). If None, creates one.

    Returns:
        Configured Flask application
    """
    app = Flask(__name__)

    if config is None:
        config = load_config()

    if dispatcher is None:
        dispatcher = AuthenticatedDispatcher()

    if ocr_client is None:
        ocr_client = OcrClient(config, dispatcher)

    if chat_client is None:
        chat_client = ChatClient(config, dispatcher)

    if not config.ocr_configured:
        logger.warning("OCR credentials not configured - OCR calls will fail with signing_error")
    if not config.chat_configured:
        logger.warning("Chat API key not configured - chat calls will fail with signing_error")

    # Store in app config for access in route handlers
    app.config['GATEWAY_CONFIG'] = config
    app.config['OCR_CLIENT'] = ocr_client
    app.config['CHAT_CLIENT'] = chat_client

    _register_cors(app, config.cors_origins)

    # Register blueprints
    app.register_blueprint(health_bp)
    app.register_blueprint(chat_bp)
    app.register_blueprint(ocr_bp)
    app.register_blueprint(connectivity_bp)

    return app


# Create default app instance for direct execution
app = create_app()


if __name__ == '__main__':
    gateway_config = app.config['GATEWAY_CONFIG']
    logger.info("Starting signing gateway", extra={
        'port': gateway_config.port,
        'region': gateway_config.ocr_region,
        'access_key': mask_value(gateway_config.ocr_access_key),
        'chat_api_url': gateway_config.chat_api_url,
        'endpoints': ['/health', '/api/deepseek', '/api/huawei-ocr', '/test', '/metrics']
    })
    app.run(host='0.0.0.0', port=gateway_config.port, debug=False)
