"""
Health and metrics endpoint blueprint.

Reports whether the gateway is running, which upstreams are configured, and
the Prometheus metrics for upstream calls.
"""
import logging
from datetime import datetime, timezone
from flask import Blueprint, Response, jsonify, current_app
from src.monitoring import get_metrics, record_upstream_configuration

logger = logging.getLogger(__name__)

health_bp = Blueprint('health', __name__)


@health_bp.route('/health', methods=['GET'])
def health_check():
    """
    Health check endpoint.

    Does not contact any upstream; credentials are reported as configured or
    not, never echoed.

    Returns:
        200 OK:
            JSON: {
                "status": "OK",
                "message": "...",
                "timestamp": "ISO-8601",
                "apiUrl": "<chat endpoint>",
                "ocr_configured": bool,
                "chat_configured": bool
            }
    """
    config = current_app.config['GATEWAY_CONFIG']

    response_data = {
        'status': 'OK',
        'message': 'Signing gateway is running',
        'timestamp': datetime.now(timezone.utc).isoformat(),
        'apiUrl': config.chat_api_url,
        'ocr_configured': config.ocr_configured,
        'chat_configured': config.chat_configured
    }

    if not config.ocr_configured or not config.chat_configured:
        logger.warning("Health check - upstream credentials missing", extra={
            'ocr_configured': config.ocr_configured,
            'chat_configured': config.chat_configured
        })

    return jsonify(response_data), 200


@health_bp.route('/metrics', methods=['GET'])
def prometheus_metrics():
    """
    Prometheus metrics endpoint.

    Refreshes upstream_configured from the running configuration, then exposes:
    - upstream_configured: 1/0 per upstream (ocr, chat)
    - upstream_attempts_total: Upstream attempts by upstream/outcome
    - upstream_duration_seconds: Upstream attempt latency histogram
    - upstream_failures_total: Failed dispatches by upstream/category
    - gateway_errors_total: Unexpected gateway errors by endpoint/type

    Returns:
        200 OK: Metrics in Prometheus exposition format
    """
    config = current_app.config['GATEWAY_CONFIG']
    record_upstream_configuration(config.ocr_configured, config.chat_configured)

    metrics_data, content_type = get_metrics()
    return Response(metrics_data, mimetype=content_type)
