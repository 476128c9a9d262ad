"""
Connectivity test endpoint blueprint.
"""
import logging
from flask import Blueprint, jsonify, current_app
from src.monitoring import GATEWAY_ERRORS_TOTAL

logger = logging.getLogger(__name__)

connectivity_bp = Blueprint('connectivity', __name__)


@connectivity_bp.route('/test', methods=['GET'])
def connectivity_test():
    """
    Send a short prompt to the chat upstream.

    Returns:
        200 OK: {"status": "Test successful", "response": <upstream JSON>}
        500: {"status": "Test failed", "error": ..., "category": ...}
    """
    try:
        chat_client = current_app.config['CHAT_CLIENT']
        result = chat_client.test_connection()

        if result.success:
            return jsonify({'status': 'Test successful', 'response': result.body}), 200

        logger.warning("Connectivity test failed", extra={
            'category': result.category.value,
            'status': result.status_code
        })
        return jsonify({
            'status': 'Test failed',
            'error': result.body if result.body is not None else result.error,
            'category': result.category.value,
            'analysis': result.analysis
        }), 500

    except Exception as e:
        GATEWAY_ERRORS_TOTAL.labels(endpoint='test', error_type=type(e).__name__).inc()
        logger.error("Connectivity test error", extra={
            'error_type': type(e).__name__,
            'error_message': str(e)
        }, exc_info=True)
        return jsonify({'status': 'Test failed', 'error': str(e)}), 500
