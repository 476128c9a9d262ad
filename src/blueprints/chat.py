"""
Chat completion endpoint blueprint.

Thin pass-through from the UI to the chat completion upstream.
"""
import time
import logging
from flask import Blueprint, request, jsonify, current_app
from src.dispatch import ErrorCategory
from src.monitoring import GATEWAY_ERRORS_TOTAL

logger = logging.getLogger(__name__)

chat_bp = Blueprint('chat', __name__)


@chat_bp.route('/api/deepseek', methods=['GET'])
def chat_usage():
    """Describe how to call the chat endpoint."""
    return jsonify({
        'message': 'Chat completion proxy is running',
        'usage': 'Send POST requests to this endpoint with messages array',
        'example': {
            'method': 'POST',
            'body': {
                'messages': [
                    {'role': 'user', 'content': 'Hello'}
                ]
            }
        }
    })


@chat_bp.route('/api/deepseek', methods=['POST'])
def chat_completion():
    """
    Chat completion endpoint.

    Request JSON:
        messages: [{role, content}, ...] (required, non-empty)
        max_tokens, temperature, top_p, ...: optional completion parameters

    Returns:
        200 OK: Upstream completion JSON
        400 Bad Request: Missing or invalid messages
        4xx/5xx: Last upstream status with {error, details, status, category, analysis}
        500 Internal Server Error: Network, signing or gateway failure
    """
    start_time = time.time()

    try:
        data = request.get_json(silent=True) or {}
        messages = data.get('messages')

        if not messages or not isinstance(messages, list):
            return jsonify({'error': 'Invalid request: messages array is required'}), 400

        options = {key: value for key, value in data.items() if key not in ('messages', 'model')}

        chat_client = current_app.config['CHAT_CLIENT']
        try:
            result = chat_client.complete(messages, options)
        except ValueError as e:
            return jsonify({'error': f'Invalid request: {e}'}), 400

        duration = time.time() - start_time

        if result.success:
            logger.info("Chat completion result", extra={
                'success': True,
                'duration_ms': round(duration * 1000, 2)
            })
            return jsonify(result.body), 200

        logger.warning("Chat completion failed", extra={
            'category': result.category.value,
            'status': result.status_code,
            'duration_ms': round(duration * 1000, 2)
        })

        if result.status_code is not None:
            return jsonify({
                'error': 'DeepSeek API Error',
                'details': result.body,
                'status': result.status_code,
                'category': result.category.value,
                'analysis': result.analysis
            }), result.status_code

        error = 'Network Error' if result.category is ErrorCategory.NETWORK_ERROR else 'Signing Error'
        return jsonify({
            'error': error,
            'details': result.error,
            'category': result.category.value,
            'analysis': result.analysis
        }), 500

    except Exception as e:
        GATEWAY_ERRORS_TOTAL.labels(endpoint='chat', error_type=type(e).__name__).inc()

        logger.error("Chat proxy error", extra={
            'error_type': type(e).__name__,
            'error_message': str(e),
            'duration_ms': round((time.time() - start_time) * 1000, 2)
        }, exc_info=True)

        return jsonify({'error': 'Proxy server error', 'details': str(e)}), 500
