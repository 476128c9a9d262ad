"""
OCR endpoint blueprint.

Signs and forwards general-text OCR requests, returning the upstream result
together with a debugInfo object built from the request's DebugTrace.
"""
import time
import logging
from typing import Optional
from flask import Blueprint, request, jsonify, current_app
from src.dispatch import DispatchResult, ErrorCategory
from src.monitoring import GATEWAY_ERRORS_TOTAL
from src.signing import mask_value
from src.trace import DebugTrace
from src.upstream import OcrClient

logger = logging.getLogger(__name__)

ocr_bp = Blueprint('ocr', __name__)


def _debug_info(trace: DebugTrace, result: Optional[DispatchResult] = None) -> dict:
    """
    Assemble the debugInfo object.

    Contains trace steps, endpoint, masked access key and redacted outgoing
    headers. Secrets never appear.
    """
    config = current_app.config['GATEWAY_CONFIG']

    info = trace.to_dict()
    info['endpoint'] = config.ocr_endpoint
    info['region'] = config.ocr_region
    info['accessKey'] = mask_value(config.ocr_access_key)

    for entry in trace.entries:
        if entry.stage == 'request_body_prepared':
            info['request_body_size'] = entry.details.get('size')

    if result is not None:
        info['headers'] = result.request_headers
        info['attempts'] = [attempt.to_dict() for attempt in result.attempts]
        if result.success:
            info['extracted_blocks'] = len(OcrClient.words(result.body))
        else:
            info['category'] = result.category.value
            info['error_analysis'] = result.analysis

    return info


def _failure_message(result: DispatchResult) -> str:
    if result.status_code is not None:
        return f"Huawei OCR API error: {result.status_code}"
    if result.category is ErrorCategory.NETWORK_ERROR:
        return 'Cannot connect to Huawei OCR service'
    if result.category is ErrorCategory.SIGNING_ERROR:
        return 'Huawei OCR credentials not configured'
    return 'OCR request could not be signed'


@ocr_bp.route('/api/huawei-ocr', methods=['POST'])
def recognize_text():
    """
    OCR proxy endpoint.

    Request JSON:
        image: Base64 image (required)
        detect_direction: bool (default: true)
        extract_type: list of strings, or one string (default: ["text", "table"])

    Returns:
        200 OK: {success: true, result, debugInfo}
        400 Bad Request: {success: false, error, debugInfo} when image is missing
            or extract_type is not a string or list of strings
        4xx/5xx: {success: false, error, details, analysis, category, debugInfo}
            with the upstream status, or 500 for network/signing failures
    """
    start_time = time.time()
    trace = DebugTrace()
    trace.record('request_started')

    try:
        data = request.get_json(silent=True) or {}
        image = data.get('image')

        if not image:
            trace.record('validation_failed', error='No image data')
            return jsonify({
                'success': False,
                'error': 'Image data is required',
                'debugInfo': _debug_info(trace)
            }), 400

        ocr_client = current_app.config['OCR_CLIENT']
        try:
            target = ocr_client.build_target(
                image,
                detect_direction=data.get('detect_direction', True),
                extract_type=data.get('extract_type')
            )
        except ValueError as e:
            trace.record('validation_failed', error=str(e))
            return jsonify({
                'success': False,
                'error': f'Invalid request: {e}',
                'debugInfo': _debug_info(trace)
            }), 400

        trace.record('validation_passed')
        result = ocr_client.send(target, trace=trace)

        duration = time.time() - start_time

        if result.success:
            body = result.body if isinstance(result.body, dict) else {}
            logger.info("OCR result", extra={
                'request_id': trace.request_id,
                'success': True,
                'duration_ms': round(duration * 1000, 2)
            })
            return jsonify({
                'success': True,
                'result': body.get('result'),
                'debugInfo': _debug_info(trace, result)
            }), 200

        logger.warning("OCR failed", extra={
            'request_id': trace.request_id,
            'category': result.category.value,
            'status': result.status_code,
            'duration_ms': round(duration * 1000, 2)
        })

        return jsonify({
            'success': False,
            'error': _failure_message(result),
            'details': result.body if result.status_code is not None else result.error,
            'analysis': result.analysis,
            'category': result.category.value,
            'debugInfo': _debug_info(trace, result)
        }), result.status_code or 500

    except Exception as e:
        GATEWAY_ERRORS_TOTAL.labels(endpoint='ocr', error_type=type(e).__name__).inc()
        trace.record('error_occurred', error=str(e))

        logger.error("OCR proxy error", extra={
            'request_id': trace.request_id,
            'error_type': type(e).__name__,
            'error_message': str(e)
        }, exc_info=True)

        return jsonify({
            'success': False,
            'error': 'OCR proxy server error',
            'details': str(e),
            'analysis': 'Network or configuration issue',
            'debugInfo': _debug_info(trace)
        }), 500
