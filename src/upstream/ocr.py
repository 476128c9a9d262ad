"""
General-text OCR client.

Calls POST https://ocr.<region>.myhuaweicloud.com/v2/ocr/general-text signed with
SDK-HMAC-SHA256. Failures are returned as classified results; no placeholder
text is ever substituted.
"""
import logging
from typing import Any, List, Optional, Sequence, Union

from src.config import GatewayConfig
from src.dispatch import AuthCandidate, AuthenticatedDispatcher, DispatchResult, DispatchTarget, SdkHmac
from src.trace import DebugTrace

logger = logging.getLogger(__name__)

DEFAULT_EXTRACT_TYPE = ('text', 'table')


class OcrClient:
    """Builds and dispatches OCR requests."""

    def __init__(
        self,
        config: GatewayConfig,
        dispatcher: Optional[AuthenticatedDispatcher] = None,
        candidates: Optional[Sequence[AuthCandidate]] = None
    ):
        """
        Initialize the OCR client.

        Args:
            config: Gateway configuration
            dispatcher: Dispatcher (created if not provided)
            candidates: Authentication candidates (default: a single SdkHmac
                candidate with the configured AK/SK)
        """
        self.config = config
        self.dispatcher = dispatcher or AuthenticatedDispatcher()
        if candidates is None:
            candidates = [SdkHmac(config.ocr_credential)]
        self.candidates = list(candidates)

    def build_target(
        self,
        image: str,
        detect_direction: bool = True,
        extract_type: Optional[Union[str, List[str]]] = None
    ) -> DispatchTarget:
        """
        Build the OCR request.

        Args:
            image: Base64-encoded image
            detect_direction: Ask the service to correct rotation
            extract_type: Content types to extract (default: text and table);
                a single string is treated as a one-item list

        Returns:
            DispatchTarget for the general-text endpoint

        Raises:
            ValueError: If no image data is given or extract_type is not a
                string or list of strings
        """
        if not image:
            raise ValueError("Image data is required")

        if extract_type is None:
            extract_type = list(DEFAULT_EXTRACT_TYPE)
        elif isinstance(extract_type, str):
            extract_type = [extract_type]
        elif not isinstance(extract_type, list) or not all(isinstance(item, str) for item in extract_type):
            raise ValueError("extract_type must be a list of strings")

        payload = {
            'image': image,
            'detect_direction': detect_direction,
            'extract_type': list(extract_type)
        }
        return DispatchTarget.json('ocr', self.config.ocr_endpoint, payload, self.config.ocr_timeout)

    def recognize(
        self,
        image: str,
        detect_direction: bool = True,
        extract_type: Optional[Union[str, List[str]]] = None,
        trace: Optional[DebugTrace] = None,
        timestamp: Optional[str] = None
    ) -> DispatchResult:
        """
        Run general-text OCR on an image.

        Args:
            image: Base64-encoded image
            detect_direction: Ask the service to correct rotation
            extract_type: Content types to extract
            trace: Trace to append steps to
            timestamp: Fixed signing timestamp (default: now)

        Returns:
            DispatchResult whose body holds the upstream JSON

        Raises:
            ValueError: If the request parameters are invalid
        """
        target = self.build_target(image, detect_direction, extract_type)
        return self.send(target, trace=trace, timestamp=timestamp)

    def send(
        self,
        target: DispatchTarget,
        trace: Optional[DebugTrace] = None,
        timestamp: Optional[str] = None
    ) -> DispatchResult:
        """
        Dispatch a prepared OCR request.

        Args:
            target: Request from build_target
            trace: Trace to append steps to
            timestamp: Fixed signing timestamp (default: now)

        Returns:
            DispatchResult whose body holds the upstream JSON
        """
        if trace is None:
            trace = DebugTrace()

        trace.record('request_body_prepared', size=len(target.body))

        result = self.dispatcher.dispatch(target, self.candidates, trace=trace, timestamp=timestamp)

        if result.success:
            blocks = len(self.words(result.body))
            trace.record('text_extracted', blocks=blocks)
            logger.info("OCR completed", extra={'extracted_blocks': blocks})

        return result

    @staticmethod
    def words(body: Any) -> List[str]:
        """
        Recognized text blocks from an OCR response body.

        Args:
            body: Upstream JSON ({result: {words_block_list: [{words: ...}]}})

        Returns:
            List of recognized strings (empty if the shape is unexpected)
        """
        if not isinstance(body, dict):
            return []
        result = body.get('result') or {}
        if not isinstance(result, dict):
            return []
        return [
            block.get('words', '')
            for block in result.get('words_block_list') or []
            if isinstance(block, dict)
        ]
