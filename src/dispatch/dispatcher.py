"""
Authenticated dispatch over an ordered list of candidate header sets.

State machine:
    Idle -> Attempting(i) -> Success | Attempting(i+1) | ExhaustedFailure

The candidate list varies the authentication method; it is not a retry loop.
There is no backoff and no retry beyond the list.
"""
import time
import logging
from typing import Any, Optional, Sequence

import requests

from src.monitoring import UPSTREAM_FAILURES_TOTAL, observe_upstream_attempt
from src.signing import MalformedRequest, SigningError, format_sdk_timestamp
from src.trace import DebugTrace
from .candidates import AuthCandidate
from .classification import (
    CONNECTION_ANALYSIS,
    TIMEOUT_ANALYSIS,
    ErrorCategory,
    analyze,
    classify_status,
)
from .models import AttemptOutcome, DispatchAttempt, DispatchResult, DispatchTarget

logger = logging.getLogger(__name__)


def _parse_body(response) -> Any:
    """JSON body if it parses, raw text otherwise."""
    try:
        return response.json()
    except ValueError:
        return response.text


class AuthenticatedDispatcher:
    """
    Sends a fixed target with each candidate's headers until one succeeds.

    Safe to share between concurrent callers: each dispatch call keeps its own
    attempts and trace, and the session is only used to send.
    """

    def __init__(self, session: Optional[requests.Session] = None):
        """
        Initialize the dispatcher.

        Args:
            session: HTTP session (default: new requests.Session)
        """
        self.session = session or requests.Session()

    def dispatch(
        self,
        target: DispatchTarget,
        candidates: Sequence[AuthCandidate],
        trace: Optional[DebugTrace] = None,
        timestamp: Optional[str] = None
    ) -> DispatchResult:
        """
        Try each candidate in order.

        Args:
            target: Request to send
            candidates: Ordered candidate header sets (at least one)
            trace: Trace to append steps to (created if not provided)
            timestamp: Fixed signing timestamp (default: now, per attempt)

        Returns:
            DispatchResult for the first 2xx, or for the last failure

        Raises:
            ValueError: If no candidates are given
        """
        if not candidates:
            raise ValueError("At least one authentication candidate is required")

        if trace is None:
            trace = DebugTrace()

        trace.record(
            'dispatch_started',
            target=target.name,
            endpoint=target.url,
            candidates=len(candidates),
            request_body_size=len(target.body)
        )

        attempts = []
        request_headers = {}
        last_analysis = None

        for index, candidate in enumerate(candidates):
            description = candidate.describe()

            try:
                headers = candidate.build_headers(target, timestamp or format_sdk_timestamp())
            except MalformedRequest as e:
                return self._signing_failure(
                    target, trace, attempts, ErrorCategory.MALFORMED_REQUEST, str(e), index
                )
            except SigningError as e:
                return self._signing_failure(
                    target, trace, attempts, ErrorCategory.SIGNING_ERROR, str(e), index
                )

            request_headers = candidate.redact(headers)
            trace.record('headers_prepared', candidate=index, description=description)

            logger.info("Dispatching upstream request", extra={
                'upstream': target.name,
                'candidate': index,
                'description': description
            })

            started_at = time.time()
            try:
                response = self.session.request(
                    target.method,
                    target.url,
                    data=target.body,
                    headers=headers,
                    timeout=target.timeout
                )
            except requests.exceptions.RequestException as e:
                if isinstance(e, requests.exceptions.Timeout):
                    last_analysis = TIMEOUT_ANALYSIS
                elif isinstance(e, requests.exceptions.ConnectionError):
                    last_analysis = CONNECTION_ANALYSIS
                else:
                    last_analysis = analyze(ErrorCategory.NETWORK_ERROR)

                error = f"{type(e).__name__}: {e}"
                attempts.append(DispatchAttempt(
                    candidate_index=index,
                    description=description,
                    outcome=AttemptOutcome.NETWORK_ERROR,
                    error=error
                ))
                observe_upstream_attempt(target.name, AttemptOutcome.NETWORK_ERROR.value, started_at)
                trace.record('attempt_failed', error=error, candidate=index, description=description)

                logger.warning("Upstream attempt failed - network error", extra={
                    'upstream': target.name,
                    'candidate': index,
                    'error_type': type(e).__name__,
                    'error_message': str(e)
                })
                continue

            body = _parse_body(response)
            status_code = response.status_code

            if 200 <= status_code < 300:
                attempts.append(DispatchAttempt(
                    candidate_index=index,
                    description=description,
                    outcome=AttemptOutcome.SUCCESS,
                    status_code=status_code,
                    body=body
                ))
                observe_upstream_attempt(target.name, AttemptOutcome.SUCCESS.value, started_at)
                trace.record('attempt_succeeded', candidate=index, description=description, status=status_code)

                logger.info("Upstream call succeeded", extra={
                    'upstream': target.name,
                    'candidate': index,
                    'status': status_code
                })

                return DispatchResult(
                    success=True,
                    target=target.name,
                    status_code=status_code,
                    body=body,
                    attempts=attempts,
                    request_headers=request_headers
                )

            error = f"HTTP {status_code}"
            last_analysis = analyze(classify_status(status_code))
            attempts.append(DispatchAttempt(
                candidate_index=index,
                description=description,
                outcome=AttemptOutcome.HTTP_ERROR,
                status_code=status_code,
                body=body,
                error=error
            ))
            observe_upstream_attempt(target.name, AttemptOutcome.HTTP_ERROR.value, started_at)
            trace.record(
                'attempt_failed',
                error=error,
                candidate=index,
                description=description,
                status=status_code
            )

            logger.warning("Upstream attempt failed - HTTP error", extra={
                'upstream': target.name,
                'candidate': index,
                'status': status_code
            })

        last = attempts[-1]
        if last.outcome is AttemptOutcome.NETWORK_ERROR:
            category = ErrorCategory.NETWORK_ERROR
        else:
            category = classify_status(last.status_code)

        UPSTREAM_FAILURES_TOTAL.labels(upstream=target.name, category=category.value).inc()
        trace.record(
            'dispatch_exhausted',
            error=last.error,
            category=category.value,
            analysis=last_analysis,
            attempts=len(attempts)
        )

        logger.error("All authentication candidates failed", extra={
            'upstream': target.name,
            'category': category.value,
            'status': last.status_code,
            'attempts': len(attempts)
        })

        return DispatchResult(
            success=False,
            target=target.name,
            status_code=last.status_code,
            body=last.body,
            category=category,
            error=last.error,
            analysis=last_analysis,
            attempts=attempts,
            request_headers=request_headers
        )

    def _signing_failure(
        self,
        target: DispatchTarget,
        trace: DebugTrace,
        attempts: list,
        category: ErrorCategory,
        error: str,
        index: int
    ) -> DispatchResult:
        """Terminal result for a candidate that could not be signed; nothing is sent."""
        UPSTREAM_FAILURES_TOTAL.labels(upstream=target.name, category=category.value).inc()
        trace.record('signature_failed', error=error, candidate=index, category=category.value)

        logger.error("Request signing failed", extra={
            'upstream': target.name,
            'candidate': index,
            'category': category.value,
            'error_message': error
        })

        return DispatchResult(
            success=False,
            target=target.name,
            category=category,
            error=error,
            analysis=analyze(category),
            attempts=attempts
        )
