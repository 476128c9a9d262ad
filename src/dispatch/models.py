"""
Dispatch data models.
"""
import json
from enum import Enum
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional
from urllib.parse import urlsplit

from .classification import ErrorCategory


class AttemptOutcome(Enum):
    """Result of sending one candidate."""
    SUCCESS = "success"
    HTTP_ERROR = "http_error"
    NETWORK_ERROR = "network_error"


@dataclass(frozen=True)
class DispatchTarget:
    """
    Fixed request sent with each candidate's authentication headers.

    Attributes:
        name: Upstream label used in logs and metrics (e.g. 'ocr', 'chat')
        url: Absolute upstream URL
        body: Serialized payload, identical bytes for signing and sending
        timeout: Per-call timeout in seconds
        method: HTTP method
        headers: Base headers shared by every candidate
    """
    name: str
    url: str
    body: bytes
    timeout: float
    method: str = 'POST'
    headers: Dict[str, str] = field(default_factory=dict)

    @classmethod
    def json(
        cls,
        name: str,
        url: str,
        payload: Any,
        timeout: float,
        method: str = 'POST',
        headers: Optional[Dict[str, str]] = None
    ) -> 'DispatchTarget':
        """
        Create a target with a JSON payload.

        Args:
            name: Upstream label
            url: Absolute upstream URL
            payload: JSON-serializable body
            timeout: Per-call timeout in seconds
            method: HTTP method (default: POST)
            headers: Extra base headers

        Returns:
            DispatchTarget with Content-Type application/json
        """
        base_headers = {'Content-Type': 'application/json'}
        if headers:
            base_headers.update(headers)
        return cls(
            name=name,
            url=url,
            body=json.dumps(payload).encode('utf-8'),
            timeout=timeout,
            method=method,
            headers=base_headers
        )

    @property
    def host(self) -> str:
        return urlsplit(self.url).netloc

    @property
    def path(self) -> str:
        return urlsplit(self.url).path or '/'

    @property
    def query_string(self) -> str:
        return urlsplit(self.url).query


@dataclass
class DispatchAttempt:
    """
    Record of one candidate attempt.

    Attributes:
        candidate_index: Position in the candidate list (0-based)
        description: Non-secret description of the header set
        outcome: success | http_error | network_error
        status_code: Upstream status, when a response arrived
        body: Parsed upstream body, when a response arrived
        error: Network or HTTP error description
    """
    candidate_index: int
    description: str
    outcome: AttemptOutcome
    status_code: Optional[int] = None
    body: Any = None
    error: Optional[str] = None

    def to_dict(self) -> dict:
        return {
            'candidate_index': self.candidate_index,
            'description': self.description,
            'outcome': self.outcome.value,
            'status_code': self.status_code,
            'error': self.error
        }


@dataclass
class DispatchResult:
    """
    Normalized result of dispatching a target over its candidate list.

    On failure, status_code/body/error reflect the last attempt.

    Attributes:
        success: True only if an upstream returned 2xx
        target: Upstream label
        status_code: Last upstream status (None for network/signing failures)
        body: Parsed upstream body of the last response
        category: Failure classification (None on success)
        error: Failure description
        analysis: Human-readable diagnosis of the failure
        attempts: Every attempt in order
        request_headers: Redacted headers of the last attempt
    """
    success: bool
    target: str
    status_code: Optional[int] = None
    body: Any = None
    category: Optional[ErrorCategory] = None
    error: Optional[str] = None
    analysis: Optional[str] = None
    attempts: List[DispatchAttempt] = field(default_factory=list)
    request_headers: Dict[str, str] = field(default_factory=dict)

    @property
    def last_attempt(self) -> Optional[DispatchAttempt]:
        return self.attempts[-1] if self.attempts else None

    def to_dict(self) -> dict:
        """
        Convert to dictionary for logging/serialization.

        Returns:
            Dictionary representation of the result
        """
        return {
            'success': self.success,
            'target': self.target,
            'status_code': self.status_code,
            'body': self.body,
            'category': self.category.value if self.category else None,
            'error': self.error,
            'analysis': self.analysis,
            'attempts': [attempt.to_dict() for attempt in self.attempts]
        }
