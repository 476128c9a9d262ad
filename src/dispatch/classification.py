"""
Failure classification for upstream calls.
"""
from enum import Enum
from typing import Optional


class ErrorCategory(Enum):
    """Terminal failure categories surfaced to callers."""
    MALFORMED_REQUEST = "malformed_request"
    SIGNING_ERROR = "signing_error"
    AUTHENTICATION_FAILURE = "authentication_failure"
    AUTHORIZATION_FAILURE = "authorization_failure"
    NOT_FOUND = "not_found"
    RATE_LIMITED = "rate_limited"
    UPSTREAM_SERVER_ERROR = "upstream_server_error"
    UPSTREAM_CLIENT_ERROR = "upstream_client_error"
    NETWORK_ERROR = "network_error"

    @property
    def is_transient(self) -> bool:
        """Whether the caller may reasonably retry the whole call later."""
        return self in (
            ErrorCategory.RATE_LIMITED,
            ErrorCategory.UPSTREAM_SERVER_ERROR,
            ErrorCategory.NETWORK_ERROR
        )


ANALYSIS = {
    ErrorCategory.MALFORMED_REQUEST: 'Request could not be signed - check URI and headers',
    ErrorCategory.SIGNING_ERROR: 'Credentials not configured - check AK/SK settings',
    ErrorCategory.AUTHENTICATION_FAILURE: 'Authentication failed - check AK/SK credentials',
    ErrorCategory.AUTHORIZATION_FAILURE: 'Access forbidden - check permissions and service activation',
    ErrorCategory.NOT_FOUND: 'Service not found - check region and endpoint URL',
    ErrorCategory.RATE_LIMITED: 'Rate limit exceeded - too many requests',
    ErrorCategory.UPSTREAM_SERVER_ERROR: 'Server error - upstream service issue',
    ErrorCategory.UPSTREAM_CLIENT_ERROR: 'Request rejected by upstream service',
    ErrorCategory.NETWORK_ERROR: 'Network or configuration issue',
}

TIMEOUT_ANALYSIS = 'Request timeout - service too slow or network issue'
CONNECTION_ANALYSIS = 'Connection refused - check network and endpoint'


def classify_status(status_code: int) -> Optional[ErrorCategory]:
    """
    Map an HTTP status to a failure category.

    Args:
        status_code: Upstream HTTP status

    Returns:
        ErrorCategory, or None for 2xx
    """
    if 200 <= status_code < 300:
        return None
    if status_code == 401:
        return ErrorCategory.AUTHENTICATION_FAILURE
    if status_code == 403:
        return ErrorCategory.AUTHORIZATION_FAILURE
    if status_code == 404:
        return ErrorCategory.NOT_FOUND
    if status_code == 429:
        return ErrorCategory.RATE_LIMITED
    if status_code >= 500:
        return ErrorCategory.UPSTREAM_SERVER_ERROR
    return ErrorCategory.UPSTREAM_CLIENT_ERROR


def analyze(category: Optional[ErrorCategory]) -> Optional[str]:
    """Human-readable diagnosis for a category."""
    if category is None:
        return None
    return ANALYSIS[category]
