"""
Exceptions raised while building and signing outbound requests.
"""


class SigningFailure(Exception):
    """Base class for failures that happen before a request leaves the process."""
    pass


class MalformedRequest(SigningFailure):
    """Request description cannot be canonicalized (bad URI, empty or conflicting headers)."""
    pass


class SigningError(SigningFailure):
    """Credential material is missing or unusable."""
    pass
