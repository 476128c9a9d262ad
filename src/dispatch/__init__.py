"""
Authenticated dispatch to upstream APIs.
"""
from .classification import ErrorCategory, classify_status, analyze
from .models import AttemptOutcome, DispatchAttempt, DispatchResult, DispatchTarget
from .candidates import AuthCandidate, BearerToken, SdkHmac, Aws4Chain
from .dispatcher import AuthenticatedDispatcher

__all__ = [
    'ErrorCategory',
    'classify_status',
    'analyze',
    'AttemptOutcome',
    'DispatchAttempt',
    'DispatchResult',
    'DispatchTarget',
    'AuthCandidate',
    'BearerToken',
    'SdkHmac',
    'Aws4Chain',
    'AuthenticatedDispatcher',
]
