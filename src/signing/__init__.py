"""
Request signing components.
"""
from .errors import SigningFailure, MalformedRequest, SigningError
from .models import Credential, SigningRequest, SignedRequest, SignatureScheme
from .canonical import CanonicalRequestBuilder, EMPTY_PAYLOAD_HASH
from .key_derivation import derive_signing_key, credential_scope
from .composer import AuthHeaderComposer
from .masking import mask_value, redact_authorization
from .request_signer import RequestSigner, SdkHmacSigner, Aws4ChainSigner, format_sdk_timestamp

__all__ = [
    'SigningFailure',
    'MalformedRequest',
    'SigningError',
    'Credential',
    'SigningRequest',
    'SignedRequest',
    'SignatureScheme',
    'CanonicalRequestBuilder',
    'EMPTY_PAYLOAD_HASH',
    'derive_signing_key',
    'credential_scope',
    'AuthHeaderComposer',
    'mask_value',
    'redact_authorization',
    'RequestSigner',
    'SdkHmacSigner',
    'Aws4ChainSigner',
    'format_sdk_timestamp',
]
