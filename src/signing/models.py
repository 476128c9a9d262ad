"""
Signing data models.
"""
from typing import Dict, Optional, Union
from dataclasses import dataclass, field
from enum import Enum

from .masking import mask_value, redact_authorization


class SignatureScheme(Enum):
    """Supported signature algorithms."""
    SDK_HMAC_SHA256 = "SDK-HMAC-SHA256"
    AWS4_HMAC_SHA256 = "AWS4-HMAC-SHA256"


@dataclass(frozen=True)
class Credential:
    """
    Access-key/secret-key pair.

    Attributes:
        access_key_id: Public access key identifier
        secret_key: Shared secret, never logged
    """
    access_key_id: str
    secret_key: str = field(repr=False)

    def masked_access_key(self, visible: int = 8) -> str:
        """Short prefix of the access key that is safe to surface in diagnostics."""
        return mask_value(self.access_key_id, visible)


@dataclass
class SigningRequest:
    """
    Description of an HTTP request to be signed.

    Attributes:
        method: HTTP method
        uri: Request path, must start with '/'
        query_string: Raw query string (possibly empty)
        headers: Header name to value mapping (names are case-insensitive)
        body: Raw payload as str or bytes
    """
    method: str
    uri: str
    query_string: str = ''
    headers: Dict[str, str] = field(default_factory=dict)
    body: Union[str, bytes] = b''

    def body_bytes(self) -> bytes:
        """Payload as bytes (str bodies are UTF-8 encoded)."""
        if self.body is None:
            return b''
        if isinstance(self.body, str):
            return self.body.encode('utf-8')
        return self.body

    def get_header(self, name: str) -> Optional[str]:
        """Case-insensitive header lookup."""
        for key, value in self.headers.items():
            if key.lower() == name.lower():
                return value
        return None


@dataclass(frozen=True)
class SignedRequest:
    """
    Ready-to-send request metadata produced by a signer.

    Attributes:
        scheme: Algorithm used
        timestamp: Basic-format timestamp bound into the signature
        canonical_request: Canonical request string
        string_to_sign: Pre-image of the final HMAC
        signed_headers: ';'-joined lower-cased header names
        signature: Lowercase hex signature
        authorization: Full Authorization header value
        headers: Headers to send, including the date header and Authorization
        credential_scope: date/region/service/aws4_request (chain scheme only)
    """
    scheme: SignatureScheme
    timestamp: str
    canonical_request: str
    string_to_sign: str
    signed_headers: str
    signature: str
    authorization: str
    headers: Dict[str, str]
    credential_scope: Optional[str] = None

    def to_dict(self) -> dict:
        """
        Convert to dictionary for diagnostics.

        The Authorization value is truncated and the signature shortened.

        Returns:
            Dictionary representation without full signing material
        """
        return {
            'scheme': self.scheme.value,
            'timestamp': self.timestamp,
            'signed_headers': self.signed_headers,
            'signature': f"{self.signature[:16]}...",
            'credential_scope': self.credential_scope,
        }

    def redacted_headers(self, access_key_id: str) -> Dict[str, str]:
        """Headers to send with the access key and signature in Authorization masked."""
        redacted = dict(self.headers)
        redacted['Authorization'] = redact_authorization(self.authorization, access_key_id)
        return redacted
