"""
Candidate authentication header sets.

Each candidate turns a DispatchTarget into the headers for one attempt. The
dispatcher is generic over an ordered list of these.
"""
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Dict, Optional

from src.signing import (
    Aws4ChainSigner,
    Credential,
    SdkHmacSigner,
    SigningError,
    SigningRequest,
    mask_value,
    redact_authorization,
)
from .models import DispatchTarget


class AuthCandidate(ABC):
    """One way of authenticating a request."""

    kind: str

    @abstractmethod
    def build_headers(self, target: DispatchTarget, timestamp: str) -> Dict[str, str]:
        """
        Headers to send for this attempt (base headers included).

        Raises:
            SigningError: If credential material is missing
            MalformedRequest: If the target cannot be signed
        """
        ...

    @abstractmethod
    def describe(self) -> str:
        """Description safe for logs and debug output."""
        ...

    def redact(self, headers: Dict[str, str]) -> Dict[str, str]:
        """Copy of headers with the Authorization value redacted."""
        credential = getattr(self, 'credential', None)
        access_key = credential.access_key_id if credential else ''

        redacted = dict(headers)
        for key, value in headers.items():
            if key.lower() == 'authorization':
                redacted[key] = redact_authorization(value, access_key)
        return redacted


@dataclass(frozen=True)
class BearerToken(AuthCandidate):
    """Static token sent as '<prefix> <token>' in a header."""
    token: Optional[str] = field(repr=False)
    header_name: str = 'Authorization'
    prefix: str = 'Bearer'
    kind = 'bearer_token'

    def build_headers(self, target: DispatchTarget, timestamp: str) -> Dict[str, str]:
        if not self.token:
            raise SigningError("API token is not configured")
        headers = dict(target.headers)
        headers[self.header_name] = f"{self.prefix} {self.token}" if self.prefix else self.token
        return headers

    def describe(self) -> str:
        return f"BearerToken({self.header_name})"

    def redact(self, headers: Dict[str, str]) -> Dict[str, str]:
        redacted = super().redact(headers)
        if self.header_name in redacted and self.header_name.lower() != 'authorization':
            redacted[self.header_name] = mask_value(redacted[self.header_name])
        return redacted


def _signing_request(target: DispatchTarget) -> SigningRequest:
    headers = dict(target.headers)
    headers['Host'] = target.host
    return SigningRequest(
        method=target.method,
        uri=target.path,
        query_string=target.query_string,
        headers=headers,
        body=target.body
    )


@dataclass(frozen=True)
class SdkHmac(AuthCandidate):
    """AK/SK signature with the SDK-HMAC-SHA256 scheme."""
    credential: Optional[Credential]
    date_header: str = 'X-Sdk-Date'
    kind = 'sdk_hmac'

    def build_headers(self, target: DispatchTarget, timestamp: str) -> Dict[str, str]:
        signer = SdkHmacSigner(self.credential, date_header=self.date_header)
        return signer.sign(_signing_request(target), timestamp).headers

    def describe(self) -> str:
        access_key = self.credential.masked_access_key() if self.credential else 'NOT SET'
        return f"SdkHmac(Access={access_key})"


@dataclass(frozen=True)
class Aws4Chain(AuthCandidate):
    """AK/SK signature with the AWS4-HMAC-SHA256 derived-key scheme."""
    credential: Optional[Credential]
    region: str
    service: str
    date_header: str = 'X-Amz-Date'
    kind = 'aws4_chain'

    def build_headers(self, target: DispatchTarget, timestamp: str) -> Dict[str, str]:
        signer = Aws4ChainSigner(
            self.credential,
            region=self.region,
            service=self.service,
            date_header=self.date_header
        )
        return signer.sign(_signing_request(target), timestamp).headers

    def describe(self) -> str:
        access_key = self.credential.masked_access_key() if self.credential else 'NOT SET'
        return f"Aws4Chain(Credential={access_key}/{self.region}/{self.service})"
