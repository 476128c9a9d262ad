"""
Request signing for AK/SK authenticated upstream calls.

Two strategies share the canonical request -> string to sign pipeline and differ
only in layout and key material:

SDK-HMAC-SHA256:
    StringToSign: {ALGORITHM}\n{TIMESTAMP}\n{sha256(canonical_request)}
    Signature:    hex(HMAC(secret_key, string_to_sign))
    Header:       SDK-HMAC-SHA256 Access=ak, SignedHeaders=..., Signature=hex

AWS4-HMAC-SHA256:
    StringToSign: {ALGORITHM}\n{TIMESTAMP}\n{SCOPE}\n{sha256(canonical_request)}
    Signature:    hex(HMAC(kSigning, string_to_sign))
    Header:       AWS4-HMAC-SHA256 Credential=ak/scope, SignedHeaders=..., Signature=hex
"""
import re
import hmac
import hashlib
from abc import ABC, abstractmethod
from datetime import datetime, timezone
from typing import Dict, Optional, Union

from .canonical import CanonicalRequestBuilder, sha256_hex
from .composer import AuthHeaderComposer
from .errors import MalformedRequest, SigningError
from .key_derivation import credential_scope, derive_signing_key
from .models import Credential, SignatureScheme, SignedRequest, SigningRequest

TIMESTAMP_FORMAT = '%Y%m%dT%H%M%SZ'
_TIMESTAMP_PATTERN = re.compile(r'^\d{8}T\d{6}Z$')


def format_sdk_timestamp(moment: Optional[datetime] = None) -> str:
    """
    Format a moment as a basic-format UTC timestamp (e.g. 20240101T120000Z).

    Args:
        moment: Datetime to format (default: now). Naive values are treated as UTC.

    Returns:
        Timestamp string without punctuation
    """
    if moment is None:
        moment = datetime.now(timezone.utc)
    elif moment.tzinfo is None:
        moment = moment.replace(tzinfo=timezone.utc)
    return moment.astimezone(timezone.utc).strftime(TIMESTAMP_FORMAT)


class RequestSigner(ABC):
    """
    Base signing strategy.

    Subclasses supply the scheme, the string-to-sign layout, the key material
    and the Authorization header format.
    """

    scheme: SignatureScheme
    default_date_header: str

    def __init__(self, credential: Optional[Credential], date_header: Optional[str] = None):
        """
        Initialize the signer.

        Args:
            credential: AK/SK pair (validated at signing time)
            date_header: Header carrying the timestamp (default depends on scheme)
        """
        self.credential = credential
        self.date_header = date_header or self.default_date_header
        self.builder = CanonicalRequestBuilder()

    def _require_credential(self) -> Credential:
        if self.credential is None or not self.credential.secret_key:
            raise SigningError("Secret key is not configured")
        if not self.credential.access_key_id:
            raise SigningError("Access key is not configured")
        return self.credential

    def _with_date_header(self, request: SigningRequest, timestamp: str) -> Dict[str, str]:
        """
        Copy the request headers and make sure the date header carries `timestamp`.

        Raises:
            MalformedRequest: If the caller already set a different date
        """
        headers = dict(request.headers)
        existing = request.get_header(self.date_header)

        if existing is None:
            headers[self.date_header] = timestamp
        elif existing.strip() != timestamp:
            raise MalformedRequest(
                f"{self.date_header} header ({existing}) does not match signing timestamp ({timestamp})"
            )

        return headers

    @abstractmethod
    def string_to_sign(self, canonical_request: str, timestamp: str) -> str:
        """Build the string to sign from the canonical request."""
        ...

    @abstractmethod
    def compute_signature(self, string_to_sign: str, timestamp: str) -> str:
        """HMAC the string to sign and return lowercase hex."""
        ...

    @abstractmethod
    def compose_authorization(self, signed_headers: str, signature: str, timestamp: str) -> str:
        """Authorization header value for the computed signature."""
        ...

    def scope(self, timestamp: str) -> Optional[str]:
        """Credential scope bound into the signature, if the scheme has one."""
        return None

    def sign(self, request: SigningRequest, timestamp: Optional[str] = None) -> SignedRequest:
        """
        Sign a request.

        Args:
            request: Request description (must include a Host header)
            timestamp: Basic-format timestamp (default: now)

        Returns:
            SignedRequest with the headers to send

        Raises:
            SigningError: If credential material is missing
            MalformedRequest: If the request cannot be canonicalized
        """
        credential = self._require_credential()

        if timestamp is None:
            timestamp = format_sdk_timestamp()
        elif not _TIMESTAMP_PATTERN.match(timestamp):
            raise MalformedRequest(f"Timestamp must look like 20240101T120000Z: {timestamp!r}")

        headers = self._with_date_header(request, timestamp)
        prepared = SigningRequest(
            method=request.method,
            uri=request.uri,
            query_string=request.query_string,
            headers=headers,
            body=request.body
        )

        canonical_request = self.builder.build(prepared)
        signed_headers = self.builder.signed_headers(prepared.headers)
        string_to_sign = self.string_to_sign(canonical_request, timestamp)
        signature = self.compute_signature(string_to_sign, timestamp)
        authorization = self.compose_authorization(signed_headers, signature, timestamp)

        outgoing = dict(headers)
        outgoing['Authorization'] = authorization

        return SignedRequest(
            scheme=self.scheme,
            timestamp=timestamp,
            canonical_request=canonical_request,
            string_to_sign=string_to_sign,
            signed_headers=signed_headers,
            signature=signature,
            authorization=authorization,
            headers=outgoing,
            credential_scope=self.scope(timestamp)
        )

    def sign_post(
        self,
        uri: str,
        body: Union[str, bytes],
        headers: Dict[str, str],
        timestamp: Optional[str] = None
    ) -> SignedRequest:
        """
        Sign a POST request.

        Args:
            uri: Request path
            body: Request body
            headers: Request headers (including Host)
            timestamp: Optional fixed timestamp

        Returns:
            SignedRequest
        """
        return self.sign(SigningRequest('POST', uri, '', headers, body), timestamp)

    def sign_get(
        self,
        uri: str,
        headers: Dict[str, str],
        query_string: str = '',
        timestamp: Optional[str] = None
    ) -> SignedRequest:
        """
        Sign a GET request.

        Args:
            uri: Request path
            headers: Request headers (including Host)
            query_string: Raw query string
            timestamp: Optional fixed timestamp

        Returns:
            SignedRequest
        """
        return self.sign(SigningRequest('GET', uri, query_string, headers, b''), timestamp)


class SdkHmacSigner(RequestSigner):
    """Single-HMAC strategy keyed directly by the secret key."""

    scheme = SignatureScheme.SDK_HMAC_SHA256
    default_date_header = 'X-Sdk-Date'

    def string_to_sign(self, canonical_request: str, timestamp: str) -> str:
        return '\n'.join([
            self.scheme.value,
            timestamp,
            sha256_hex(canonical_request.encode('utf-8'))
        ])

    def compute_signature(self, string_to_sign: str, timestamp: str) -> str:
        credential = self._require_credential()
        return hmac.new(
            credential.secret_key.encode('utf-8'),
            string_to_sign.encode('utf-8'),
            hashlib.sha256
        ).hexdigest()

    def compose_authorization(self, signed_headers: str, signature: str, timestamp: str) -> str:
        return AuthHeaderComposer.compose_sdk(
            self.credential.access_key_id,
            signed_headers,
            signature
        )


class Aws4ChainSigner(RequestSigner):
    """Derived-key strategy scoped to date, region and service."""

    scheme = SignatureScheme.AWS4_HMAC_SHA256
    default_date_header = 'X-Amz-Date'

    def __init__(
        self,
        credential: Optional[Credential],
        region: str,
        service: str,
        date_header: Optional[str] = None
    ):
        """
        Initialize the chain signer.

        Args:
            credential: AK/SK pair
            region: Region bound into the credential scope
            service: Service name bound into the credential scope
            date_header: Header carrying the timestamp (default: X-Amz-Date)
        """
        super().__init__(credential, date_header)
        self.region = region
        self.service = service

    def _require_credential(self) -> Credential:
        if not self.region or not self.service:
            raise SigningError("Region and service are required for the credential scope")
        return super()._require_credential()

    def scope(self, timestamp: str) -> str:
        return credential_scope(timestamp[:8], self.region, self.service)

    def string_to_sign(self, canonical_request: str, timestamp: str) -> str:
        return '\n'.join([
            self.scheme.value,
            timestamp,
            self.scope(timestamp),
            sha256_hex(canonical_request.encode('utf-8'))
        ])

    def compute_signature(self, string_to_sign: str, timestamp: str) -> str:
        credential = self._require_credential()
        signing_key = derive_signing_key(
            credential.secret_key,
            timestamp[:8],
            self.region,
            self.service
        )
        return hmac.new(signing_key, string_to_sign.encode('utf-8'), hashlib.sha256).hexdigest()

    def compose_authorization(self, signed_headers: str, signature: str, timestamp: str) -> str:
        return AuthHeaderComposer.compose_aws4(
            self.credential.access_key_id,
            self.scope(timestamp),
            signed_headers,
            signature
        )
