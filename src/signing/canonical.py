"""
Canonical request construction.

The canonical request is the byte-exact pre-image that both sides hash, so every
separator matters. Both schemes use the same layout, with the header block
terminated by its own newline before the signed-header list:

    METHOD\nURI\nQUERY\nCANONICAL_HEADERS\n\nSIGNED_HEADERS\nPAYLOAD_HASH

The schemes differ only from the string to sign onward.
"""
import hashlib
from typing import Dict, List, Tuple

from .errors import MalformedRequest
from .models import SigningRequest

# sha256 of the empty string
EMPTY_PAYLOAD_HASH = 'e3b0c44298fc1c149afbf4c8996fb92427ae41e4649b934ca495991b7852b855'


def sha256_hex(data: bytes) -> str:
    """Lowercase hex SHA-256 digest."""
    return hashlib.sha256(data).hexdigest()


class CanonicalRequestBuilder:
    """
    Normalizes a SigningRequest into its canonical string.

    Header names are lower-cased and sorted; values are trimmed but otherwise
    preserved verbatim. Names that differ only in case collapse into one entry.
    """

    def normalize_headers(self, headers: Dict[str, str]) -> List[Tuple[str, str]]:
        """
        Lower-case, trim, de-duplicate and sort header entries.

        Args:
            headers: Header mapping as supplied by the caller

        Returns:
            Sorted list of (lower-cased name, trimmed value)

        Raises:
            MalformedRequest: If a name is empty or two spellings of the same
                name carry different values
        """
        merged: Dict[str, str] = {}
        for name, value in headers.items():
            if name is None or not str(name).strip():
                raise MalformedRequest("Header name must not be empty")

            key = str(name).strip().lower()
            normalized = '' if value is None else str(value).strip()

            if key in merged and merged[key] != normalized:
                raise MalformedRequest(f"Conflicting values for header '{key}'")
            merged[key] = normalized

        return sorted(merged.items())

    def canonical_headers(self, headers: Dict[str, str]) -> str:
        """'name:value' lines joined with newlines, no trailing newline."""
        return '\n'.join(f"{name}:{value}" for name, value in self.normalize_headers(headers))

    def signed_headers(self, headers: Dict[str, str]) -> str:
        """Sorted lower-cased header names joined with ';'."""
        return ';'.join(name for name, _ in self.normalize_headers(headers))

    @staticmethod
    def hash_payload(body: bytes) -> str:
        """SHA-256 of the raw body; an empty body hashes to EMPTY_PAYLOAD_HASH."""
        return sha256_hex(body or b'')

    def validate(self, request: SigningRequest) -> None:
        """
        Check the request can be canonicalized.

        Raises:
            MalformedRequest: On a missing method, a URI not starting with '/',
                or a missing Host header
        """
        if not request.method:
            raise MalformedRequest("HTTP method is required")
        if not request.uri or not request.uri.startswith('/'):
            raise MalformedRequest(f"URI must start with '/': {request.uri!r}")
        if request.get_header('Host') is None:
            raise MalformedRequest("Host header is required before signing")

    def build(self, request: SigningRequest) -> str:
        """
        Produce the canonical request string.

        Args:
            request: Request description

        Returns:
            Canonical request

        Raises:
            MalformedRequest: If the request is invalid
        """
        self.validate(request)

        parts = [
            request.method.upper(),
            request.uri,
            request.query_string or '',
            self.canonical_headers(request.headers),
            '',
            self.signed_headers(request.headers),
            self.hash_payload(request.body_bytes()),
        ]

        return '\n'.join(parts)
