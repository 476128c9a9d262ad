"""
Scoped signing key derivation for the AWS4-HMAC-SHA256 scheme.
"""
import hmac
import hashlib

AWS4_REQUEST = 'aws4_request'


def hmac_sha256(key: bytes, data: str) -> bytes:
    """Raw HMAC-SHA256 digest of a UTF-8 string."""
    return hmac.new(key, data.encode('utf-8'), hashlib.sha256).digest()


def credential_scope(date: str, region: str, service: str) -> str:
    """date/region/service/aws4_request"""
    return f"{date}/{region}/{service}/{AWS4_REQUEST}"


def derive_signing_key(secret_key: str, date: str, region: str, service: str) -> bytes:
    """
    Derive the request signing key.

    kDate    = HMAC("AWS4" + secret, date)
    kRegion  = HMAC(kDate, region)
    kService = HMAC(kRegion, service)
    kSigning = HMAC(kService, "aws4_request")

    Intermediate keys stay raw bytes; only the final signature is hex-encoded.

    Args:
        secret_key: Secret key
        date: YYYYMMDD (first 8 characters of the timestamp)
        region: Region name
        service: Service name

    Returns:
        32-byte signing key
    """
    k_date = hmac_sha256(f"AWS4{secret_key}".encode('utf-8'), date)
    k_region = hmac_sha256(k_date, region)
    k_service = hmac_sha256(k_region, service)
    return hmac_sha256(k_service, AWS4_REQUEST)
