"""
Authorization header composition.
"""
from .models import SignatureScheme


class AuthHeaderComposer:
    """Builds Authorization header values for each signature scheme."""

    @staticmethod
    def compose_sdk(access_key_id: str, signed_headers: str, signature: str) -> str:
        """
        SDK-HMAC-SHA256 Access=<ak>, SignedHeaders=<names>, Signature=<hex>
        """
        return (
            f"{SignatureScheme.SDK_HMAC_SHA256.value} Access={access_key_id}, "
            f"SignedHeaders={signed_headers}, Signature={signature}"
        )

    @staticmethod
    def compose_aws4(access_key_id: str, scope: str, signed_headers: str, signature: str) -> str:
        """
        AWS4-HMAC-SHA256 Credential=<ak>/<scope>, SignedHeaders=<names>, Signature=<hex>
        """
        return (
            f"{SignatureScheme.AWS4_HMAC_SHA256.value} Credential={access_key_id}/{scope}, "
            f"SignedHeaders={signed_headers}, Signature={signature}"
        )
