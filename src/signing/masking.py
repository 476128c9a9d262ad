"""
Masking of credentials and Authorization values for logs and debug output.
"""


def mask_value(value: str, visible: int = 8) -> str:
    """Show only the first few characters of a credential."""
    if not value:
        return 'NOT SET'
    return f"{value[:visible]}..."


def truncate_authorization(value: str, length: int = 50) -> str:
    """Shorten an Authorization value for logs and debug output."""
    if not value:
        return ''
    if len(value) <= length:
        return value
    return f"{value[:length]}..."


def redact_authorization(value: str, access_key_id: str = '') -> str:
    """
    Make an Authorization value safe for logs and debug output.

    Bearer tokens and access keys are reduced to a short prefix and the
    signature is truncated.
    """
    if not value:
        return ''
    if value.lower().startswith('bearer '):
        return f"Bearer {mask_value(value[7:].strip())}"

    if access_key_id:
        value = value.replace(access_key_id, mask_value(access_key_id))

    head, marker, signature = value.rpartition('Signature=')
    if marker:
        return f"{head}{marker}{signature[:8]}..."
    return truncate_authorization(value)
