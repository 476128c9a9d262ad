#!/usr/bin/env python
"""
Script to print the signing steps for a request.

Shows the canonical request, string to sign and Authorization header so a
signature can be compared against upstream documentation or another client.
The secret key is read from the environment and never printed.

Usage:
  python scripts/sign_request.py --uri /v2/ocr/general-text --body '{}'
  python scripts/sign_request.py --scheme aws4 --service ocr --timestamp 20240101T000000Z
"""

import sys
import argparse
from dotenv import load_dotenv

from src.config import load_config
from src.signing import (
    Aws4ChainSigner,
    MalformedRequest,
    SdkHmacSigner,
    SigningError,
    SigningRequest,
    mask_value,
)


def parse_header(value: str) -> tuple:
    """Parse a 'Name: value' argument."""
    if ':' not in value:
        raise argparse.ArgumentTypeError(f"Header must look like 'Name: value', got {value!r}")
    name, header_value = value.split(':', 1)
    return name.strip(), header_value.strip()


def main():
    """Main function to sign a request and print each step."""
    load_dotenv()
    config = load_config()

    parser = argparse.ArgumentParser(description='Print the signing steps for a request')
    parser.add_argument('--scheme', choices=['sdk', 'aws4'], default='sdk', help='Signature scheme (default: sdk)')
    parser.add_argument('--method', default='POST', help='HTTP method (default: POST)')
    parser.add_argument('--uri', default='/v2/ocr/general-text', help='Request path')
    parser.add_argument('--query', default='', help='Raw query string')
    parser.add_argument('--host', default=config.ocr_host, help='Host header (default: OCR host for region)')
    parser.add_argument('--header', action='append', type=parse_header, default=[], help="Extra header 'Name: value'")
    parser.add_argument('--body', default='', help='Request body')
    parser.add_argument('--timestamp', help='Fixed timestamp, e.g. 20240101T000000Z (default: now)')
    parser.add_argument('--region', default=config.ocr_region, help='Region for the aws4 scope')
    parser.add_argument('--service', default='ocr', help='Service for the aws4 scope (default: ocr)')
    args = parser.parse_args()

    credential = config.ocr_credential
    if args.scheme == 'sdk':
        signer = SdkHmacSigner(credential)
    else:
        signer = Aws4ChainSigner(credential, region=args.region, service=args.service)

    headers = {'Content-Type': 'application/json', 'Host': args.host}
    headers.update(dict(args.header))

    try:
        signed = signer.sign(
            SigningRequest(args.method, args.uri, args.query, headers, args.body),
            args.timestamp
        )
    except (SigningError, MalformedRequest) as e:
        print(f"✗ {type(e).__name__}: {e}")
        sys.exit(1)

    print("=" * 80)
    print(f"Scheme:     {signed.scheme.value}")
    print(f"Access key: {mask_value(config.ocr_access_key)}")
    print(f"Timestamp:  {signed.timestamp}")
    if signed.credential_scope:
        print(f"Scope:      {signed.credential_scope}")
    print("=" * 80)
    print("\nCanonical request:")
    print("-" * 80)
    print(signed.canonical_request)
    print("-" * 80)
    print("\nString to sign:")
    print("-" * 80)
    print(signed.string_to_sign)
    print("-" * 80)
    print(f"\nSigned headers: {signed.signed_headers}")
    print(f"Signature:      {signed.signature}")
    print("\nHeaders to send (Authorization masked):")
    for name, value in signed.redacted_headers(credential.access_key_id).items():
        print(f"  {name}: {value}")


if __name__ == "__main__":
    main()
