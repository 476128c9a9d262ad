#!/usr/bin/env python
"""
Script to check both upstreams from the shell.

Runs the chat connectivity test and, with --image, a real OCR call. Prints the
classified result and the debug trace for each.

Usage:
  python scripts/test_connection.py
  python scripts/test_connection.py --image receipt.png
"""

import sys
import base64
import argparse
from dotenv import load_dotenv

from src.config import load_config
from src.signing import mask_value
from src.trace import DebugTrace
from src.upstream import ChatClient, OcrClient


def print_trace(trace: DebugTrace) -> None:
    """Print trace steps in order."""
    for entry in trace.entries:
        suffix = f"  ✗ {entry.error}" if entry.error else ''
        print(f"    {entry.timestamp}  {entry.stage}{suffix}")


def print_result(label: str, result, trace: DebugTrace) -> bool:
    """Print a dispatch result; return True on success."""
    if result.success:
        print(f"✓ {label}: HTTP {result.status_code}")
    else:
        print(f"✗ {label}: {result.category.value} ({result.error})")
        if result.analysis:
            print(f"  Analysis: {result.analysis}")
    print("  Trace:")
    print_trace(trace)
    return result.success


def main():
    """Main function to test upstream connectivity."""
    load_dotenv()

    parser = argparse.ArgumentParser(description='Check chat and OCR upstream connectivity')
    parser.add_argument('--image', help='Image file to send to OCR (skipped if omitted)')
    args = parser.parse_args()

    config = load_config()

    print("=" * 60)
    print("Upstream Connectivity Test")
    print("=" * 60)
    print(f"Chat endpoint: {config.chat_api_url}")
    print(f"Chat token:    {mask_value(config.chat_api_key, visible=10)}")
    print(f"OCR endpoint:  {config.ocr_endpoint}")
    print(f"OCR AK:        {mask_value(config.ocr_access_key)}")
    print()

    ok = True

    trace = DebugTrace()
    result = ChatClient(config).test_connection(trace=trace)
    ok = print_result('Chat', result, trace) and ok
    if result.success:
        content = ChatClient.extract_content(result.body)
        print(f"  Reply: {content}")

    if args.image:
        with open(args.image, 'rb') as image_file:
            image = base64.b64encode(image_file.read()).decode('ascii')

        trace = DebugTrace()
        result = OcrClient(config).recognize(image, trace=trace)
        ok = print_result('OCR', result, trace) and ok
        if result.success:
            words = OcrClient.words(result.body)
            print(f"  Extracted {len(words)} text blocks")

    sys.exit(0 if ok else 1)


if __name__ == "__main__":
    main()
