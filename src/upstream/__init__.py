"""
Clients for the upstream OCR and chat completion APIs.
"""
from .ocr import OcrClient
from .chat import ChatClient

__all__ = ['OcrClient', 'ChatClient']
