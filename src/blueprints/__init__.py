"""
Flask blueprints for the signing gateway endpoints.
"""

from .health import health_bp
from .chat import chat_bp
from .ocr import ocr_bp
from .connectivity import connectivity_bp

__all__ = ['health_bp', 'chat_bp', 'ocr_bp', 'connectivity_bp']
