"""
Gateway configuration.

Built once at process start from the environment and passed by reference to the
upstream clients. Nothing below src/signing or src/dispatch reads the
environment directly.
"""
import os
from dataclasses import dataclass, field
from typing import Optional, Tuple
from dotenv import load_dotenv

from src.signing import Credential

DEFAULT_CHAT_API_URL = 'https://api-ap-southeast-1.modelarts-maas.com/v1/chat/completions'
DEFAULT_CHAT_MODEL = 'deepseek-v3.1'
DEFAULT_OCR_REGION = 'ap-southeast-1'
DEFAULT_CORS_ORIGINS = (
    'http://localhost:4028',
    'http://localhost:3000',
    'http://127.0.0.1:4028',
)


@dataclass(frozen=True)
class GatewayConfig:
    """
    Immutable process-wide configuration.

    Attributes:
        ocr_access_key: OCR access key (AK)
        ocr_secret_key: OCR secret key (SK), never logged
        ocr_region: OCR region, e.g. ap-southeast-1
        chat_api_url: Chat completion endpoint
        chat_api_key: Bearer token for the chat endpoint, never logged
        chat_model: Model name sent with every chat request
        chat_timeout: Seconds allowed for a chat completion
        ocr_timeout: Seconds allowed for an OCR call
        test_timeout: Seconds allowed for the connectivity test
        port: Port the gateway listens on
        cors_origins: Origins allowed to call the gateway from a browser
    """
    ocr_access_key: Optional[str] = None
    ocr_secret_key: Optional[str] = field(default=None, repr=False)
    ocr_region: str = DEFAULT_OCR_REGION
    chat_api_url: str = DEFAULT_CHAT_API_URL
    chat_api_key: Optional[str] = field(default=None, repr=False)
    chat_model: str = DEFAULT_CHAT_MODEL
    chat_timeout: float = 60.0
    ocr_timeout: float = 30.0
    test_timeout: float = 30.0
    port: int = 3001
    cors_origins: Tuple[str, ...] = DEFAULT_CORS_ORIGINS

    @property
    def ocr_host(self) -> str:
        return f"ocr.{self.ocr_region}.myhuaweicloud.com"

    @property
    def ocr_endpoint(self) -> str:
        return f"https://{self.ocr_host}/v2/ocr/general-text"

    @property
    def ocr_credential(self) -> Optional[Credential]:
        """AK/SK pair, or None if either half is missing."""
        if not self.ocr_access_key or not self.ocr_secret_key:
            return None
        return Credential(access_key_id=self.ocr_access_key, secret_key=self.ocr_secret_key)

    @property
    def ocr_configured(self) -> bool:
        return self.ocr_credential is not None

    @property
    def chat_configured(self) -> bool:
        return bool(self.chat_api_key)


def _float_env(name: str, default: float) -> float:
    value = os.environ.get(name)
    if not value:
        return default
    try:
        return float(value)
    except ValueError:
        raise ValueError(f"{name} must be a number, got {value!r}")


def load_config() -> GatewayConfig:
    """
    Create the gateway configuration from environment variables.

    Environment variables:
        HUAWEI_OCR_AK: OCR access key
        HUAWEI_OCR_SK: OCR secret key
        HUAWEI_OCR_REGION: OCR region (default: ap-southeast-1)
        DEEPSEEK_API_URL: Chat completion endpoint
        DEEPSEEK_API_KEY: Chat bearer token
        DEEPSEEK_MODEL: Chat model name (default: deepseek-v3.1)
        CHAT_TIMEOUT / OCR_TIMEOUT / TEST_TIMEOUT: Timeouts in seconds (60/30/30)
        PROXY_PORT: Listen port (default: 3001)
        CORS_ORIGINS: Comma-separated browser origins

    Returns:
        GatewayConfig

    Raises:
        ValueError: If a numeric variable cannot be parsed
    """
    load_dotenv()

    cors_env = os.environ.get('CORS_ORIGINS')
    if cors_env:
        cors_origins = tuple(origin.strip() for origin in cors_env.split(',') if origin.strip())
    else:
        cors_origins = DEFAULT_CORS_ORIGINS

    return GatewayConfig(
        ocr_access_key=os.environ.get('HUAWEI_OCR_AK'),
        ocr_secret_key=os.environ.get('HUAWEI_OCR_SK'),
        ocr_region=os.environ.get('HUAWEI_OCR_REGION', DEFAULT_OCR_REGION),
        chat_api_url=os.environ.get('DEEPSEEK_API_URL', DEFAULT_CHAT_API_URL),
        chat_api_key=os.environ.get('DEEPSEEK_API_KEY'),
        chat_model=os.environ.get('DEEPSEEK_MODEL', DEFAULT_CHAT_MODEL),
        chat_timeout=_float_env('CHAT_TIMEOUT', 60.0),
        ocr_timeout=_float_env('OCR_TIMEOUT', 30.0),
        test_timeout=_float_env('TEST_TIMEOUT', 30.0),
        port=int(_float_env('PROXY_PORT', 3001)),
        cors_origins=cors_origins
    )
