"""
Pytest configuration and fixtures for signing gateway tests.
No test touches the network: upstream HTTP is replaced by a Mock session.
"""
import json
import pytest
from unittest.mock import Mock

from src.config import GatewayConfig
from src.signing import Credential


@pytest.fixture
def credential():
    """Test AK/SK pair."""
    return Credential(access_key_id='TESTAK', secret_key='TESTSK')


@pytest.fixture
def gateway_config():
    """Fully configured gateway settings."""
    return GatewayConfig(
        ocr_access_key='TESTAK1234567890',
        ocr_secret_key='TESTSK-secret',
        ocr_region='ap-southeast-1',
        chat_api_url='https://chat.example.com/v1/chat/completions',
        chat_api_key='chat-token-abcdefghijkl',
        chat_model='deepseek-v3.1'
    )


@pytest.fixture
def unconfigured_config():
    """Gateway settings without any credentials."""
    return GatewayConfig(chat_api_url='https://chat.example.com/v1/chat/completions')


@pytest.fixture
def make_response():
    """Factory for fake requests.Response objects."""
    def _make(status_code, json_body=None, text=None):
        response = Mock()
        response.status_code = status_code
        if json_body is None:
            response.json.side_effect = ValueError("No JSON object could be decoded")
            response.text = text or ''
        else:
            response.json.return_value = json_body
            response.text = text if text is not None else json.dumps(json_body)
        return response
    return _make


@pytest.fixture
def mock_session():
    """Mock HTTP session; set .request.return_value or .side_effect per test."""
    return Mock()
