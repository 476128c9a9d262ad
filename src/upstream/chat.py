"""
Chat completion client.

POST <chat endpoint> with a bearer token; the body is
{model, messages, max_tokens, temperature, top_p, stream: false}.
"""
import logging
from typing import Any, Dict, List, Optional, Sequence

from src.config import GatewayConfig
from src.dispatch import AuthCandidate, AuthenticatedDispatcher, BearerToken, DispatchResult, DispatchTarget
from src.trace import DebugTrace

logger = logging.getLogger(__name__)

DEFAULT_MAX_TOKENS = 1000
DEFAULT_TEMPERATURE = 0.7
DEFAULT_TOP_P = 0.9

CONNECTIVITY_PROMPT = 'Say "API working" if you can respond.'


class ChatClient:
    """Builds and dispatches chat completion requests."""

    def __init__(
        self,
        config: GatewayConfig,
        dispatcher: Optional[AuthenticatedDispatcher] = None,
        candidates: Optional[Sequence[AuthCandidate]] = None
    ):
        """
        Initialize the chat client.

        Args:
            config: Gateway configuration
            dispatcher: Dispatcher (created if not provided)
            candidates: Authentication candidates (default: a single bearer token)
        """
        self.config = config
        self.dispatcher = dispatcher or AuthenticatedDispatcher()
        if candidates is None:
            candidates = [BearerToken(config.chat_api_key)]
        self.candidates = list(candidates)

    def build_payload(
        self,
        messages: List[Dict[str, str]],
        options: Optional[Dict[str, Any]] = None
    ) -> Dict[str, Any]:
        """
        Build the completion payload.

        The model always comes from configuration. max_tokens, temperature and
        top_p fall back to defaults; any other option is passed through.

        Args:
            messages: [{role, content}, ...]
            options: Extra completion parameters

        Returns:
            Request payload

        Raises:
            ValueError: If messages is not a non-empty list of role/content dicts
        """
        if not isinstance(messages, list) or not messages:
            raise ValueError("messages array is required")
        for message in messages:
            if not isinstance(message, dict) or 'role' not in message or 'content' not in message:
                raise ValueError("each message needs a role and content")

        options = dict(options or {})
        options.pop('model', None)
        payload = {
            'model': self.config.chat_model,
            'messages': messages,
            'max_tokens': options.pop('max_tokens', None) or DEFAULT_MAX_TOKENS,
            'temperature': options.pop('temperature', None) or DEFAULT_TEMPERATURE,
            'top_p': options.pop('top_p', None) or DEFAULT_TOP_P,
            'stream': False,
        }
        payload.update(options)
        payload['stream'] = False
        return payload

    def complete(
        self,
        messages: List[Dict[str, str]],
        options: Optional[Dict[str, Any]] = None,
        trace: Optional[DebugTrace] = None
    ) -> DispatchResult:
        """
        Request a chat completion.

        Args:
            messages: Conversation messages
            options: Extra completion parameters (max_tokens, temperature, ...)
            trace: Trace to append steps to

        Returns:
            DispatchResult whose body holds the upstream JSON
        """
        payload = self.build_payload(messages, options)
        logger.info("Chat completion requested", extra={
            'model': payload['model'],
            'message_count': len(messages),
            'max_tokens': payload['max_tokens']
        })

        target = DispatchTarget.json(
            'chat',
            self.config.chat_api_url,
            payload,
            self.config.chat_timeout,
            headers={'Accept': 'application/json'}
        )
        return self.dispatcher.dispatch(target, self.candidates, trace=trace)

    def test_connection(self, trace: Optional[DebugTrace] = None) -> DispatchResult:
        """
        Send a tiny prompt to check the endpoint and token.

        Returns:
            DispatchResult of the test call
        """
        payload = self.build_payload(
            [{'role': 'user', 'content': CONNECTIVITY_PROMPT}],
            {'max_tokens': 50, 'temperature': 0.1}
        )
        target = DispatchTarget.json(
            'chat_test',
            self.config.chat_api_url,
            payload,
            self.config.test_timeout,
            headers={'Accept': 'application/json'}
        )
        return self.dispatcher.dispatch(target, self.candidates, trace=trace)

    @staticmethod
    def extract_content(body: Any) -> Optional[str]:
        """First choice's message content, stripped, or None."""
        try:
            content = body['choices'][0]['message']['content']
        except (KeyError, IndexError, TypeError):
            return None
        if not isinstance(content, str):
            return None
        return content.strip() or None
