"""Command assistant - opaque text-in/text-out client around the Anthropic API."""
import time

import anthropic

import config
from errors import AssistantError
from logger import setup_logger

logger = setup_logger("assistant")

ASSISTANT_SYSTEM_PROMPT = """You are the WildGuard Command Assistant, a natural language interface for conservation field operations. Rangers ask questions and you respond with actionable intelligence.

You can help with:
- Wildlife and threat locations
- Drone fleet and patrol status
- Historical incidents in the playback window

CURRENT CONTEXT:
{context}

Respond conversationally but precisely. Include coordinates when relevant. Suggest follow-up actions when appropriate."""

FALLBACK_RESPONSE = "I could not process that request."


class AssistantService:
    """Sends one query (plus dashboard context) and returns the reply text."""

    def __init__(self, client=None, model: str = config.ASSISTANT_MODEL,
                 max_tokens: int = config.ASSISTANT_MAX_TOKENS):
        self._client = client
        self.model = model
        self.max_tokens = max_tokens

    @property
    def client(self):
        if self._client is None:
            self._client = anthropic.Anthropic(api_key=config.ANTHROPIC_API_KEY)
        return self._client

    def ask(self, query: str, context: str = "") -> str:
        """Return the assistant's reply to `query`.

        Raises:
            ValueError: empty query
            AssistantError: the upstream API call failed
        """
        if not query or not query.strip():
            raise ValueError("query must not be empty")

        logger.info(f"Assistant query: {query[:50]}")
        start_time = time.time()
        try:
            response = self.client.messages.create(
                model=self.model,
                max_tokens=self.max_tokens,
                system=ASSISTANT_SYSTEM_PROMPT.format(context=context or "No live context available."),
                messages=[{"role": "user", "content": query}]
            )
        except anthropic.APIError as e:
            logger.error(f"Assistant request failed: {e}")
            raise AssistantError(f"Assistant request failed: {e}") from e

        text = response.content[0].text if response.content else ""
        duration_ms = int((time.time() - start_time) * 1000)
        logger.info(f"Assistant response received in {duration_ms}ms")
        return text or FALLBACK_RESPONSE
