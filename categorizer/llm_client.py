# categorizer/llm_client.py
"""
External category predictor backed by the Anthropic Messages API.

A predictor is any callable `prompt -> response text`; this one is the
production implementation. Transient API failures surface as
RetryablePredictorError so the service's backoff can retry them.
"""
from __future__ import annotations

import logging
import os
from typing import Optional

import anthropic

from gst_core.errors import PredictorError, PredictorUnavailableError, RetryablePredictorError

log = logging.getLogger("categorizer.llm")

DEFAULT_MODEL = "claude-haiku-4-5"
DEFAULT_MAX_TOKENS = 1024

_TRANSIENT_ERRORS = (
    anthropic.APIConnectionError,
    anthropic.RateLimitError,
    anthropic.InternalServerError,
)


class AnthropicPredictor:
    """Send the categorization prompt to Claude and return the raw reply text."""

    def __init__(
        self,
        api_key: Optional[str] = None,
        model: str = DEFAULT_MODEL,
        max_tokens: int = DEFAULT_MAX_TOKENS,
        client: Optional[anthropic.Anthropic] = None,
    ):
        self.api_key = api_key if api_key is not None else os.environ.get("ANTHROPIC_API_KEY", "")
        self.model = model
        self.max_tokens = max_tokens
        self._client = client

    @property
    def client(self) -> anthropic.Anthropic:
        if self._client is None:
            if not self.api_key:
                raise PredictorUnavailableError("ANTHROPIC_API_KEY not set")
            self._client = anthropic.Anthropic(api_key=self.api_key)
        return self._client

    def __call__(self, prompt: str) -> str:
        client = self.client
        try:
            message = client.messages.create(
                model=self.model,
                max_tokens=self.max_tokens,
                temperature=0.3,
                messages=[{"role": "user", "content": prompt}],
            )
        except _TRANSIENT_ERRORS as e:
            log.warning("Transient Anthropic API error: %s", e)
            raise RetryablePredictorError(str(e)) from e
        except anthropic.APIError as e:
            log.error("Anthropic API error: %s", e)
            raise PredictorError(str(e)) from e

        if not message.content:
            raise PredictorError("Empty response from Anthropic API")
        return message.content[0].text
