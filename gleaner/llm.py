"""Summarisation through a local Ollama server.

Calls the Ollama REST API at ``/api/generate`` with streaming disabled.
Configure via ``OLLAMA_ENDPOINT``, ``LLM_TEMPERATURE`` and ``LLM_MAX_TOKENS``.
"""

from __future__ import annotations

import logging

import httpx

from gleaner.config import LLMConfig
from gleaner.errors import LLMError

logger = logging.getLogger(__name__)


class LLMProcessor:
    def __init__(self, config: LLMConfig) -> None:
        self.config = config

    def process(self, prompt: str, model: str) -> str:
        """Send *prompt* to *model* and return the generated text.

        Raises:
            LLMError: If the request fails, the endpoint answers with a
                non-2xx status, or the body has no ``response`` string.
        """
        payload = {
            "model": model,
            "prompt": prompt,
            "stream": False,
            "options": {
                "temperature": self.config.temperature,
                "num_predict": self.config.max_tokens,
            },
        }
        logger.debug("POST %s model=%s prompt_chars=%d", self.config.endpoint, model, len(prompt))

        try:
            with httpx.Client(timeout=self.config.timeout) as client:
                response = client.post(self.config.endpoint, json=payload)
                response.raise_for_status()
                data = response.json()
        except httpx.HTTPError as exc:
            raise LLMError(f"request to {self.config.endpoint} failed: {exc}") from exc
        except ValueError as exc:
            raise LLMError(f"invalid JSON from {self.config.endpoint}: {exc}") from exc

        text = data.get("response") if isinstance(data, dict) else None
        if not isinstance(text, str):
            raise LLMError("LLM response has no 'response' field")
        return text.strip()
