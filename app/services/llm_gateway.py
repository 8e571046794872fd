"""
LLM Gateway

Thin wrapper around the Gemini client. Every client failure surfaces as
LLMGatewayError so callers handle one exception type.
"""

import logging
from typing import Dict, List, Optional

from flask import current_app
from google import genai
from google.genai import types

logger = logging.getLogger(__name__)

EXTENSION_KEY = "llm_gateway"


class LLMGatewayError(Exception):
    """The language model could not be reached or returned nothing."""


class GeminiGateway:
    def __init__(self, api_key: str, model: str, temperature: float = 0.7, max_output_tokens: int = 2048):
        self.client = genai.Client(api_key=api_key)
        self.model = model
        self.temperature = temperature
        self.max_output_tokens = max_output_tokens

    def _generate(self, contents: List[types.Content], system_prompt: str, max_tokens: int,
                  json_output: bool) -> str:
        config = types.GenerateContentConfig(
            system_instruction=system_prompt,
            temperature=self.temperature,
            max_output_tokens=max_tokens,
            response_mime_type="application/json" if json_output else None,
        )
        try:
            response = self.client.models.generate_content(model=self.model, contents=contents, config=config)
        except Exception as e:
            logger.error(f"Gemini API Error: {e}")
            raise LLMGatewayError(str(e)) from e

        text = response.text if response else None
        if not text or not text.strip():
            logger.warning("Empty response from Gemini")
            raise LLMGatewayError("empty response")
        return text.strip()

    def complete_chat(self, system_prompt: str, history: List[Dict[str, str]], message: str) -> str:
        """Run one chat turn; returns the raw model text (expected to hold JSON)."""
        contents = [
            types.Content(
                role="model" if turn.get("role") == "assistant" else "user",
                parts=[types.Part(text=turn.get("content") or "")],
            )
            for turn in history
            if turn.get("content")
        ]
        contents.append(types.Content(role="user", parts=[types.Part(text=message)]))
        return self._generate(contents, system_prompt, self.max_output_tokens, json_output=True)

    def generate_text(self, system_prompt: str, prompt: str, max_tokens: Optional[int] = None) -> str:
        contents = [types.Content(role="user", parts=[types.Part(text=prompt)])]
        return self._generate(contents, system_prompt, max_tokens or self.max_output_tokens, json_output=False)


def get_llm_gateway():
    """Gateway for the current app, created on first use. Tests install a fake under the same key."""
    gateway = current_app.extensions.get(EXTENSION_KEY)
    if gateway is None:
        gateway = GeminiGateway(
            api_key=current_app.config["GEMINI_API_KEY"],
            model=current_app.config.get("GEMINI_MODEL", "gemini-flash-latest"),
            temperature=current_app.config.get("LLM_TEMPERATURE", 0.7),
            max_output_tokens=current_app.config.get("LLM_MAX_OUTPUT_TOKENS", 2048),
        )
        current_app.extensions[EXTENSION_KEY] = gateway
    return gateway
