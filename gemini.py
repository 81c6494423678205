# gemini.py
"""Gemini gateway.

Wraps the google-genai SDK: resolves the API key, sends ``contents`` with
the configured sampling parameters to ``generateContent`` and turns SDK and
transport failures into ``ModelError`` subclasses. One attempt per call, no
retry and no timeout beyond the transport default.
"""
import os
from typing import Any, Dict, List, Mapping, Optional

import httpx
from google import genai
from google.genai import errors, types
from loguru import logger

from settings import Settings

API_KEY_ENV_VARS = ("GEMINI_API_KEY", "GOOGLE_GENAI_API_KEY", "GOOGLE_AI_API_KEY", "AI_API_KEY")
PLACEHOLDER_API_KEY = "YOUR_GEMINI_API_KEY_HERE"

FALLBACK_REPLY = "I'm sorry, I couldn't generate a response. Please try again later."


class ModelError(Exception):
    """Any failure talking to the model; the message is shown to the user."""


class MissingAPIKeyError(ModelError):
    pass


class ModelAPIError(ModelError):
    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.status_code = status_code


def resolve_api_key(settings: Settings, environ: Optional[Mapping[str, str]] = None) -> Optional[str]:
    """First usable key: configured value, then the env vars in order."""
    environ = os.environ if environ is None else environ
    candidates = [settings.API_KEY] + [environ.get(name, "") for name in API_KEY_ENV_VARS]
    for key in candidates:
        if key and key.strip() and key.strip() != PLACEHOLDER_API_KEY:
            return key.strip()
    return None


def extract_reply(response: Any) -> str:
    """Text of the first candidate's first part, or the canned apology."""
    try:
        text = response.candidates[0].content.parts[0].text
    except (AttributeError, IndexError, TypeError):
        return FALLBACK_REPLY
    if not isinstance(text, str) or not text:
        return FALLBACK_REPLY
    return text


class GeminiModel:
    def __init__(self, settings: Settings, client: Optional[Any] = None,
                 environ: Optional[Mapping[str, str]] = None):
        self.settings = settings
        self._client = client
        self._environ = environ

    @property
    def client(self) -> Any:
        # created lazily so a missing key only fails the chat call
        if self._client is None:
            api_key = resolve_api_key(self.settings, self._environ)
            if not api_key:
                raise MissingAPIKeyError(
                    "Gemini API key not found. Set GEMINI_API_KEY in the environment or .env file."
                )
            self._client = genai.Client(api_key=api_key)
        return self._client

    def generation_config(self) -> types.GenerateContentConfig:
        return types.GenerateContentConfig(
            temperature=self.settings.TEMPERATURE,
            top_k=self.settings.TOP_K,
            top_p=self.settings.TOP_P,
            max_output_tokens=self.settings.MAX_OUTPUT_TOKENS,
        )

    def generate(self, contents: List[Dict[str, Any]]) -> Any:
        client = self.client
        logger.debug(
            "Calling model={} with {} content blocks", self.settings.MODEL_NAME, len(contents)
        )
        try:
            return client.models.generate_content(
                model=self.settings.MODEL_NAME,
                contents=contents,
                config=self.generation_config(),
            )
        except errors.APIError as e:
            logger.error("Gemini API error: {} {}", e.code, e)
            raise ModelAPIError(f"Gemini API error: {e}", status_code=e.code) from e
        except httpx.HTTPError as e:
            logger.error("Gemini transport error: {}", e)
            raise ModelAPIError(f"Could not reach the Gemini API: {e}") from e
