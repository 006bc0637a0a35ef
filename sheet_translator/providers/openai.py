"""OpenAI provider for LLM translation."""

import asyncio
import json
import logging
import os
from typing import Any, Dict, List, Optional

import requests

from sheet_translator.models import GameContext, WorkItem
from sheet_translator.prompts.translate import build_translation_messages
from sheet_translator.providers.base import (
    AuthenticationError,
    ProviderError,
    RateLimitError,
    ResponseParseError,
    TranslationProvider,
)
from sheet_translator.providers.utils import extract_json_from_response
from sheet_translator.validate.schema import unexpected_keys, validate_translation_result

logger = logging.getLogger(__name__)

DEFAULT_MODEL = "gpt-4-turbo-preview"
DEFAULT_BASE_URL = "https://api.openai.com/v1"


class OpenAIProvider(TranslationProvider):
    """OpenAI provider for LLM translation using Chat Completions API."""

    def __init__(
        self,
        api_key: Optional[str] = None,
        base_url: Optional[str] = None,
        model: Optional[str] = None,
        organization: Optional[str] = None,
        timeout: float = 120.0,
        default_rate_limit_wait: float = 1.0
    ):
        """
        Initialize OpenAI provider.

        Args:
            api_key: OpenAI API key (default: from OPENAI_API_KEY env var)
            base_url: API base URL (default: from OPENAI_BASE_URL env var or https://api.openai.com/v1)
            model: Model name (default: from OPENAI_MODEL env var or gpt-4-turbo-preview)
            organization: Organization id (default: from OPENAI_API_ORG env var)
            timeout: Request timeout in seconds (default: 120.0)
            default_rate_limit_wait: Wait used when a 429 carries no Retry-After (default: 1.0)
        """
        self.api_key = api_key or os.getenv("OPENAI_API_KEY")
        if not self.api_key:
            raise ValueError(
                "OpenAI API key required. Set OPENAI_API_KEY environment variable "
                "or pass api_key parameter."
            )

        self.base_url = (base_url or os.getenv("OPENAI_BASE_URL") or
                         DEFAULT_BASE_URL).rstrip("/")
        self.model = model or os.getenv("OPENAI_MODEL") or DEFAULT_MODEL
        self.organization = organization or os.getenv("OPENAI_API_ORG")
        self.timeout = timeout
        self.default_rate_limit_wait = default_rate_limit_wait

    def _retry_after(self, response: requests.Response) -> float:
        """Read the provider-supplied wait (seconds) from a 429 response."""
        headers = response.headers or {}

        retry_after_ms = headers.get("retry-after-ms")
        if retry_after_ms:
            try:
                return float(retry_after_ms) / 1000.0
            except ValueError:
                pass

        retry_after = headers.get("Retry-After")
        if retry_after:
            try:
                return float(retry_after)
            except ValueError:
                pass

        return self.default_rate_limit_wait

    def _call_openai(
        self,
        messages: List[Dict[str, str]],
        temperature: float = 0.1
    ) -> str:
        """
        Call OpenAI Chat Completions API once.

        Args:
            messages: Chat messages
            temperature: Temperature for generation (default: 0.1 for deterministic)

        Returns:
            Response text from OpenAI

        Raises:
            RateLimitError: On 429
            AuthenticationError: On 401/403
            ProviderError: On any other HTTP or transport failure
        """
        url = f"{self.base_url}/chat/completions"
        headers = {
            "Authorization": f"Bearer {self.api_key}",
            "Content-Type": "application/json"
        }
        if self.organization:
            headers["OpenAI-Organization"] = self.organization

        payload = {
            "model": self.model,
            "messages": messages,
            "temperature": temperature,
            "response_format": {"type": "json_object"}
        }

        try:
            response = requests.post(
                url,
                headers=headers,
                json=payload,
                timeout=self.timeout
            )
        except requests.exceptions.Timeout as e:
            raise ProviderError(f"OpenAI API request timed out: {e}") from e
        except requests.exceptions.RequestException as e:
            raise ProviderError(f"OpenAI API request failed: {e}") from e

        if response.status_code == 429:
            raise RateLimitError(
                f"OpenAI API rate limit exceeded. Response: {response.text}",
                retry_after=self._retry_after(response)
            )

        if response.status_code == 401:
            raise AuthenticationError(
                "OpenAI API authentication failed. Check your API key. "
                f"Response: {response.text}"
            )

        if response.status_code == 403:
            raise AuthenticationError(
                "OpenAI API permission denied. Check your API key permissions. "
                f"Response: {response.text}"
            )

        if not response.ok:
            raise ProviderError(
                f"OpenAI API error ({response.status_code}): {response.text}"
            )

        try:
            response_data = response.json()
        except ValueError as e:
            raise ResponseParseError(f"OpenAI API returned non-JSON body: {e}", raw=response.text) from e

        if not response_data.get("choices"):
            raise ResponseParseError("OpenAI API response missing choices", raw=response.text)

        content = response_data["choices"][0].get("message", {}).get("content")
        if not content:
            raise ResponseParseError("OpenAI API response has empty content", raw=response.text)

        return content.strip()

    def parse_response(self, response_text: str, item: WorkItem) -> Dict[str, Any]:
        """
        Turn raw completion text into a validated result.

        Raises:
            ResponseParseError: If the text does not match the result schema
        """
        extracted = extract_json_from_response(response_text)
        is_valid, data, error_msg = validate_translation_result(
            extracted, item.target_language_codes
        )
        if not is_valid:
            raise ResponseParseError(
                f"Invalid translation result for [{item.key}]: {error_msg}",
                raw=response_text
            )

        dropped = unexpected_keys(json.loads(extracted), item.target_language_codes)
        if dropped:
            logger.warning("[%s] ignoring unrequested keys in response: %s", item.key, dropped)

        return data

    async def translate(
        self,
        item: WorkItem,
        game_context: GameContext
    ) -> Dict[str, Any]:
        """
        Translate one work item using OpenAI.

        The blocking HTTP call runs in a worker thread so other translations
        keep progressing on the event loop.
        """
        messages = build_translation_messages(item, game_context)
        response_text = await asyncio.to_thread(self._call_openai, messages)
        return self.parse_response(response_text, item)
