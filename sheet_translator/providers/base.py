"""Base provider interface for translation."""

from abc import ABC, abstractmethod
from typing import Any, Dict, Optional

from sheet_translator.models import GameContext, WorkItem


class ProviderError(Exception):
    """Raised when a provider call fails."""
    pass


class AuthenticationError(ProviderError):
    """Raised when the provider rejects the credentials (401/403)."""
    pass


class RateLimitError(ProviderError):
    """Raised when the provider asks the caller to slow down."""

    def __init__(self, message: str, retry_after: float):
        super().__init__(message)
        self.retry_after = retry_after


class ResponseParseError(ProviderError):
    """Raised when the provider returns content that is not a valid result."""

    def __init__(self, message: str, raw: Optional[str] = None):
        super().__init__(message)
        self.raw = raw


class TranslationProvider(ABC):
    """Base class for translation providers."""

    @abstractmethod
    async def translate(
        self,
        item: WorkItem,
        game_context: GameContext
    ) -> Dict[str, Any]:
        """
        Translate one work item into its target languages.

        Args:
            item: Work item (key, source text, languages to retrieve)
            game_context: Run-wide description and feature names

        Returns:
            Validated result:
            {
                "es": {"greet": "Hola"},
                "missing": [{"key": "greet", "languageCode": "fr", "reason": "..."}]
            }

        Raises:
            RateLimitError: If the provider signals too many requests
            ResponseParseError: If the response is not a valid result
            ProviderError: For any other provider or transport failure
        """
        pass
