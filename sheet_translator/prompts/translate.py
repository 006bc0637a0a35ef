"""Prompt builder for translation requests."""

import json
from typing import Any, Dict, List

from sheet_translator.models import GameContext, WorkItem

SYSTEM_PROMPT = (
    "You are a helpful assistant tasked with translating English keys into "
    "specified language codes for a video game. Your translations should be "
    "accurate and context-appropriate."
)

FORMAT_PROMPT = (
    'Respond with a JSON object in the format {"languageCode": {"key": "translatedValue", ...}}. '
    "Ensure the JSON object is minified."
)

MISSING_PROMPT = (
    'If unable to translate a key, include it in a "missing" section like this: '
    '"missing": [{"key": "originalKey", "languageCode": "code", "reason": "explanation"}]. '
    "Provide a reason for each untranslated key."
)

REQUEST_PROMPT = (
    'Expect translation requests in JSON format: {"key": "localizationKey", "en": "englishText", '
    '"context": "contextForTheText", "languagesToRetrieve": ["languageCode1", ...], '
    '"featureNames": {"featureKey": {"languageCode": "Feature Translation", ..., "context": "note"}}}. '
    "Translate the English text into the requested languages. Always use the provided "
    "translations for feature names in the appropriate language if the text contains any "
    "feature name."
)


def build_translation_request(item: WorkItem, game_context: GameContext) -> Dict[str, Any]:
    """
    Build the structured request sent as the user message.

    Args:
        item: Work item to translate
        game_context: Run-wide context (feature names are attached)

    Returns:
        Request dictionary, e.g.:
        {"key": "greet", "en": "Hello", "context": None,
         "languagesToRetrieve": ["es"], "featureNames": {}}
    """
    request: Dict[str, Any] = {
        "key": item.key,
        "en": item.source_text,
        "context": item.context,
        "languagesToRetrieve": list(item.target_language_codes),
        "featureNames": game_context.features,
    }
    if item.category is not None:
        request["category"] = item.category
    return request


def build_translation_messages(item: WorkItem, game_context: GameContext) -> List[Dict[str, str]]:
    """Build the chat messages for one translation call."""
    messages = [{"role": "system", "content": SYSTEM_PROMPT}]
    if game_context.description:
        messages.append({"role": "system", "content": game_context.description})
    messages.extend([
        {"role": "system", "content": FORMAT_PROMPT},
        {"role": "system", "content": MISSING_PROMPT},
        {"role": "system", "content": REQUEST_PROMPT},
        {
            "role": "user",
            "content": json.dumps(build_translation_request(item, game_context), ensure_ascii=False),
        },
    ])
    return messages
