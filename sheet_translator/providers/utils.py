"""Shared utilities for translation providers."""

import json
import re


def _is_json(text: str) -> bool:
    try:
        json.loads(text)
    except json.JSONDecodeError:
        return False
    return True


def extract_json_from_response(text: str) -> str:
    """
    Extract JSON from LLM response, handling markdown code blocks and commentary.

    This function attempts to extract valid JSON from various response formats:
    - Plain JSON strings
    - JSON wrapped in markdown code blocks (```json ... ```)
    - JSON embedded in text with commentary

    Args:
        text: Raw response text from LLM

    Returns:
        Extracted JSON string (or original text if no valid JSON found)
    """
    stripped = text.strip()
    if _is_json(stripped):
        return stripped

    # ```json ... ``` or ``` ... ```
    code_block_pattern = r'```(?:json)?\s*\n?(.*?)```'
    for match in re.findall(code_block_pattern, text, re.DOTALL):
        if _is_json(match.strip()):
            return match.strip()

    # Outermost {...} span (results nest two levels deep)
    start = text.find("{")
    end = text.rfind("}")
    if start != -1 and end > start:
        candidate = text[start:end + 1]
        if _is_json(candidate):
            return candidate

    # If nothing found, return original (will fail validation)
    return stripped
