"""Validate JSON schema for provider translation output."""

import json
from typing import Any, Dict, List, Sequence, Tuple

MISSING_FIELD = "missing"


def unexpected_keys(data: Dict[str, Any], requested_codes: Sequence[str]) -> List[str]:
    """
    List top-level keys that are neither requested languages nor "missing".

    Args:
        data: Parsed provider output
        requested_codes: Language codes sent in the request

    Returns:
        Unexpected keys in response order
    """
    allowed = set(requested_codes) | {MISSING_FIELD}
    return [key for key in data if key not in allowed]


def validate_translation_result(
    response_text: str,
    requested_codes: Sequence[str]
) -> Tuple[bool, Dict[str, Any], str]:
    """
    Validate provider translation output against the result schema.

    Expected shape:
        {"<code>": {"<key>": "<text>"}, "missing": [{"key", "languageCode", "reason"}]}

    Requested languages may be absent (the provider gave up on them).
    Keys outside the request are removed from the returned data.

    Args:
        response_text: Raw text response from the provider
        requested_codes: Language codes sent in the request

    Returns:
        Tuple of (is_valid: bool, parsed_data: dict, error_message: str)
        If valid, parsed_data contains the requested languages and "missing".
        If invalid, error_message describes the issue.
    """
    # Check 1: Parseable JSON
    try:
        data = json.loads(response_text)
    except json.JSONDecodeError as e:
        return False, {}, f"Output not parseable JSON: {e}"

    # Check 2: Top-level object
    if not isinstance(data, dict):
        return False, {}, "Output must be a JSON object"

    # Check 3: Language sections
    for code in requested_codes:
        if code not in data or data[code] is None:
            continue

        section = data[code]
        if not isinstance(section, dict):
            return False, data, f"{code} must be an object mapping keys to translations"

        for key, text in section.items():
            if text is not None and not isinstance(text, str):
                return False, data, f"{code}.{key} must be a string"

    # Check 4: Missing entries
    missing = data.get(MISSING_FIELD, [])
    if missing is None:
        missing = []

    if not isinstance(missing, list):
        return False, data, "missing must be an array"

    for i, entry in enumerate(missing):
        if not isinstance(entry, dict):
            return False, data, f"missing[{i}] must be an object"

        if not isinstance(entry.get("key"), str):
            return False, data, f"missing[{i}] missing required field: key"

        for field in ("languageCode", "reason"):
            if field in entry and entry[field] is not None and not isinstance(entry[field], str):
                return False, data, f"missing[{i}].{field} must be a string"

    result: Dict[str, Any] = {
        code: data[code] for code in requested_codes
        if isinstance(data.get(code), dict)
    }
    result[MISSING_FIELD] = missing

    return True, result, ""
