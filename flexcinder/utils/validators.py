"""Validation utilities for user options and provider metadata"""

import json
from typing import Any, Dict, List, Optional

from flexcinder.exceptions import InvalidOptions

OPTIONS_ERROR_PREFIX = 'jsonOptions is not set by user properly'


def parse_json_options(json_options: str) -> Dict[str, Any]:
    """
    Parse the jsonOptions blob handed over by the orchestrator.

    Args:
        json_options: Raw JSON text

    Returns:
        Flat options mapping

    Raises:
        InvalidOptions: If the blob is not a JSON object
    """
    try:
        options = json.loads(json_options)
    except (TypeError, ValueError) as e:
        raise InvalidOptions(f"{OPTIONS_ERROR_PREFIX}: {json_options!r} ({e})")

    if not isinstance(options, dict):
        raise InvalidOptions(
            f"{OPTIONS_ERROR_PREFIX}: {json_options!r} (expected a JSON object)"
        )
    return options


def require_string(options: Dict[str, Any], key: str, json_options: str,
                   allow_empty: bool = False) -> str:
    """
    Get a required string option.

    Raises:
        InvalidOptions: If the key is absent, not a string or empty
    """
    value = options.get(key)
    if not isinstance(value, str) or (not allow_empty and not value):
        raise InvalidOptions(
            f"{OPTIONS_ERROR_PREFIX}: {json_options!r} (missing or invalid key '{key}')",
            key=key
        )
    return value


def optional_string(options: Dict[str, Any], key: str, json_options: str,
                    default: Optional[str] = None) -> Optional[str]:
    """Get an optional string option, rejecting values of another type."""
    if key not in options:
        return default
    value = options[key]
    if not isinstance(value, str):
        raise InvalidOptions(
            f"{OPTIONS_ERROR_PREFIX}: {json_options!r} (key '{key}' must be a string)",
            key=key
        )
    return value


def extract_string_list(data: Any) -> List[str]:
    """
    Convert a metadata value into a list of strings.

    Numbers are stringified, anything else is rejected.

    Raises:
        ValueError: If data is not a list of strings or numbers
    """
    if not isinstance(data, (list, tuple)):
        raise ValueError(f"expected a list, got {type(data).__name__}")

    result = []
    for item in data:
        if isinstance(item, bool) or not isinstance(item, (str, int, float)):
            raise ValueError(f"unexpected list item {item!r}")
        result.append(str(item))
    return result
