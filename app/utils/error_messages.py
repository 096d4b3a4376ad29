"""
Server error message extraction.

Backends often return the error body as JSON; pull the human message out of it.
"""

import json
from typing import Any

MESSAGE_KEYS = ("message", "error", "description", "detail", "msg")


def _extract_from_json(payload: dict[str, Any]) -> str | None:
    for key in MESSAGE_KEYS:
        value = payload.get(key)
        if isinstance(value, str) and value:
            return value

    errors = payload.get("errors")
    if isinstance(errors, dict):
        for value in errors.values():
            if isinstance(value, str) and value:
                return value
            if isinstance(value, list) and value and isinstance(value[0], str):
                return value[0]
    elif isinstance(errors, list) and errors and isinstance(errors[0], str):
        return errors[0]

    return None


def parse_server_message(raw: str | None) -> str | None:
    """
    Return the user-facing part of a server error message.

    Args:
        raw: Message as received from the backend (plain text or JSON)

    Returns:
        Extracted message, the raw text when nothing better is found,
        or None for an empty message
    """
    if not raw:
        return None

    start = raw.find("{")
    end = raw.rfind("}")
    if start == -1 or end <= start:
        return raw

    try:
        payload = json.loads(raw[start:end + 1])
    except ValueError:
        return raw

    if not isinstance(payload, dict):
        return raw
    return _extract_from_json(payload) or raw
