"""
Shared request helpers used by the service blueprints.
"""

from typing import Any, Dict

from flask import request

from event_planner.errors import ValidationError


def read_json() -> Dict[str, Any]:
    """Return the JSON object body, or {} for a missing or non-object body."""
    data = request.get_json(silent=True)
    return data if isinstance(data, dict) else {}


def text_field(data: Dict[str, Any], key: str) -> str:
    """Return a field as stripped text; None becomes ""."""
    value = data.get(key)
    return "" if value is None else str(value).strip()


def require_fields(data: Dict[str, Any], *keys: str) -> None:
    """
    Presence check for required body fields.

    Raises:
        ValidationError: One or more fields are missing, null or blank.
    """
    missing = [key for key in keys if not text_field(data, key)]
    if missing:
        raise ValidationError(f"{', '.join(keys)} are required", details=f"missing: {', '.join(missing)}")
