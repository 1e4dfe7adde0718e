"""
Case conversion for API responses.
Storage and services use snake_case; the frontend receives camelCase.
"""
from typing import Any

from pydantic.alias_generators import to_camel


def to_camel_key(s: str) -> str:
    """Convert a single snake_case key to camelCase (first letter lower)."""
    return to_camel(s)


def dict_keys_to_camel(obj: Any) -> Any:
    """Recursively convert dict keys from snake_case to camelCase."""
    if isinstance(obj, dict):
        return {to_camel_key(k): dict_keys_to_camel(v) for k, v in obj.items()}
    if isinstance(obj, list):
        return [dict_keys_to_camel(x) for x in obj]
    return obj
