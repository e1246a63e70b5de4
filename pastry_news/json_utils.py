"""
Helpers for converting dict keys between snake_case and camelCase.
"""

from __future__ import annotations

import re
from typing import Any

_CAMEL_BOUNDARY = re.compile(r"(?<=[a-z0-9])([A-Z])")


def snake_to_camel(value: str) -> str:
    # Leading underscores are significant (e.g. "_id").
    prefix = value[: len(value) - len(value.lstrip("_"))]
    head, *rest = value.lstrip("_").split("_")
    return prefix + head + "".join(part[:1].upper() + part[1:] for part in rest)


def camel_to_snake(value: str) -> str:
    return _CAMEL_BOUNDARY.sub(r"_\1", value).lower()


def convert_keys(obj: Any, direction: str) -> Any:
    """
    Recursively convert the keys of dicts (inside dicts/lists) in `obj`.

    Args:
        obj: A JSON-compatible value.
        direction: "snake_to_camel" or "camel_to_snake".
    """
    if direction == "snake_to_camel":
        convert = snake_to_camel
    elif direction == "camel_to_snake":
        convert = camel_to_snake
    else:
        raise ValueError(f"Unknown direction: {direction}")

    def _walk(value: Any) -> Any:
        if isinstance(value, dict):
            return {
                convert(k) if isinstance(k, str) else k: _walk(v)
                for k, v in value.items()
            }
        if isinstance(value, list):
            return [_walk(item) for item in value]
        return value

    return _walk(obj)
