"""Option-name normalization for parameters that arrive as plain data."""

from __future__ import annotations

import re
from collections.abc import Collection, Mapping
from typing import Any

_CAMEL_BOUNDARY = re.compile(r"(?<!^)(?=[A-Z])")


def snake_case(name: str) -> str:
    """"splitIterations" -> "split_iterations". Snake-case names pass through."""
    return _CAMEL_BOUNDARY.sub("_", name).lower()


def normalize_option_names(
    options: Mapping[str, Any], known: Collection[str] | None = None
) -> dict[str, Any]:
    """Accept camelCase option names ("centerX") as snake_case ("center_x").

    With ``known`` given, only names whose snake_case form is in it are
    renamed; every other key is kept exactly as the caller spelled it.
    """
    normalized: dict[str, Any] = {}
    for key, value in options.items():
        name = snake_case(key)
        normalized[name if known is None or name in known else key] = value
    return normalized
