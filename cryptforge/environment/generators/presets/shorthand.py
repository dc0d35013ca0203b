"""Compact text form for preset calls.

    @town_cluster:count=8,radius=5,seed=42

A call is ``@`` + preset name, optionally followed by ``:`` and comma
separated ``key=value`` pairs. Values parse as booleans (true/false),
numbers, or else strings. Several calls may appear in one text separated
by whitespace.
"""

from __future__ import annotations

import re

from .base import PresetCall

_CALL = re.compile(r"^@(\w+)(?::(.*))?$")
_CALLS = re.compile(r"@\w+(?::[^\s@]+)?")


def _parse_value(text: str) -> bool | int | float | str:
    value = text.strip()
    if value == "true":
        return True
    if value == "false":
        return False
    try:
        return int(value)
    except ValueError:
        pass
    try:
        return float(value)
    except ValueError:
        return value


def parse_preset_shorthand(text: str) -> PresetCall | None:
    """Parse one ``@name:k=v,...`` call. Returns None if the text is not a call."""
    match = _CALL.match(text.strip())
    if match is None:
        return None

    params: dict[str, bool | int | float | str] = {}
    for pair in (match.group(2) or "").split(","):
        key, sep, value = pair.partition("=")
        if key.strip() and sep:
            params[key.strip()] = _parse_value(value)
    return PresetCall(match.group(1), params)


def parse_multiple_presets(text: str) -> list[PresetCall]:
    """Every preset call found in a block of text, in order."""
    calls = []
    for match in _CALLS.finditer(text):
        call = parse_preset_shorthand(match.group(0))
        if call is not None:
            calls.append(call)
    return calls
