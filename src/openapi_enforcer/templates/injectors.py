"""Placeholder injectors for ``x-template`` values and string defaults.

An injector receives the raw template text and the parameter map and returns the
resolved value. Placeholders whose parameter is absent (or None) are left in
place, so a template that resolves to its own text counts as "not applied".
"""

import re
from collections.abc import Callable, Mapping
from typing import Any

from openapi_enforcer.converters import ValueConverter

Injector = Callable[[str, Mapping[str, Any]], Any]

_NAME = r"([_$a-zA-Z][_$a-zA-Z0-9]*)"

PATTERNS: dict[str, re.Pattern[str]] = {
    "colon": re.compile(r":" + _NAME),
    "doubleHandlebar": re.compile(r"\{\{" + _NAME + r"\}\}"),
    "handlebar": re.compile(r"\{" + _NAME + r"\}"),
}


def _injector(pattern: re.Pattern[str]) -> Injector:
    def inject(template: str, params: Mapping[str, Any]) -> Any:
        def replace(match: re.Match[str]) -> str:
            value = params.get(match.group(1))
            if value is None:
                return match.group(0)
            return ValueConverter.to_string(value)

        return pattern.sub(replace, template)

    return inject


INJECTORS: dict[str, Injector] = {name: _injector(rx) for name, rx in PATTERNS.items()}


def get_injector(replacement: str | Injector) -> Injector:
    """Resolve an injector by name, or accept a callable as-is.

    >>> get_injector("colon")("/pets/:id", {"id": 7})
    '/pets/7'
    >>> get_injector("handlebar")("{greeting}, {name}", {"greeting": "Hi"})
    'Hi, {name}'

    Raises:
        ValueError: If the name is not a known injector
    """
    if callable(replacement):
        return replacement
    try:
        return INJECTORS[replacement]
    except KeyError:
        known = ", ".join(sorted(INJECTORS))
        raise ValueError(f"Unknown replacement: {replacement}. Expected one of: {known}") from None
