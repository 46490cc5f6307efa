"""Shared utility functions."""

from __future__ import annotations

from collections.abc import Callable
from typing import Any


def deep_merge(base: dict[str, Any], override: dict[str, Any]) -> dict[str, Any]:
    """Return ``base`` updated recursively with ``override``.

    Nested dicts are merged key by key; any other value replaces the base
    value, and a ``None`` override removes the key.
    """
    merged = dict(base)
    for key, value in override.items():
        if value is None:
            merged.pop(key, None)
        elif isinstance(value, dict) and isinstance(merged.get(key), dict):
            merged[key] = deep_merge(merged[key], value)
        else:
            merged[key] = value
    return merged


def confirm_action(message: str, prompt: Callable[[str], str] = input) -> bool:
    """Ask a yes/no question; only an explicit yes counts."""
    answer = prompt(f"{message} (yes/No) ")
    return answer.strip().lower() in ("y", "yes")
