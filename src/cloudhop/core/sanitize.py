"""String sanitization primitives."""

from __future__ import annotations

import re
from typing import Any

PROJECT_NAME_MAX_LENGTH = 100
PROJECT_NAME_PATTERN = re.compile(r"^[A-Za-z0-9_-]+$")

_UNSAFE_CHARACTERS = re.compile(r"[<>'\"\\/]")
_CONTROL_CHARACTERS = re.compile(r"[\x00-\x1f\x7f]")


def sanitize_input(value: Any) -> Any:
    """Strip injection-prone characters from strings; other values pass through."""
    if not isinstance(value, str):
        return value
    value = _UNSAFE_CHARACTERS.sub("", value)
    value = _CONTROL_CHARACTERS.sub("", value)
    return value.strip()


def strip_control_characters(value: str) -> str:
    """Remove control characters only, for free-text fields such as paths."""
    return _CONTROL_CHARACTERS.sub("", value).strip()


def check_project_name(value: Any) -> str:
    """Return `value` if it is a safe project name, raise `ValueError` otherwise.

    A name that sanitization would alter is rejected rather than silently
    rewritten.
    """
    if not isinstance(value, str):
        msg = "Project name must be a string"
        raise ValueError(msg)
    sanitized = sanitize_input(value)
    if not sanitized:
        msg = "Project name cannot be empty"
        raise ValueError(msg)
    if sanitized != value:
        msg = "Project name contains disallowed characters"
        raise ValueError(msg)
    if len(sanitized) > PROJECT_NAME_MAX_LENGTH:
        msg = f"Project name too long (max {PROJECT_NAME_MAX_LENGTH} characters)"
        raise ValueError(msg)
    if PROJECT_NAME_PATTERN.fullmatch(sanitized) is None:
        msg = "Project name can only contain letters, numbers, hyphens, and underscores"
        raise ValueError(msg)
    return sanitized
