"""Argument helpers shared by tool parsers."""

from __future__ import annotations

from typing import Any

from cloudhop.core.errors import PlatformUnsupportedError, ValidationError
from cloudhop.core.sanitize import sanitize_input
from cloudhop.core.validation import require, validate_and_sanitize
from cloudhop.models.deployment import Platform


def required_platform(arguments: dict[str, Any], key: str = "platform") -> Platform:
    value = arguments.get(key)
    if value is None:
        raise ValidationError("platform", "Invalid platform: platform is required")
    return _platform(value)


def optional_platform(arguments: dict[str, Any], key: str = "platform") -> Platform | None:
    value = arguments.get(key)
    if value is None:
        return None
    return _platform(value)


def optional_platforms(arguments: dict[str, Any], key: str = "platforms") -> list[Platform] | None:
    """Parse a platform list, dropping duplicates but keeping order."""
    value = arguments.get(key)
    if value is None:
        return None
    if not isinstance(value, list):
        raise ValidationError("platforms", "Invalid platforms: expected a list of platform names")
    platforms: list[Platform] = []
    for item in value:
        platform = _platform(item)
        if platform not in platforms:
            platforms.append(platform)
    return platforms


def required_value(arguments: dict[str, Any], key: str, schema: str) -> Any:
    if key not in arguments or arguments[key] is None:
        raise ValidationError(schema, f"Invalid {schema}: {key} is required")
    return require(schema, arguments[key])


def optional_value(arguments: dict[str, Any], key: str, schema: str) -> Any:
    if arguments.get(key) is None:
        return None
    return require(schema, arguments[key])


def _platform(value: Any) -> Platform:
    result = validate_and_sanitize("platform", value)
    if not result.success:
        raise PlatformUnsupportedError(str(sanitize_input(value)), [member.value for member in Platform])
    return result.data
