"""Validation and sanitization of raw tool arguments.

Every schema is a callable that takes the raw value and returns the cleaned,
typed value or raises `ValueError`. `validate_and_sanitize` wraps a schema so
callers get a result object instead of an exception; `require` raises the
structured `ValidationError` used by tool handlers.
"""

from __future__ import annotations

import re
from collections.abc import Callable, Iterable
from dataclasses import dataclass
from typing import Annotated, Any, Final

import pydantic
import structlog
from pydantic import Field, TypeAdapter

from cloudhop.core.errors import ValidationError
from cloudhop.core.sanitize import check_project_name, sanitize_input, strip_control_characters
from cloudhop.models.deployment import DeploymentConfig, Environment, Platform

logger = structlog.get_logger(__name__)

type Schema = Callable[[Any], Any]

DEFAULT_LIST_LIMIT = 20
MAX_TEXT_LENGTH = 500
_ENV_VAR_NAME = re.compile(r"^[A-Za-z_][A-Za-z0-9_]*$")
_LIMIT_ADAPTER: Final = TypeAdapter(Annotated[int, Field(strict=True, ge=1, le=100)])


@dataclass(slots=True, frozen=True)
class ValidationResult:
    """Outcome of validating one named input."""

    success: bool
    data: Any = None
    error: str | None = None
    field: str | None = None


def _choice(field: str, allowed: Iterable[str]) -> Schema:
    options = tuple(allowed)

    def schema(value: Any) -> str:
        cleaned = sanitize_input(value)
        if not isinstance(cleaned, str) or cleaned not in options:
            msg = f"{field.capitalize()} must be one of: {', '.join(options)}"
            raise ValueError(msg)
        return cleaned

    return schema


def _platform(value: Any) -> Platform:
    cleaned = sanitize_input(value)
    try:
        return Platform(cleaned)
    except ValueError:
        allowed = ", ".join(member.value for member in Platform)
        msg = f"platform {cleaned!r} not supported (supported: {allowed})"
        raise ValueError(msg) from None


def _identifier(label: str, *, max_length: int = 200) -> Schema:
    def schema(value: Any) -> str:
        cleaned = sanitize_input(value)
        if not isinstance(cleaned, str):
            msg = f"{label} must be a string"
            raise ValueError(msg)
        if not cleaned:
            msg = f"{label} cannot be empty"
            raise ValueError(msg)
        if len(cleaned) > max_length:
            msg = f"{label} too long (max {max_length} characters)"
            raise ValueError(msg)
        return cleaned

    return schema


def _text(label: str) -> Schema:
    def schema(value: Any) -> str:
        if not isinstance(value, str):
            msg = f"{label} must be a string"
            raise ValueError(msg)
        cleaned = strip_control_characters(value)
        if not cleaned:
            msg = f"{label} cannot be empty"
            raise ValueError(msg)
        if len(cleaned) > MAX_TEXT_LENGTH:
            msg = f"{label} too long (max {MAX_TEXT_LENGTH} characters)"
            raise ValueError(msg)
        return cleaned

    return schema


def _credentials(value: Any) -> dict[str, str]:
    if not isinstance(value, dict) or not value:
        msg = "credentials must be a non-empty mapping of field name to value"
        raise ValueError(msg)
    cleaned: dict[str, str] = {}
    for key, raw in value.items():
        name = sanitize_input(key)
        if not isinstance(name, str) or not name:
            msg = "credential field names must be non-empty strings"
            raise ValueError(msg)
        if not isinstance(raw, str):
            msg = f"value for {name!r} must be a string"
            raise ValueError(msg)
        # Secrets are opaque: only control characters and surrounding whitespace go.
        secret = strip_control_characters(raw)
        if not secret:
            msg = f"value for {name!r} cannot be empty"
            raise ValueError(msg)
        cleaned[name] = secret
    return cleaned


def _environment_variables(value: Any) -> dict[str, str]:
    if not isinstance(value, dict):
        msg = "environment variables must be a mapping of name to value"
        raise ValueError(msg)
    cleaned: dict[str, str] = {}
    for key, raw in value.items():
        if not isinstance(key, str) or _ENV_VAR_NAME.fullmatch(key) is None:
            msg = f"invalid variable name {key!r}"
            raise ValueError(msg)
        if not isinstance(raw, str):
            msg = f"value for {key!r} must be a string"
            raise ValueError(msg)
        cleaned[key] = strip_control_characters(raw)
    return cleaned


def _domains(value: Any) -> tuple[str, ...]:
    if not isinstance(value, list | tuple):
        msg = "domains must be a list of host names"
        raise ValueError(msg)
    domain = _identifier("domain", max_length=253)
    return tuple(domain(item) for item in value)


def _limit(value: Any) -> int:
    if value is None:
        return DEFAULT_LIST_LIMIT
    try:
        return _LIMIT_ADAPTER.validate_python(value)
    except pydantic.ValidationError:
        msg = "limit must be an integer between 1 and 100"
        raise ValueError(msg) from None


SCHEMAS: Final[dict[str, Schema]] = {
    "project name": check_project_name,
    "platform": _platform,
    "environment": _choice("environment", (member.value for member in Environment)),
    "credentials": _credentials,
    "deployment id": _identifier("deployment id"),
    "team id": _identifier("team id"),
    "region": _identifier("region", max_length=64),
    "build command": _text("build command"),
    "output directory": _text("output directory"),
    "environment variables": _environment_variables,
    "domains": _domains,
    "limit": _limit,
}


def validate_and_sanitize(schema: str, value: Any) -> ValidationResult:
    """Sanitize and validate `value` against a named schema. Never raises."""
    check = SCHEMAS.get(schema)
    if check is None:
        return ValidationResult(success=False, error=f"Unknown schema: {schema}", field=schema)
    try:
        data = check(value)
    except ValueError as exc:
        logger.warning("validation.failed", field=schema)
        return ValidationResult(success=False, error=f"Invalid {schema}: {exc}", field=schema)
    return ValidationResult(success=True, data=data)


def require(schema: str, value: Any) -> Any:
    """Validate `value` or raise `ValidationError` naming the field."""
    result = validate_and_sanitize(schema, value)
    if not result.success:
        raise ValidationError(schema, result.error or f"Invalid {schema}")
    return result.data


# camelCase argument key -> schema name, in validation order.
_CONFIG_FIELDS: Final[tuple[tuple[str, str, str], ...]] = (
    ("projectName", "project name", "project_name"),
    ("environment", "environment", "environment"),
    ("buildCommand", "build command", "build_command"),
    ("outputDirectory", "output directory", "output_directory"),
    ("environmentVariables", "environment variables", "environment_variables"),
    ("domains", "domains", "domains"),
    ("region", "region", "region"),
)


def parse_deployment_config(raw: Any, *, platform: Platform) -> DeploymentConfig:
    """Build a `DeploymentConfig` from raw tool arguments.

    The whole config is rejected on the first invalid field; unknown keys are
    rejected as well. `platform` has already been resolved by the caller.
    """
    if not isinstance(raw, dict):
        raise ValidationError("config", "Invalid config: expected an object")
    known = {key for key, _, _ in _CONFIG_FIELDS} | {"platform"}
    unknown = sorted(str(key) for key in raw if key not in known)
    if unknown:
        raise ValidationError("config", f"Invalid config: unknown field {unknown[0]!r}")
    if "projectName" not in raw:
        raise ValidationError("project name", "Invalid project name: projectName is required")

    values: dict[str, Any] = {"platform": platform}
    for key, schema, attribute in _CONFIG_FIELDS:
        if key in raw and raw[key] is not None:
            values[attribute] = require(schema, raw[key])
    try:
        return DeploymentConfig(**values)
    except pydantic.ValidationError as exc:
        first = exc.errors()[0]
        field = ".".join(str(part) for part in first["loc"]) or "config"
        raise ValidationError(field, f"Invalid {field}: {first['msg']}") from None
