"""Utilities for inspecting and validating configuration files."""

from __future__ import annotations

from pathlib import Path
from types import UnionType
from typing import Any, Iterable, Union, get_args, get_origin

from pydantic import BaseModel, ValidationError
from pydantic.fields import FieldInfo

from .app import AppConfig
from .base import load_config
from .utils import resolve_env_reference

# (exception type, error type label, exit code); order matters, ValidationError is a ValueError.
_LOAD_FAILURES: tuple[tuple[type[Exception], str, int], ...] = (
    (FileNotFoundError, "missing_file", 2),
    (PermissionError, "permission_error", 2),
    (ValidationError, "validation_error", 3),
    (ValueError, "invalid_format", 1),
)


class ConfigInspectionError(RuntimeError):
    """Raised when configuration inspection fails unexpectedly."""


def check_config(path: Path) -> tuple[dict[str, Any], int, AppConfig | None]:
    """Validate the configuration file and collect warnings.

    Returns a tuple of ``(result_dict, exit_code, config_instance_or_None)``.
    """

    try:
        config = load_config(AppConfig, path)
    except Exception as exc:
        for exc_type, label, exit_code in _LOAD_FAILURES:
            if isinstance(exc, exc_type):
                return _error_result(path, exc, label), exit_code, None
        raise ConfigInspectionError("Unexpected configuration inspection error") from exc

    result = {
        "status": "ok",
        "config_path": str(path),
        "warnings": _collect_warnings(config),
    }
    return result, 0, config


def explain_config() -> list[dict[str, Any]]:
    """Describe configuration fields for documentation purposes."""

    documentation: list[dict[str, Any]] = []

    def _walk(model_cls: type[BaseModel], prefix: str) -> None:
        for field_name, field in model_cls.model_fields.items():
            name = f"{prefix}{field_name}"
            documentation.append(
                {
                    "name": name,
                    "type": _format_annotation(field.annotation),
                    "required": field.is_required(),
                    "default": _format_default(field),
                    "description": field.description or "",
                }
            )
            nested = _nested_model(field.annotation)
            if nested is not None:
                _walk(nested, f"{name}.")

    _walk(AppConfig, "")
    return documentation


def _error_result(path: Path, exc: Exception, label: str) -> dict[str, Any]:
    error: dict[str, Any] = {"type": label, "message": str(exc)}
    if isinstance(exc, ValidationError):
        error["message"] = "Configuration validation failed"
        error["details"] = [
            {
                "loc": _format_error_location(err["loc"]),
                "message": err["msg"],
                "type": err["type"],
            }
            for err in exc.errors()
        ]
    return {"status": "error", "config_path": str(path), "error": error}


def _format_error_location(location: Iterable[Union[int, str]]) -> str:
    return ".".join(str(part) for part in location)


def _collect_warnings(config: AppConfig) -> list[str]:
    warnings: list[str] = []

    if config.session.store == "memory" and config.session.token is None:
        warnings.append("Memory credential store without 'session.token'; every run starts logged out")
    if config.session.token is not None:
        try:
            resolve_env_reference(config.session.token)
        except EnvironmentError as exc:
            warnings.append(f"'session.token' cannot be resolved: {exc}")
    if config.publishing.content_dir == config.publishing.document_path.rsplit("/", 1)[0]:
        warnings.append("Images are stored next to the Now page document")
    auth = config.web.auth if config.web else None
    if config.web and config.web.enabled and not (auth and auth.enabled):
        warnings.append("Posting console is enabled without header token authentication")
    if auth and auth.enabled:
        try:
            auth.resolved_token()
        except EnvironmentError as exc:
            warnings.append(f"'web.auth.token' cannot be resolved; 'serve' will refuse to start: {exc}")

    return warnings


def _format_annotation(annotation: Any) -> str:
    origin = get_origin(annotation)
    if origin is None:
        if isinstance(annotation, type):
            return annotation.__name__
        return repr(annotation).replace("typing.", "")

    args = get_args(annotation)
    if origin in {Union, UnionType}:
        non_none = [arg for arg in args if arg is not type(None)]  # noqa: E721
        if len(non_none) == 1 and len(args) == 2:
            return f"Optional[{_format_annotation(non_none[0])}]"
        return f"Union[{', '.join(_format_annotation(arg) for arg in args)}]"

    origin_name = getattr(origin, "__name__", repr(origin).replace("typing.", ""))
    if args:
        return f"{origin_name}[{', '.join(_format_annotation(arg) for arg in args)}]"
    return origin_name


def _format_default(field: FieldInfo) -> Any:
    if field.default_factory is not None:
        value = field.default_factory()
    elif field.is_required():
        return None
    else:
        value = field.default
    if isinstance(value, Path):
        return str(value)
    if isinstance(value, BaseModel):
        return value.model_dump(mode="json")
    return value


def _nested_model(annotation: Any) -> type[BaseModel] | None:
    candidates = get_args(annotation) if get_origin(annotation) in {Union, UnionType} else (annotation,)
    for candidate in candidates:
        if isinstance(candidate, type) and issubclass(candidate, BaseModel):
            return candidate
    return None


__all__ = ["check_config", "explain_config", "ConfigInspectionError"]
