"""Configuration settings for the EdgeWorker validation loop."""

from __future__ import annotations

from pathlib import Path
from typing import Any

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from edgeworker.validation.schema import DEFAULT_VALIDATION_LOOP_CONFIG, ValidationLoopConfig


class ValidationConfigError(ValueError):
    """Raised when validation loop configuration is invalid."""


class Settings(BaseSettings):
    """Runtime configuration loaded from environment variables or overrides."""

    model_config = SettingsConfigDict(
        env_prefix="", case_sensitive=False, populate_by_name=True
    )

    validation_max_iterations: int = Field(
        default=DEFAULT_VALIDATION_LOOP_CONFIG.max_iterations,
        ge=1,
        validation_alias="VALIDATION_MAX_ITERATIONS",
    )
    validation_continue_on_max_retries: bool = Field(
        default=DEFAULT_VALIDATION_LOOP_CONFIG.continue_on_max_retries,
        validation_alias="VALIDATION_CONTINUE_ON_MAX_RETRIES",
    )
    home_dir: str = Field(default=".edgeworker", validation_alias="EDGEWORKER_HOME")
    log_level: str = Field(default="INFO", validation_alias="EDGEWORKER_LOG_LEVEL")

    def loop_config(self) -> ValidationLoopConfig:
        return ValidationLoopConfig(
            max_iterations=self.validation_max_iterations,
            continue_on_max_retries=self.validation_continue_on_max_retries,
        )


def _import_yaml():
    try:
        import yaml  # type: ignore
    except ImportError as exc:  # pragma: no cover - exercised in integration
        raise ValidationConfigError("Install PyYAML to load validation config files.") from exc
    return yaml


def _ensure_dict(value: Any, context: str) -> dict[str, Any]:
    if not isinstance(value, dict):
        raise ValidationConfigError(f"{context} must be a mapping.")
    return value


def _require_keys(data: dict[str, Any], allowed: set[str], context: str) -> None:
    unknown = set(data.keys()) - allowed
    if unknown:
        names = ", ".join(sorted(str(key) for key in unknown))
        raise ValidationConfigError(f"{context} has unknown fields: {names}.")


def _get_bool(value: Any, context: str) -> bool:
    if isinstance(value, bool):
        return value
    raise ValidationConfigError(f"{context} must be a boolean.")


def _get_int(value: Any, context: str) -> int:
    if isinstance(value, int) and not isinstance(value, bool):
        return int(value)
    raise ValidationConfigError(f"{context} must be an integer.")


def load_loop_config(path: Path) -> ValidationLoopConfig:
    """Load a ValidationLoopConfig from the ``validation`` section of a YAML file.

    Missing keys fall back to DEFAULT_VALIDATION_LOOP_CONFIG.
    """
    if not path.exists():
        raise ValidationConfigError(f"validation config not found at {path}.")
    yaml = _import_yaml()
    try:
        data = yaml.safe_load(path.read_text(encoding="utf-8"))
    except yaml.YAMLError as exc:
        raise ValidationConfigError(f"validation config is not valid YAML: {exc}") from exc
    if data is None:
        raise ValidationConfigError("validation config is empty.")
    payload = _ensure_dict(data, "validation config")
    _require_keys(payload, {"validation"}, "validation config")
    section = payload.get("validation")
    if section is None:
        return DEFAULT_VALIDATION_LOOP_CONFIG
    section = _ensure_dict(section, "validation")
    _require_keys(section, {"max_iterations", "continue_on_max_retries"}, "validation")
    max_iterations = _get_int(
        section.get("max_iterations", DEFAULT_VALIDATION_LOOP_CONFIG.max_iterations),
        "validation.max_iterations",
    )
    if max_iterations < 1:
        raise ValidationConfigError("validation.max_iterations must be at least 1.")
    continue_on_max_retries = _get_bool(
        section.get(
            "continue_on_max_retries", DEFAULT_VALIDATION_LOOP_CONFIG.continue_on_max_retries
        ),
        "validation.continue_on_max_retries",
    )
    return ValidationLoopConfig(
        max_iterations=max_iterations,
        continue_on_max_retries=continue_on_max_retries,
    )
