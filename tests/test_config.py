from __future__ import annotations

from pathlib import Path

import pytest
from pydantic import ValidationError

from edgeworker import config as loop_config
from edgeworker.config import Settings, ValidationConfigError, load_loop_config
from edgeworker.validation import DEFAULT_VALIDATION_LOOP_CONFIG


def test_settings_defaults(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.delenv("VALIDATION_MAX_ITERATIONS", raising=False)
    monkeypatch.delenv("VALIDATION_CONTINUE_ON_MAX_RETRIES", raising=False)
    assert Settings().loop_config() == DEFAULT_VALIDATION_LOOP_CONFIG


def test_settings_from_environment(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("VALIDATION_MAX_ITERATIONS", "2")
    monkeypatch.setenv("VALIDATION_CONTINUE_ON_MAX_RETRIES", "false")
    config = Settings().loop_config()
    assert config.max_iterations == 2
    assert config.continue_on_max_retries is False


def test_settings_reject_zero_iterations(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("VALIDATION_MAX_ITERATIONS", "0")
    with pytest.raises(ValidationError):
        Settings()


def test_load_config_file(tmp_path: Path) -> None:
    path = tmp_path / "edgeworker.yml"
    path.write_text("validation:\n  max_iterations: 3\n", encoding="utf-8")
    config = load_loop_config(path)
    assert config.max_iterations == 3
    assert config.continue_on_max_retries is True


def test_load_config_without_section_uses_defaults(tmp_path: Path) -> None:
    path = tmp_path / "edgeworker.yml"
    path.write_text("validation:\n", encoding="utf-8")
    assert load_loop_config(path) == DEFAULT_VALIDATION_LOOP_CONFIG


@pytest.mark.parametrize(
    ("body", "message"),
    [
        ("validation:\n  max_iterations: many\n", "must be an integer"),
        ("validation:\n  max_iterations: 0\n", "at least 1"),
        ("validation:\n  continue_on_max_retries: 1\n", "must be a boolean"),
        ("validation:\n  retries: 2\n", "unknown fields: retries"),
        ("other: true\n", "unknown fields: other"),
        ("- a\n- b\n", "must be a mapping"),
        ("", "empty"),
    ],
)
def test_load_config_rejects_invalid_files(tmp_path: Path, body: str, message: str) -> None:
    path = tmp_path / "edgeworker.yml"
    path.write_text(body, encoding="utf-8")
    with pytest.raises(ValidationConfigError) as exc:
        load_loop_config(path)
    assert message in str(exc.value)


def test_load_config_missing_file(tmp_path: Path) -> None:
    with pytest.raises(ValidationConfigError):
        load_loop_config(tmp_path / "missing.yml")


def test_load_config_requires_yaml_dependency(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
    path = tmp_path / "edgeworker.yml"
    path.write_text("validation:\n  max_iterations: 3\n", encoding="utf-8")

    def _raise() -> None:
        raise ValidationConfigError("Install PyYAML to load validation config files.")

    monkeypatch.setattr(loop_config, "_import_yaml", lambda: (_raise() or None))
    with pytest.raises(ValidationConfigError) as exc:
        load_loop_config(path)
    assert "PyYAML" in str(exc.value)
