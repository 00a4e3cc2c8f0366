"""Tests for settings construction."""

from __future__ import annotations

from pathlib import Path

import pytest
from pydantic import ValidationError

from reportproc.config import Settings
from reportproc.errors import ConfigError

ENV = {
    "INPUT_FOLDER": "/data/in",
    "OUTPUT_FOLDER": "/data/out",
    "REFERENCE_DATA": "/data/ReferenceData.xml",
}


def test_from_env_required_keys():
    settings = Settings.from_env(environ=ENV)

    assert settings.input_folder == Path("/data/in")
    assert settings.output_folder == Path("/data/out")
    assert settings.reference_data == Path("/data/ReferenceData.xml")
    assert settings.file_pattern == "*.xml"
    assert settings.poll_interval == 1.0
    assert settings.log_level == "INFO"


def test_from_env_optional_keys():
    env = dict(ENV, FILE_PATTERN="*.XML", POLL_INTERVAL="2.5", LOG_LEVEL="debug")

    settings = Settings.from_env(environ=env)

    assert settings.file_pattern == "*.XML"
    assert settings.poll_interval == 2.5
    assert settings.log_level == "DEBUG"


def test_from_env_missing_key():
    env = {k: v for k, v in ENV.items() if k != "REFERENCE_DATA"}

    with pytest.raises(ConfigError, match="Missing configuration for key: REFERENCE_DATA"):
        Settings.from_env(environ=env)


def test_overrides_win_and_fill_missing_keys():
    env = {"INPUT_FOLDER": "/data/in"}

    settings = Settings.from_env(
        environ=env,
        overrides={
            "input_folder": "/elsewhere",
            "output_folder": "/data/out",
            "reference_data": "/ref.xml",
            "poll_interval": None,
        },
    )

    assert settings.input_folder == Path("/elsewhere")
    assert settings.poll_interval == 1.0


def test_from_env_loads_dotenv(monkeypatch):
    calls = []
    monkeypatch.setattr("reportproc.config.load_dotenv", lambda: calls.append(True))
    for key, value in ENV.items():
        monkeypatch.setenv(key, value)

    Settings.from_env()

    assert calls == [True]


@pytest.mark.parametrize("field, value", [("poll_interval", 0), ("log_level", "chatty")])
def test_invalid_values(field, value):
    values = {"input_folder": "a", "output_folder": "b", "reference_data": "c", field: value}

    with pytest.raises(ValidationError):
        Settings(**values)


def test_check_folders(tmp_path):
    settings = Settings(input_folder=tmp_path, output_folder=tmp_path / "missing", reference_data="r.xml")

    assert settings.check_folders() is False
    (tmp_path / "missing").mkdir()
    assert settings.check_folders() is True
