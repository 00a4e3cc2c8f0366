"""
reportproc/config.py

Runtime settings for the report processor.

Responsibilities
----------------
- Define the `Settings` model: the three folder/file locations the watcher
  needs plus a few tuning knobs.
- Build `Settings` from environment variables (optionally loaded from a
  `.env` file) and let CLI flags override individual values.

Environment Variables
---------------------
INPUT_FOLDER
    Folder watched for incoming generation report XML files. Required.
OUTPUT_FOLDER
    Folder the `<name>-Result.xml` files are written to. Required.
REFERENCE_DATA
    Path of the reference data XML holding the value and emission factors.
    Required.
FILE_PATTERN
    Glob used when watching for new files. Defaults to "*.xml".
POLL_INTERVAL
    Seconds between folder polls. Defaults to 1.0.
LOG_LEVEL
    Logging level name. Defaults to "INFO".

Notes
-----
- Settings are built once in `reportproc.run.main` and passed explicitly to
  every stage; nothing reads the environment at import time.
"""

from __future__ import annotations

import logging
import os
from collections.abc import Mapping
from pathlib import Path

from dotenv import load_dotenv
from pydantic import BaseModel, field_validator

from .errors import ConfigError

REQUIRED_KEYS = ("INPUT_FOLDER", "OUTPUT_FOLDER", "REFERENCE_DATA")


class Settings(BaseModel):
    """Validated configuration for one processor instance.

    Attributes:
        input_folder: Folder scanned at startup and then watched.
        output_folder: Destination folder for result documents.
        reference_data: Reference data XML file.
        file_pattern: Glob for files picked up by the watcher.
        poll_interval: Seconds between folder polls; must be positive.
        log_level: Name of a standard logging level.
    """

    input_folder: Path
    output_folder: Path
    reference_data: Path
    file_pattern: str = "*.xml"
    poll_interval: float = 1.0
    log_level: str = "INFO"

    @field_validator("poll_interval")
    @classmethod
    def positive_interval(cls, v):
        if v <= 0:
            raise ValueError("poll_interval must be positive")
        return v

    @field_validator("log_level")
    @classmethod
    def known_level(cls, v):
        v = v.upper()
        if not isinstance(logging.getLevelName(v), int):
            raise ValueError(f"unknown log level {v!r}")
        return v

    @classmethod
    def from_env(
        cls,
        environ: Mapping[str, str] | None = None,
        overrides: Mapping[str, object] | None = None,
    ) -> Settings:
        """Build settings from the environment.

        Args:
            environ: Mapping to read from. Defaults to `os.environ` after
                loading `.env` from the working directory.
            overrides: Field values that take precedence over the
                environment (typically CLI flags). `None` values are ignored.

        Returns:
            Settings: The validated settings.

        Raises:
            ConfigError: If a required key is missing and not overridden.
        """
        if environ is None:
            # Local .env keeps shells from having to export anything.
            load_dotenv()
            environ = os.environ

        overrides = {k: v for k, v in (overrides or {}).items() if v is not None}

        values: dict[str, object] = {}
        for key in REQUIRED_KEYS:
            field = key.lower()
            if field in overrides:
                continue
            if not environ.get(key):
                raise ConfigError(f"Missing configuration for key: {key}")
            values[field] = environ[key]

        optional = {
            "FILE_PATTERN": "file_pattern",
            "POLL_INTERVAL": "poll_interval",
            "LOG_LEVEL": "log_level",
        }
        for key, field in optional.items():
            if environ.get(key):
                values[field] = environ[key]

        values.update(overrides)
        return cls(**values)

    def check_folders(self) -> bool:
        """Return True when both the input and output folders exist."""
        return self.input_folder.is_dir() and self.output_folder.is_dir()
