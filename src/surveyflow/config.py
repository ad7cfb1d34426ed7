"""
Engine settings and logging setup.

Settings come from an optional YAML file, then environment overrides:

    SURVEYFLOW_LOG_LEVEL           e.g. DEBUG, INFO
    SURVEYFLOW_SANITIZE_ON_LOAD    true/false

The merged values are validated by the ``EngineSettings`` Pydantic model.

Usage:
    settings = load_settings("surveyflow.yaml")
    configure_logging(settings.log_level)
"""

from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import Optional, Union

import yaml
from pydantic import BaseModel, ConfigDict, ValidationError, field_validator

from surveyflow.errors import SurveyConfigurationError

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"

# environment variable -> settings field
ENV_OVERRIDES = {
    "SURVEYFLOW_LOG_LEVEL": "log_level",
    "SURVEYFLOW_SANITIZE_ON_LOAD": "sanitize_on_load",
}


def _level_name(level: str) -> str:
    name = str(level).upper()
    if not isinstance(logging.getLevelName(name), int):
        raise ValueError(f"Unknown log level: {level!r}")
    return name


class EngineSettings(BaseModel):
    """
    Properties:
        sanitize_on_load:
            Strip dangling/forward conditions when a survey is loaded
        log_level:
            Level name for the ``surveyflow`` logger
    """

    model_config = ConfigDict(extra="forbid")

    sanitize_on_load: bool = True
    log_level: str = "WARNING"

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        return _level_name(v)


def load_settings(path: Optional[Union[str, Path]] = None) -> EngineSettings:
    """
    Build EngineSettings from an optional YAML file and the environment.

    Raises:
        FileNotFoundError: If ``path`` is given but does not exist
        SurveyConfigurationError: If the file or an override is invalid
    """
    raw: dict = {}
    if path is not None:
        path = Path(path)
        if not path.exists():
            raise FileNotFoundError(f"Settings file not found: {path}")
        with open(path, "r", encoding="utf-8") as handle:
            loaded = yaml.safe_load(handle)
        if loaded is None:
            loaded = {}
        if not isinstance(loaded, dict):
            raise SurveyConfigurationError(f"Settings file must contain a mapping: {path}")
        raw = dict(loaded)

    for env_name, field_name in ENV_OVERRIDES.items():
        value = os.environ.get(env_name)
        if value:
            raw[field_name] = value

    try:
        return EngineSettings(**raw)
    except ValidationError as e:
        raise SurveyConfigurationError(f"Invalid engine settings:\n{e}") from e


def configure_logging(level: str = "WARNING") -> logging.Logger:
    """Attach a single stream handler to the ``surveyflow`` logger."""
    try:
        name = _level_name(level)
    except ValueError as e:
        raise SurveyConfigurationError(str(e)) from e

    logger = logging.getLogger("surveyflow")
    logger.setLevel(name)
    if not any(getattr(h, "_surveyflow", False) for h in logger.handlers):
        handler = logging.StreamHandler()
        handler.setFormatter(logging.Formatter(LOG_FORMAT))
        handler._surveyflow = True  # type: ignore[attr-defined]
        logger.addHandler(handler)
    return logger
