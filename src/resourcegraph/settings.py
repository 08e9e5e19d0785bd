from __future__ import annotations

import os
import tomllib
from pathlib import Path
from typing import Any, Dict

from pydantic import BaseModel, ConfigDict, field_validator, model_validator


class PaginationSettings(BaseModel):
    default_page_size: int | None = None
    association_page_size: int = 999
    max_page_size: int | None = None

    model_config = ConfigDict(extra="ignore")

    @field_validator("default_page_size", "association_page_size", "max_page_size")
    @classmethod
    def validate_positive(cls, value: int | None) -> int | None:
        if value is not None and value <= 0:
            raise ValueError("page sizes must be positive")
        return value


class ErrorSettings(BaseModel):
    default_message: str = "We're sorry, something went wrong."
    default_code: int = 500

    model_config = ConfigDict(extra="ignore")


class LoggingSettings(BaseModel):
    level: str = "INFO"
    jsonl: bool = False
    log_file: Path | None = None

    model_config = ConfigDict(extra="ignore")

    @field_validator("level")
    @classmethod
    def validate_level(cls, value: str) -> str:
        value = value.upper()
        if value not in ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"):
            raise ValueError(f"unknown log level: {value}")
        return value


class Settings(BaseModel):
    pagination: PaginationSettings = PaginationSettings()
    errors: ErrorSettings = ErrorSettings()
    logging: LoggingSettings = LoggingSettings()

    model_config = ConfigDict(extra="ignore")

    @model_validator(mode="after")
    def apply_env_log_level(self) -> "Settings":
        env_level = os.getenv("RESOURCEGRAPH_LOG_LEVEL")
        if env_level:
            self.logging.level = LoggingSettings.validate_level(env_level)
        return self


def _deep_update(target: Dict[str, Any], updates: Dict[str, Any]) -> Dict[str, Any]:
    for key, value in updates.items():
        if isinstance(value, dict) and isinstance(target.get(key), dict):
            _deep_update(target[key], value)  # type: ignore[index]
        else:
            target[key] = value
    return target


def _load_toml(path: Path | None) -> Dict[str, Any]:
    if path is None or not path.exists():
        return {}
    with path.open("rb") as f:
        data = tomllib.load(f)
    # allow both a bare file and a [tool.resourcegraph] table
    return data.get("tool", {}).get("resourcegraph", data)


def _extract_prefixed(source: Dict[str, str], *, prefix: str = "RESOURCEGRAPH_", delimiter: str = "__") -> Dict[str, Any]:
    data: Dict[str, Any] = {}
    for key, value in source.items():
        if not key.startswith(prefix) or delimiter not in key:
            continue
        path = key.removeprefix(prefix).split(delimiter)
        target = data
        for part in path[:-1]:
            target = target.setdefault(part.lower(), {})
        target[path[-1].lower()] = value
    return data


def load_settings(
    path: Path | None = None,
    *,
    overrides: Dict[str, Any] | None = None,
) -> Settings:
    if path is not None and not path.exists():
        raise FileNotFoundError(f"Config file not found at {path}")

    merged: Dict[str, Any] = {}
    _deep_update(merged, _load_toml(path))
    _deep_update(merged, _extract_prefixed(dict(os.environ)))
    if overrides:
        _deep_update(merged, overrides)
    return Settings(**merged)


__all__ = [
    "Settings",
    "PaginationSettings",
    "ErrorSettings",
    "LoggingSettings",
    "load_settings",
]
