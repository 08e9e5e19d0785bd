from __future__ import annotations

from pathlib import Path

import pytest
from pydantic import ValidationError

from resourcegraph.settings import Settings, load_settings


def write_toml(path: Path, content: str) -> None:
    path.write_text(content, encoding="utf-8")


def test_defaults(monkeypatch):
    monkeypatch.delenv("RESOURCEGRAPH_LOG_LEVEL", raising=False)
    settings = Settings()
    assert settings.pagination.default_page_size is None
    assert settings.pagination.association_page_size == 999
    assert settings.pagination.max_page_size is None
    assert settings.errors.default_code == 500
    assert settings.logging.level == "INFO"


def test_toml_then_env_then_overrides(tmp_path, monkeypatch):
    config_path = tmp_path / "resourcegraph.toml"
    write_toml(
        config_path,
        """
[pagination]
default_page_size = 25
max_page_size = 100

[errors]
default_message = "Nope"
""",
    )
    monkeypatch.setenv("RESOURCEGRAPH_PAGINATION__MAX_PAGE_SIZE", "50")

    settings = load_settings(config_path, overrides={"errors": {"default_code": 503}})
    assert settings.pagination.default_page_size == 25
    assert settings.pagination.max_page_size == 50
    assert settings.errors.default_message == "Nope"
    assert settings.errors.default_code == 503


def test_pyproject_tool_table(tmp_path, monkeypatch):
    monkeypatch.delenv("RESOURCEGRAPH_PAGINATION__MAX_PAGE_SIZE", raising=False)
    config_path = tmp_path / "pyproject.toml"
    write_toml(
        config_path,
        """
[project]
name = "demo"

[tool.resourcegraph.pagination]
association_page_size = 10
""",
    )
    assert load_settings(config_path).pagination.association_page_size == 10


def test_missing_config_file(tmp_path):
    with pytest.raises(FileNotFoundError):
        load_settings(tmp_path / "absent.toml")


def test_page_sizes_must_be_positive():
    with pytest.raises(ValidationError):
        Settings(pagination={"max_page_size": 0})


def test_log_level_env(monkeypatch):
    monkeypatch.setenv("RESOURCEGRAPH_LOG_LEVEL", "debug")
    assert Settings().logging.level == "DEBUG"
    monkeypatch.setenv("RESOURCEGRAPH_LOG_LEVEL", "chatty")
    with pytest.raises(ValidationError):
        Settings()
