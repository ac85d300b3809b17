"""Tests for configuration management."""

from pathlib import Path

import pytest
from pydantic import ValidationError

from pagewright.core.config import DEFAULT_ALLOWED_TAGS, PagewrightConfig, ProcessingConfig, PromptTemplates
from pagewright.core.errors import ConfigLoadingError


def test_default_config() -> None:
    """Test default configuration values."""
    config = PagewrightConfig()

    assert config.processing.max_html_size == 1_048_576
    assert config.processing.sanitize_output is True
    assert config.processing.minify_output is False
    assert config.processing.allowed_tags == DEFAULT_ALLOWED_TAGS

    assert config.agent.connector == "anthropic"
    assert config.storage.backend == "local"
    assert config.database.url == "sqlite:///pagewright.db"

    assert "{html}" in config.prompts.modify_html
    assert "{prompt}" in config.prompts.create_html


def test_save_and_load_config(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    """Test saving and loading configuration."""
    monkeypatch.chdir(tmp_path)

    config = PagewrightConfig(
        processing=ProcessingConfig(max_html_size=2048, minify_output=True, allowed_tags={"div", "p"}),
    )
    config.agent.connector = "openai"
    path = config.save()

    assert path == tmp_path / "pagewright.yaml"

    loaded = PagewrightConfig.load_config()

    assert loaded.processing.max_html_size == 2048
    assert loaded.processing.minify_output is True
    assert loaded.processing.allowed_tags == frozenset({"div", "p"})
    assert loaded.agent.connector == "openai"


def test_missing_config(tmp_path: Path) -> None:
    """Loading without a config file explains how to create one."""
    with pytest.raises(ConfigLoadingError, match="pagewright init"):
        PagewrightConfig.load_config(tmp_path / "pagewright.yaml")


def test_malformed_config(tmp_path: Path) -> None:
    """Bad YAML and bad values are both reported as loading errors."""
    bad_yaml = tmp_path / "bad.yaml"
    bad_yaml.write_text("processing: [unclosed\n")
    with pytest.raises(ConfigLoadingError):
        PagewrightConfig.load_config(bad_yaml)

    bad_value = tmp_path / "bad_value.yaml"
    bad_value.write_text("processing:\n  max_html_size: -5\n")
    with pytest.raises(ConfigLoadingError):
        PagewrightConfig.load_config(bad_value)


def test_empty_file_gives_defaults(tmp_path: Path) -> None:
    path = tmp_path / "pagewright.yaml"
    path.write_text("")

    assert PagewrightConfig.load_config(path) == PagewrightConfig()


def test_processing_config_is_immutable() -> None:
    """Processing settings cannot be changed once built."""
    config = ProcessingConfig()

    with pytest.raises(ValidationError):
        config.max_html_size = 10  # type: ignore[misc]


def test_allowed_tags_are_lowercased() -> None:
    assert ProcessingConfig(allowed_tags=["DIV", " Span "]).allowed_tags == frozenset({"div", "span"})


def test_prompt_templates_need_placeholders() -> None:
    """Templates missing their placeholders are rejected."""
    with pytest.raises(ValidationError):
        PromptTemplates(modify_html="Edit this: {html}")
    with pytest.raises(ValidationError):
        PromptTemplates(create_html="Make a page")
