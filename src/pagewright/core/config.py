"""Configuration management for pagewright."""

from __future__ import annotations

from pathlib import Path
from typing import Literal, Self

import yaml
from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from pagewright.ai.prompts import CREATE_HTML_PROMPT, MODIFY_HTML_PROMPT
from pagewright.core.errors import ConfigLoadingError

DEFAULT_ALLOWED_TAGS = frozenset(
    {
        "html", "head", "title", "meta", "link", "style", "body", "base",
        "header", "footer", "nav", "main", "section", "article", "aside", "address",
        "div", "span", "p", "br", "hr", "pre", "code", "blockquote", "q", "cite",
        "h1", "h2", "h3", "h4", "h5", "h6",
        "a", "strong", "em", "b", "i", "u", "s", "small", "sub", "sup", "mark", "abbr", "time",
        "ul", "ol", "li", "dl", "dt", "dd",
        "table", "caption", "thead", "tbody", "tfoot", "tr", "th", "td", "colgroup", "col",
        "img", "picture", "source", "figure", "figcaption", "video", "audio", "track", "svg", "path",
        "form", "fieldset", "legend", "label", "input", "button", "select", "option", "optgroup", "textarea",
        "details", "summary", "template", "noscript",
    }
)  # fmt: skip


class ProcessingConfig(BaseModel):
    """Settings for one pipeline invocation. Immutable once built."""

    model_config = ConfigDict(frozen=True)

    max_html_size: int = Field(default=1_048_576, gt=0)
    sanitize_output: bool = True
    minify_output: bool = False
    allowed_tags: frozenset[str] = DEFAULT_ALLOWED_TAGS

    @field_validator("allowed_tags", mode="before")
    @classmethod
    def lowercase_tags(cls, v: object) -> frozenset[str]:
        if isinstance(v, str):
            v = [v]
        return frozenset(str(tag).strip().lower() for tag in v)  # type: ignore[union-attr]


class PromptTemplates(BaseModel):
    """Request templates sent to the agent."""

    modify_html: str = MODIFY_HTML_PROMPT
    create_html: str = CREATE_HTML_PROMPT

    @field_validator("modify_html")
    @classmethod
    def modify_has_placeholders(cls, v: str) -> str:
        if "{html}" not in v or "{prompt}" not in v:
            raise ValueError("modify_html template must contain {html} and {prompt}")
        return v

    @field_validator("create_html")
    @classmethod
    def create_has_placeholder(cls, v: str) -> str:
        if "{prompt}" not in v:
            raise ValueError("create_html template must contain {prompt}")
        return v


class AgentConfig(BaseModel):
    """Agent connector settings. Credentials come from the environment."""

    connector: str = "anthropic"
    model: str | None = None
    temperature: float = 0.2
    max_tokens: int = 8000
    # bedrock only
    agent_id: str | None = None
    agent_alias_id: str | None = None
    region: str = "us-east-1"


class StorageConfig(BaseModel):
    """Object storage settings."""

    backend: Literal["local", "s3"] = "local"
    root: str = "./storage"
    bucket: str | None = None
    region: str = "us-east-1"
    endpoint_url: str | None = None
    public_url: str | None = None


class DatabaseConfig(BaseModel):
    url: str = "sqlite:///pagewright.db"
    echo: bool = False


class PagewrightConfig(BaseModel):
    """Main pagewright configuration."""

    processing: ProcessingConfig = Field(default_factory=ProcessingConfig)
    prompts: PromptTemplates = Field(default_factory=PromptTemplates)
    agent: AgentConfig = Field(default_factory=AgentConfig)
    storage: StorageConfig = Field(default_factory=StorageConfig)
    database: DatabaseConfig = Field(default_factory=DatabaseConfig)

    @classmethod
    def get_config_path(cls) -> Path:
        """Get the path to the configuration file."""
        return Path.cwd() / "pagewright.yaml"

    @classmethod
    def load_config(cls, path: Path | None = None) -> Self:
        """Load configuration from pagewright.yaml."""
        config_path = path or cls.get_config_path()

        if not config_path.exists():
            raise ConfigLoadingError(f"No configuration found at {config_path}. Run `pagewright init` first.")

        try:
            with open(config_path, encoding="utf-8") as f:
                config_data = yaml.safe_load(f) or {}
            return cls(**config_data)
        except (OSError, yaml.YAMLError, ValidationError, TypeError) as e:
            raise ConfigLoadingError(f"{e.__class__.__name__} loading {config_path}: {e}") from e

    def save(self, path: Path | None = None) -> Path:
        """Save configuration to pagewright.yaml."""
        config_path = path or self.get_config_path()
        data = self.model_dump(mode="json")
        data["processing"]["allowed_tags"] = sorted(data["processing"]["allowed_tags"])

        with open(config_path, "w", encoding="utf-8") as f:
            yaml.safe_dump(data, f, sort_keys=False)

        return config_path
