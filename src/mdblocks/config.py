"""Application configuration: settings schema and config.yaml loader"""

import logging
import os
from pathlib import Path
from typing import Any

import yaml
from pydantic import BaseModel, Field, field_validator

from mdblocks.core.models import (
    DEFAULT_LARGE_COMPONENTS,
    DEFAULT_SELF_CLOSING_COMPONENTS,
    ComponentCatalog,
)


CONFIG_FILE = "config.yaml"
ENV_PREFIX = "MDBLOCKS_"
CONFIG_PATH_ENV = "MDBLOCKS_CONFIG"


class Settings(BaseModel):
    app_name:      str = "mdblocks"
    db_url:        str = "sqlite:///mdblocks.db"
    large_components: list[str] = Field(
        default_factory=lambda: list(DEFAULT_LARGE_COMPONENTS),
        description="Tags closed by a matching end tag, may span many lines",
    )
    self_closing_components: list[str] = Field(
        default_factory=lambda: list(DEFAULT_SELF_CLOSING_COMPONENTS),
        description="Tags terminated by '/>' whose attributes may wrap",
    )
    render_preset: str = Field(default="gfm-like", description="MarkdownIt preset used for rendering")
    output_dir:    str = Field(default="dist", description="Directory for exported MD/MDX + JSON files")
    output_format: str = Field(default="mdx", pattern="^(md|mdx)$", description="md or mdx")
    max_versions:  int = Field(default=10, ge=0, description="Max stored versions per page; 0 = unlimited")
    log_level:     str = Field(default="WARNING", description="Root logging level for the CLI")

    @field_validator("large_components", "self_closing_components", mode="before")
    @classmethod
    def _split_names(cls, v: Any) -> Any:
        """Accept comma-separated strings (env vars) as well as lists."""
        if isinstance(v, str):
            return [name.strip() for name in v.split(",") if name.strip()]
        return v

    @field_validator("log_level")
    @classmethod
    def _known_level(cls, v: str) -> str:
        level = v.upper()
        if not isinstance(logging.getLevelName(level), int):
            raise ValueError(f"Unknown log level: {v}")
        return level

    def catalog(self) -> ComponentCatalog:
        return ComponentCatalog(large=self.large_components, self_closing=self.self_closing_components)


def _file_layer(path: Path) -> dict[str, Any]:
    if not path.exists():
        return {}
    try:
        data = yaml.safe_load(path.read_text(encoding="utf-8"))
    except yaml.YAMLError as e:
        raise ValueError(f"Invalid {path.name}: {e}") from e
    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ValueError(f"Invalid {path.name}: expected a mapping, got {type(data).__name__}")
    return data


def _env_layer() -> dict[str, Any]:
    layer = {}
    for name in Settings.model_fields:
        value = os.environ.get(ENV_PREFIX + name.upper())
        if value:
            layer[name] = value
    return layer


def load_config(overrides: dict[str, Any] = None, config_file: str | Path | None = None) -> Settings:
    """Build Settings from layers, each replacing keys set by the one before.

    Layers: the config file (config_file, else $MDBLOCKS_CONFIG, else
    ./config.yaml), then MDBLOCKS_<FIELD> env vars, then non-None overrides.
    """
    path = Path(config_file or os.environ.get(CONFIG_PATH_ENV) or CONFIG_FILE)
    layers = [
        _file_layer(path),
        _env_layer(),
        {k: v for k, v in (overrides or {}).items() if v is not None},
    ]
    data: dict[str, Any] = {}
    for layer in layers:
        data.update(layer)
    return Settings(**data)


def configure_logging(settings: Settings) -> None:
    logging.basicConfig(
        level=settings.log_level,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
