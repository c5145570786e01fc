"""Application configuration: settings schema and config.yaml loader"""

import os
from pathlib import Path
from typing import Any

import yaml
from pydantic import BaseModel, Field


CONFIG_FILE = "config.yaml"
ENV_PREFIX = "MDPOST_"


class Settings(BaseModel):
    app_name:      str = "mdpost"
    content_root:  str = Field(default=".",           description="Root directory documents are addressed from")
    image_route:   str = Field(default="/api/images", description="Route prefix that serves images while editing")
    images_dir:    str = Field(default="images",      description="Directory next to a post that holds its uploads")
    meta_description_length: int = Field(default=155, ge=1, description="Soft length target for metaDescription")
    render_preset: str = Field(default="gfm-like",    description="MarkdownIt preset used for previews")
    log_json:      bool = Field(default=False,        description="Emit JSON log lines instead of console output")
    verbose:       bool = Field(default=False,        description="Enable DEBUG logging")


def load_config(overrides: dict[str, Any] = None) -> Settings:
    """Load Settings from config.yaml, then MDPOST_<FIELD> env vars, then non-None CLI overrides."""
    data: dict[str, Any] = {}
    if Path(CONFIG_FILE).exists():
        try:
            data = yaml.safe_load(Path(CONFIG_FILE).read_text()) or {}
        except yaml.YAMLError as e:
            raise ValueError(f"Invalid {CONFIG_FILE}: {e}") from e
        if not isinstance(data, dict):
            raise ValueError(f"Invalid {CONFIG_FILE}: expected a mapping, got {type(data).__name__}")

    for name in Settings.model_fields:
        if val := os.getenv(f"{ENV_PREFIX}{name.upper()}"):
            data[name] = val

    if overrides:
        data.update({k: v for k, v in overrides.items() if v is not None})
    return Settings(**data)
