"""Application configuration: settings schema and config.yaml loader"""

import os
from pathlib import Path
from typing import Any

import yaml
from pydantic import BaseModel, Field


CONFIG_FILE = "config.yaml"


class Settings(BaseModel):
    app_name:            str = "blockpress"
    db_url:              str = "sqlite:///blockpress.db"
    storage_dir:         str = Field(default=".blockpress/storage", description="Root directory of the local storage backend")
    public_base_url:     str = Field(default="http://localhost:8000/storage", description="Prefix of permanent public object URLs")
    public_namespace:    str = Field(default="blog-images", min_length=1, description="Namespace for free-tier media")
    paid_namespace:      str = Field(default="blog-images-paid", min_length=1, description="Namespace for paid-tier media")
    proxy_path:          str = Field(default="/api/storage/proxy", pattern="^/", description="Path of the image proxy endpoint")
    proxy_cache_max_age: int = Field(default=3600, ge=0, description="max-age (seconds) sent with proxied objects")
    max_upload_bytes:    int = Field(default=5 * 1024 * 1024, ge=1, description="Largest accepted upload")
    session_cookie:      str = Field(default="access_token", description="Cookie carrying the session token")
    session_ttl_hours:   int = Field(default=24, ge=1, description="Lifetime of tokens issued by login")
    log_level:           str = Field(default="INFO", pattern="^(DEBUG|INFO|WARNING|ERROR)$")
    parser_config:       str = Field(default="gfm-like", description="MarkdownIt preset used by markdown import")


def load_config(overrides: dict[str, Any] = None) -> Settings:
    """Load Settings from config.yaml, then BLOCKPRESS_<FIELD> env vars, then non-None CLI overrides."""
    data: dict[str, Any] = {}
    if Path(CONFIG_FILE).exists():
        try:
            data = yaml.safe_load(Path(CONFIG_FILE).read_text()) or {}
        except yaml.YAMLError as e:
            raise ValueError(f"Invalid {CONFIG_FILE}: {e}") from e

    for name in Settings.model_fields:
        if val := os.getenv(f"BLOCKPRESS_{name.upper()}"):
            data[name] = val

    if overrides:
        data.update({k: v for k, v in overrides.items() if v is not None})
    return Settings(**data)
