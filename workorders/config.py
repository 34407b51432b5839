"""Application configuration loaded from config.yaml + environment variables."""

from __future__ import annotations

import yaml
from pathlib import Path
from pydantic import Field
from pydantic_settings import BaseSettings

_CONFIG_PATH = Path(__file__).resolve().parent.parent / "config.yaml"

_DEFAULT_DB_URL = "sqlite+aiosqlite:///data/workorders.db"


def _load_yaml() -> dict:
    if _CONFIG_PATH.exists():
        with open(_CONFIG_PATH) as f:
            return yaml.safe_load(f) or {}
    return {}


_yaml = _load_yaml()


class NumberingConfig(BaseSettings):
    prefix: str = "WO"
    sequence_width: int = 3
    max_attempts: int = 5


class StatusPolicyConfig(BaseSettings):
    # Staff may only move pending -> in_progress -> completed, or cancel.
    staff_forward_only: bool = True
    require_signatures_for_completion: bool = False


class Settings(BaseSettings):
    database_url: str = _DEFAULT_DB_URL
    app_url: str = "http://localhost:8000"
    resend_api_key: str = ""
    email_from: str = "Work Orders <noreply@example.com>"
    timezone: str = "UTC"
    log_level: str = "INFO"
    numbering: NumberingConfig = Field(default_factory=NumberingConfig)
    status_policy: StatusPolicyConfig = Field(default_factory=StatusPolicyConfig)

    model_config = {"env_file": ".env", "env_file_encoding": "utf-8", "extra": "ignore"}


def get_settings() -> Settings:
    """Build Settings by merging YAML defaults with env overrides."""
    y = _yaml
    numbering = NumberingConfig(**y.get("numbering", {}))
    policy = StatusPolicyConfig(**y.get("status_policy", {}))
    overrides = {
        k: y[k]
        for k in ("app_url", "resend_api_key", "email_from", "timezone", "log_level")
        if k in y
    }
    db_url = y.get("database", {}).get("url")
    if db_url:
        overrides["database_url"] = db_url
    return Settings(numbering=numbering, status_policy=policy, **overrides)
