"""
Taskboard Configuration — Load and validate taskboard.yaml at startup.

Resolution order (later wins):
    1. Model defaults
    2. taskboard.yaml (explicit path, or discovered by walking up from CWD)
    3. TASKBOARD_DATABASE_URL / TASKBOARD_LOG_LEVEL / TASKBOARD_ENV

Usage:
    from taskboard.engine.config import load_config, get_config
"""

from __future__ import annotations

import os
from pathlib import Path
from typing import Any, Dict, Optional

import yaml
from pydantic import BaseModel, Field, field_validator, model_validator
from pydantic import ValidationError as PydanticValidationError

from taskboard.engine.errors import ConfigError

CONFIG_FILENAME = "taskboard.yaml"


# ---------------------------------------------------------------------------
# Pydantic models for taskboard.yaml
# ---------------------------------------------------------------------------

class DatabaseConfig(BaseModel):
    url: str = "sqlite:///taskboard.db"
    echo: bool = False
    pool_size: int = 10
    max_overflow: int = 20
    pool_timeout: int = 30
    pool_recycle: int = 1800
    pool_pre_ping: bool = True


class SecurityConfig(BaseModel):
    bcrypt_rounds: int = Field(default=12, ge=4, le=31)
    password_min_length: int = Field(default=6, ge=1)


class PaginationConfig(BaseModel):
    default_limit: int = Field(default=10, ge=1)
    max_limit: int = Field(default=100, ge=1, le=1000)

    @model_validator(mode="after")
    def check_default_within_max(self) -> "PaginationConfig":
        if self.default_limit > self.max_limit:
            raise ValueError(
                f"default_limit ({self.default_limit}) cannot exceed max_limit ({self.max_limit})"
            )
        return self


class LoggingConfig(BaseModel):
    level: str = "INFO"
    format: str = "json"
    file: Optional[str] = None

    @field_validator("level")
    @classmethod
    def validate_level(cls, v: str) -> str:
        v = v.upper()
        if v not in ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"):
            raise ValueError(f"unknown log level '{v}'")
        return v

    @field_validator("format")
    @classmethod
    def validate_format(cls, v: str) -> str:
        if v not in ("json", "text"):
            raise ValueError(f"format must be json/text, got '{v}'")
        return v


class TaskboardConfig(BaseModel):
    """Root model for taskboard.yaml."""
    environment: str = "dev"

    database: DatabaseConfig = DatabaseConfig()
    security: SecurityConfig = SecurityConfig()
    pagination: PaginationConfig = PaginationConfig()
    logging: LoggingConfig = LoggingConfig()

    @field_validator("environment")
    @classmethod
    def validate_environment(cls, v: str) -> str:
        if v not in ("dev", "test", "prod"):
            raise ValueError(f"environment must be dev/test/prod, got '{v}'")
        return v


# ---------------------------------------------------------------------------
# Config Loading Functions
# ---------------------------------------------------------------------------

_config: Optional[TaskboardConfig] = None

ENV_OVERRIDES = {
    "TASKBOARD_DATABASE_URL": ("database", "url"),
    "TASKBOARD_LOG_LEVEL": ("logging", "level"),
    "TASKBOARD_ENV": ("environment",),
}


def _find_config_file() -> Optional[Path]:
    """Find taskboard.yaml starting from CWD and walking up."""
    current = Path.cwd()
    for parent in [current, *current.parents]:
        candidate = parent / CONFIG_FILENAME
        if candidate.exists():
            return candidate
    return None


def _apply_env_overrides(data: Dict[str, Any]) -> Dict[str, Any]:
    for var, path in ENV_OVERRIDES.items():
        value = os.environ.get(var)
        if not value:
            continue
        target = data
        for key in path[:-1]:
            if not isinstance(target.get(key), dict):
                target[key] = {}
            target = target[key]
        target[path[-1]] = value
    return data


def load_config(config_path: Optional[str] = None) -> TaskboardConfig:
    """
    Load and validate taskboard.yaml.

    Args:
        config_path: Explicit path to taskboard.yaml. If None, auto-discovers,
                     and finding nothing yields the defaults. An explicit
                     path that does not exist is a ConfigError.

    Returns:
        Validated TaskboardConfig instance (also cached for get_config()).
    """
    global _config

    if config_path:
        path: Optional[Path] = Path(config_path)
        if not path.is_file():
            raise ConfigError(f"Config file not found: {path}", path=str(path))
    else:
        path = _find_config_file()

    raw: Dict[str, Any] = {}
    if path is not None and path.exists():
        try:
            with open(path, "r", encoding="utf-8") as f:
                raw = yaml.safe_load(f) or {}
        except yaml.YAMLError as exc:
            raise ConfigError(f"Invalid YAML in {path}: {exc}", path=str(path)) from exc
        if not isinstance(raw, dict):
            raise ConfigError(f"{path} must contain a mapping", path=str(path))

    raw = _apply_env_overrides(raw)

    try:
        _config = TaskboardConfig(**raw)
    except PydanticValidationError as exc:
        raise ConfigError(f"Invalid configuration: {exc}", path=str(path)) from exc
    return _config


def get_config() -> TaskboardConfig:
    """Get the currently loaded config, loading if necessary."""
    global _config
    if _config is None:
        _config = load_config()
    return _config


def reset_config() -> None:
    """Forget the cached config."""
    global _config
    _config = None
