"""Configuration management for the scriptflow engine."""

import os
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv
from pydantic import BaseModel, Field


def load_env_file(env_path: Optional[str] = None) -> Path | None:
    """Load environment file from specified path or search common locations.

    Priority:
    1. Explicitly provided path (CLI flag or SCRIPTFLOW_ENV_FILE)
    2. .env.local in current directory
    3. .env in current directory
    """
    explicit_path = env_path or os.getenv("SCRIPTFLOW_ENV_FILE")
    if explicit_path:
        path = Path(explicit_path).expanduser().resolve()
        if path.exists():
            load_dotenv(path)
            return path
        else:
            print(f"Warning: Specified env file not found: {path}")

    cwd = Path.cwd()
    search_paths = [
        cwd / ".env.local",
        cwd / ".env",
    ]

    for path in search_paths:
        if path.exists():
            load_dotenv(path)
            return path

    return None


# Load env on module import (can be re-called with explicit path)
_loaded_env_path = load_env_file()


def _env_flag(name: str, default: bool) -> bool:
    """Read a boolean flag from the environment."""
    value = os.getenv(name)
    if value is None:
        return default
    return value.strip().lower() in ("1", "true", "yes", "on")


def _env_list(name: str, default: list[str]) -> list[str]:
    """Read a comma separated list from the environment."""
    value = os.getenv(name)
    if not value:
        return list(default)
    return [item.strip() for item in value.split(",") if item.strip()]


class EngineConfig(BaseModel):
    """Engine-wide settings consulted by the step executor."""

    # Runtime script/skip overrides are only consulted when this is on
    enable_override_cache: bool = Field(
        default_factory=lambda: _env_flag("SCRIPTFLOW_OVERRIDE_CACHE", True)
    )

    # Skip expressions are honoured for every instance when on; otherwise an
    # instance opts in with the _SKIP_EXPRESSION_ENABLED variable
    skip_expressions_enabled: bool = Field(
        default_factory=lambda: _env_flag("SCRIPTFLOW_SKIP_EXPRESSIONS", False)
    )

    # Languages whose unevaluated output comes back as the script text itself
    legacy_languages: list[str] = Field(
        default_factory=lambda: _env_list("SCRIPTFLOW_LEGACY_LANGUAGES", ["template", "juel"])
    )

    default_language: str = Field(
        default_factory=lambda: os.getenv("SCRIPTFLOW_DEFAULT_LANGUAGE", "python")
    )

    # Directory for persisted overrides (in-memory only when unset)
    state_dir: Optional[str] = Field(default_factory=lambda: os.getenv("SCRIPTFLOW_STATE_DIR"))

    debug: bool = Field(default_factory=lambda: _env_flag("DEBUG", False))

    # Env file that was loaded
    env_file: Optional[str] = Field(default_factory=lambda: str(_loaded_env_path) if _loaded_env_path else None)

    def is_legacy_language(self, language: str | None) -> bool:
        if not language:
            return False
        return language.lower() in {lang.lower() for lang in self.legacy_languages}


def get_config() -> EngineConfig:
    """Get the engine configuration."""
    return EngineConfig()


def reload_config(env_path: Optional[str] = None) -> EngineConfig:
    """Reload configuration with a new env file path."""
    global _loaded_env_path
    _loaded_env_path = load_env_file(env_path)
    return get_config()
