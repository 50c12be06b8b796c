"""Configuration loading.

Settings come from, lowest precedence first:
  1. model defaults
  2. config/introspector.yaml (or the file named by INTROSPECTOR_CONFIG)
  3. environment variables, including a `.env` file loaded by python-dotenv
  4. explicit overrides passed by the caller (CLI flags)
"""

import logging
import os
from functools import lru_cache
from pathlib import Path
from typing import Any, Dict, List, Optional

import yaml
from dotenv import load_dotenv
from pydantic import BaseModel, Field, ValidationError

logger = logging.getLogger(__name__)

CONFIG_ENV_VAR = "INTROSPECTOR_CONFIG"
CONFIG_FILE_NAME = "introspector.yaml"

# Environment variable → settings field
_ENV_OVERRIDES = {
    "INTROSPECTOR_SOURCES": "sources",
    "INTROSPECTOR_ROOT": "root",
    "INTROSPECTOR_BASE_PATH": "base_path",
    "INTROSPECTOR_PACKAGE": "package",
    "INTROSPECTOR_HOST": "host",
    "INTROSPECTOR_PORT": "port",
    "INTROSPECTOR_LOG_LEVEL": "log_level",
}


class ConfigError(Exception):
    """The configuration file exists but cannot be used."""


class Settings(BaseModel):
    sources: List[str] = Field(default_factory=list, description="Files and directories to extract annotations from")
    root: Optional[str] = Field(None, description="Directory Python module names are computed from")
    base_path: str = Field("/introspector", description="URL prefix of the diagram routes")
    package: Optional[str] = Field(None, description="Package grouping the use case diagram")
    host: str = Field("127.0.0.1", description="Bind address for the HTTP server")
    port: int = Field(9005, description="Bind port for the HTTP server")
    log_level: str = Field("INFO", description="Root log level")


def get_config_path() -> Path:
    """Directory holding introspector.yaml: ./config under the working directory."""
    return Path.cwd() / "config"


def _read_yaml(path: Path) -> Dict[str, Any]:
    try:
        with open(path, "r", encoding="utf-8") as f:
            data = yaml.safe_load(f) or {}
    except OSError as e:
        raise ConfigError(f"Cannot read {path}: {e}") from e
    except yaml.YAMLError as e:
        raise ConfigError(f"Invalid YAML in {path}: {e}") from e

    if not isinstance(data, dict):
        raise ConfigError(f"{path} must contain a mapping, got {type(data).__name__}")

    # Settings may sit at the top level or under an `introspector:` section
    section = data.get("introspector", data)
    if not isinstance(section, dict):
        raise ConfigError(f"`introspector` section in {path} must be a mapping")
    return dict(section)


def _env_overrides() -> Dict[str, Any]:
    values: Dict[str, Any] = {}
    for env_var, field_name in _ENV_OVERRIDES.items():
        raw = os.getenv(env_var)
        if raw is None or raw == "":
            continue
        if field_name == "sources":
            values[field_name] = [part for part in raw.split(os.pathsep) if part]
        else:
            values[field_name] = raw
    return values


def load_settings(
    config_path: Optional[str] = None,
    overrides: Optional[Dict[str, Any]] = None,
) -> Settings:
    """Build Settings from file, environment and explicit overrides.

    A missing config file means defaults. `None` values in overrides are
    ignored so unset CLI flags do not clobber the file.

    Raises:
        ConfigError: If the config file is unreadable or fails validation
    """
    load_dotenv()

    explicit = config_path or os.getenv(CONFIG_ENV_VAR)
    path = Path(explicit) if explicit else get_config_path() / CONFIG_FILE_NAME

    values: Dict[str, Any] = {}
    if path.exists():
        values.update(_read_yaml(path))
        logger.debug("Loaded configuration from %s", path)
    elif explicit:
        raise ConfigError(f"Config file not found: {path}")
    else:
        logger.debug("No config file at %s, using defaults", path)

    values.update(_env_overrides())
    values.update({key: value for key, value in (overrides or {}).items() if value is not None})

    if isinstance(values.get("sources"), str):
        values["sources"] = [values["sources"]]

    try:
        return Settings(**values)
    except ValidationError as e:
        raise ConfigError(f"Invalid configuration: {e}") from e


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Process-wide settings, loaded once."""
    return load_settings()


def reload_configs() -> None:
    """Clear cached settings so the next get_settings() re-reads them."""
    get_settings.cache_clear()
