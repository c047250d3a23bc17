"""
Configuration management for restbase.

This module handles loading, validation, and access to configuration settings
from configuration files and ``RESTBASE_`` environment variables.
"""
import json
import os
from typing import Any, Dict, List, Optional

import yaml
from pydantic import BaseModel, Field, field_validator

from restbase.constants import (
    DEFAULT_ALLOW_HOSTS,
    DEFAULT_ALLOW_PATHS,
    DEFAULT_PER_PAGE,
    PER_PAGE_LIMIT,
)
from restbase.utils.errors import ConfigurationError
from restbase.utils.logging import logger

# Default configuration file paths
DEFAULT_CONFIG_PATHS = [
    "./restbase.yaml",
    "./restbase.yml",
    "./restbase.json",
    "~/.config/restbase/config.yaml",
]

ENV_PREFIX = "RESTBASE_"

# Global configuration instance
_config = None


def _split_list(value: Any) -> Any:
    """Accept comma-separated strings for list settings coming from the environment."""
    if isinstance(value, str):
        return [item.strip() for item in value.split(",") if item.strip()]
    return value


class ServerConfig(BaseModel):
    """Server configuration settings."""

    host: str = Field("127.0.0.1", description="Host to bind the server to")
    port: int = Field(8000, description="Port to bind the server to")
    workers: int = Field(1, description="Number of worker processes")
    debug: bool = Field(False, description="Enable debug mode")
    cors_origins: List[str] = Field(["*"], description="CORS allowed origins")
    log_level: str = Field("info", description="Logging level")

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v):
        """Validate log level."""
        allowed = ["debug", "info", "warning", "error", "critical"]
        if v.lower() not in allowed:
            raise ValueError(f"Log level must be one of {allowed}")
        return v.lower()

    @field_validator("cors_origins", mode="before")
    @classmethod
    def split_origins(cls, v):
        return _split_list(v)


class ApiConfig(BaseModel):
    """Settings for the resource endpoints."""

    prefix: str = Field("/api", description="URL prefix for resource routes")
    allow_hosts: List[str] = Field(
        default_factory=lambda: list(DEFAULT_ALLOW_HOSTS),
        description="Host header values allowed to reach the API",
    )
    allow_paths: List[str] = Field(
        default_factory=lambda: list(DEFAULT_ALLOW_PATHS),
        description="Glob patterns of request paths allowed to reach the API",
    )
    transformer_path: Optional[str] = Field(
        None, description="Module searched for <Model>Transformer classes"
    )
    registry: Optional[str] = Field(
        None, description="'module:attribute' of the ResourceRegistry served by the app"
    )
    per_page: int = Field(DEFAULT_PER_PAGE, description="Default page size")
    per_page_limit: int = Field(PER_PAGE_LIMIT, description="Largest page size a client may request")
    auth_enabled: bool = Field(False, description="Require an API key on resource routes")
    api_keys: List[str] = Field(default_factory=list, description="Accepted API keys")

    @field_validator("allow_hosts", "allow_paths", "api_keys", mode="before")
    @classmethod
    def split_lists(cls, v):
        return _split_list(v)

    @field_validator("prefix")
    @classmethod
    def normalize_prefix(cls, v):
        """Ensure the prefix starts with a slash and has no trailing slash."""
        v = "/" + v.strip("/")
        return "" if v == "/" else v

    @field_validator("per_page", "per_page_limit")
    @classmethod
    def validate_page_size(cls, v):
        if v < 1:
            raise ValueError("Page sizes must be positive")
        return v


class DatabaseConfig(BaseModel):
    """Database configuration settings."""

    url: str = Field("sqlite:///./restbase.db", description="SQLAlchemy database URL")
    echo: bool = Field(False, description="Echo SQL statements")


class RestBaseConfig(BaseModel):
    """Main restbase configuration model."""

    server: ServerConfig = Field(default_factory=ServerConfig)
    api: ApiConfig = Field(default_factory=ApiConfig)
    database: DatabaseConfig = Field(default_factory=DatabaseConfig)

    # Custom fields can be added dynamically
    extra: Dict[str, Any] = Field(default_factory=dict, description="Additional configuration")


def expand_path(path: str) -> str:
    """Expand user and variables in path."""
    expanded = os.path.expanduser(path)
    expanded = os.path.expandvars(expanded)
    return expanded


def find_config_file() -> Optional[str]:
    """Find the first available configuration file from default paths.

    Returns:
        Path to config file or None if not found
    """
    for path in DEFAULT_CONFIG_PATHS:
        expanded_path = expand_path(path)
        if os.path.isfile(expanded_path):
            return expanded_path
    return None


def load_config_from_file(path: str) -> Dict[str, Any]:
    """Load configuration from a file.

    Args:
        path: Path to configuration file

    Returns:
        Configuration dictionary

    Raises:
        FileNotFoundError: If file does not exist
        ConfigurationError: If file format is invalid
    """
    path = expand_path(path)

    if not os.path.isfile(path):
        raise FileNotFoundError(f"Configuration file not found: {path}")

    logger.debug(f"Loading configuration from {path}", component="config", operation="load_config")

    with open(path, "r") as f:
        if path.endswith((".yaml", ".yml")):
            try:
                return yaml.safe_load(f) or {}
            except yaml.YAMLError as e:
                raise ConfigurationError(f"Invalid YAML in configuration file: {e}", {"path": path})
        elif path.endswith(".json"):
            try:
                return json.load(f)
            except json.JSONDecodeError as e:
                raise ConfigurationError(f"Invalid JSON in configuration file: {e}", {"path": path})
        else:
            raise ConfigurationError(f"Unsupported configuration file format: {path}", {"path": path})


def load_config_from_env(environ: Optional[Dict[str, str]] = None) -> Dict[str, Any]:
    """Load configuration from environment variables.

    Environment variables should be prefixed with RESTBASE_.
    Nested keys are separated by double underscore.
    Example: RESTBASE_API__PER_PAGE_LIMIT=50

    Args:
        environ: Mapping to read instead of ``os.environ``

    Returns:
        Configuration dictionary
    """
    config: Dict[str, Any] = {}
    environ = os.environ if environ is None else environ

    for key, value in environ.items():
        if not key.startswith(ENV_PREFIX):
            continue

        key_parts = key[len(ENV_PREFIX):].lower().split("__")

        # Convert to appropriate type
        if value.lower() == "true":
            value = True
        elif value.lower() == "false":
            value = False
        elif value.isdigit():
            value = int(value)
        elif value.replace(".", "", 1).isdigit() and value.count(".") == 1:
            value = float(value)

        # Build nested dictionary
        current = config
        for part in key_parts[:-1]:
            current = current.setdefault(part, {})
        current[key_parts[-1]] = value

    return config


def merge_configs(base: Dict[str, Any], override: Dict[str, Any]) -> Dict[str, Any]:
    """Recursively merge configuration dictionaries.

    Args:
        base: Base configuration dictionary
        override: Override configuration dictionary

    Returns:
        Merged configuration dictionary
    """
    result = base.copy()

    for key, value in override.items():
        if key in result and isinstance(result[key], dict) and isinstance(value, dict):
            result[key] = merge_configs(result[key], value)
        else:
            result[key] = value

    return result


def load_config(
    config_file: Optional[str] = None,
    env_override: bool = True,
    defaults: Optional[Dict[str, Any]] = None,
) -> RestBaseConfig:
    """Load and initialize the configuration.

    Args:
        config_file: Optional path to configuration file
        env_override: Whether to allow environment variables to override file config
        defaults: Optional default values

    Returns:
        Validated RestBaseConfig instance

    Raises:
        FileNotFoundError: If specified config file is not found
        ConfigurationError: If configuration validation fails
    """
    global _config

    config_data = defaults or {}

    if config_file:
        config_data = merge_configs(config_data, load_config_from_file(config_file))
    else:
        default_file = find_config_file()
        if default_file:
            try:
                config_data = merge_configs(config_data, load_config_from_file(default_file))
            except (ConfigurationError, FileNotFoundError) as e:
                logger.warning(
                    f"Error loading default config file: {e}",
                    component="config",
                    operation="load_config",
                )

    if env_override:
        env_config = load_config_from_env()
        if env_config:
            config_data = merge_configs(config_data, env_config)
            logger.debug(
                "Applied environment variable configuration overrides",
                component="config",
                operation="load_config",
            )

    try:
        _config = RestBaseConfig(**config_data)
    except Exception as e:
        logger.error(
            "Failed to load configuration",
            component="config",
            operation="load_config",
            exception=e,
        )
        raise ConfigurationError(f"Configuration validation failed: {e}")

    logger.set_level(_config.server.log_level)
    logger.info(
        "Configuration loaded successfully",
        component="config",
        operation="load_config",
        context={"api_prefix": _config.api.prefix},
    )
    return _config


def get_config() -> RestBaseConfig:
    """Get the current configuration, loading the defaults on first use."""
    if _config is None:
        return load_config()

    return _config


def set_config(config: RestBaseConfig) -> RestBaseConfig:
    """Install an already-built configuration as the current one."""
    global _config
    _config = config
    return _config


def reset_config() -> None:
    """Forget the current configuration so the next access reloads it."""
    global _config
    _config = None


def get_config_as_dict() -> Dict[str, Any]:
    """Get the current configuration as a dictionary."""
    return get_config().model_dump()


def save_config(path: str) -> None:
    """Save the current configuration to a file.

    Args:
        path: Path to save configuration to

    Raises:
        ConfigurationError: If the file extension is not supported
    """
    config = get_config_as_dict()
    path = expand_path(path)

    if not path.endswith((".yaml", ".yml", ".json")):
        raise ConfigurationError(f"Unsupported file format for saving configuration: {path}")

    os.makedirs(os.path.dirname(os.path.abspath(path)), exist_ok=True)

    with open(path, "w") as f:
        if path.endswith(".json"):
            json.dump(config, f, indent=2)
        else:
            yaml.dump(config, f, default_flow_style=False)

    logger.info(f"Configuration saved to {path}", component="config", operation="save_config")
