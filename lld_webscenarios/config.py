"""Configuration loading for the web scenario sync."""

import os
from pathlib import Path
from typing import Optional

import httpx
import yaml
from pydantic import BaseModel, Field, ValidationError, field_validator

from .errors import ConfigError

DEFAULT_CONFIG_PATH = "wszl.yml"


class ZabbixConfig(BaseModel):
    """Zabbix API connection settings."""
    api_endpoint: str = Field(description="JSON-RPC endpoint, e.g. https://zabbix/api_jsonrpc.php")
    username: str = Field(description="API user")
    password: str = Field(description="API password")
    request_timeout_seconds: float = Field(default=30.0, gt=0, description="Per-request timeout in seconds")

    @field_validator("api_endpoint")
    @classmethod
    def _check_api_endpoint(cls, value: str) -> str:
        try:
            url = httpx.URL(value)
        except httpx.InvalidURL as e:
            raise ValueError(f"invalid api_endpoint: {e}") from e
        if url.scheme not in ("http", "https") or not url.host:
            raise ValueError("api_endpoint must be an absolute http(s) URL")
        return value


class AppConfig(BaseModel):
    """Top level of wszl.yml."""
    zabbix: ZabbixConfig


def load_config(config_path: Optional[str] = None) -> AppConfig:
    """Load configuration from a YAML file, then apply environment overrides."""
    if config_path is None:
        config_path = os.getenv("WSZL_CONFIG", DEFAULT_CONFIG_PATH)

    path = Path(config_path)
    try:
        with open(path, "r", encoding="utf-8") as f:
            config_data = yaml.safe_load(f) or {}
    except OSError as e:
        raise ConfigError(f"unable to read config file {path}: {e}") from e
    except yaml.YAMLError as e:
        raise ConfigError(f"invalid YAML in {path}: {e}") from e

    if not isinstance(config_data, dict):
        raise ConfigError(f"config file {path} must contain a mapping")

    zabbix_data = config_data.get("zabbix")
    if zabbix_data is None:
        zabbix_data = {}
    if not isinstance(zabbix_data, dict):
        raise ConfigError(f"'zabbix' section of {path} must be a mapping")

    env_overrides = {
        "api_endpoint": os.getenv("ZABBIX_API_ENDPOINT"),
        "username": os.getenv("ZABBIX_USERNAME"),
        "password": os.getenv("ZABBIX_PASSWORD"),
        "request_timeout_seconds": os.getenv("ZABBIX_REQUEST_TIMEOUT"),
    }
    for key, value in env_overrides.items():
        if value is not None:
            zabbix_data[key] = value
    config_data["zabbix"] = zabbix_data

    try:
        return AppConfig(**config_data)
    except ValidationError as e:
        raise ConfigError(f"invalid config in {path}: {e}") from e
