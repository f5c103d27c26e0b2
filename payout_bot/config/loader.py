"""
Configuration management and loading.

Handles application settings from an optional YAML file and environment
variables. Environment variables win over file values.
"""

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, Mapping, Optional

import yaml


DEFAULT_SUBGRAPH_URL = "https://api.thegraph.com/subgraphs/name/livepeer/arbitrum-one"
DEFAULT_IDENTITY_API_URL = "https://ipfs.3box.io"
DEFAULT_IPFS_GATEWAY = "https://ipfs.infura.io/ipfs/"

LOG_LEVELS = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}
LOG_FORMATS = {"console", "json"}

# Setting name -> environment variable
ENV_VARS = {
    "api_token": "API_TOKEN",
    "db_path": "PAYOUT_BOT_DB_PATH",
    "discord_webhook_url": "DISCORD_WEBHOOK_URL",
    "subgraph_url": "SUBGRAPH_URL",
    "identity_api_url": "IDENTITY_API_URL",
    "ipfs_gateway": "IPFS_GATEWAY",
    "request_timeout": "REQUEST_TIMEOUT",
    "log_level": "LOG_LEVEL",
    "log_format": "LOG_FORMAT",
}

TWITTER_ENV_VARS = {
    "consumer_key": "TWITTER_CONSUMER_KEY",
    "consumer_secret": "TWITTER_CONSUMER_SECRET",
    "access_token_key": "TWITTER_ACCESS_TOKEN_KEY",
    "access_token_secret": "TWITTER_ACCESS_TOKEN_SECRET",
}


@dataclass(frozen=True)
class TwitterCredentials:
    """OAuth 1.0a credentials for posting status updates."""
    consumer_key: str
    consumer_secret: str
    access_token_key: str
    access_token_secret: str

    def __post_init__(self):
        """Validate that every secret is present."""
        for name in TWITTER_ENV_VARS:
            if not getattr(self, name):
                raise ValueError(f"twitter.{name} is required")


@dataclass(frozen=True)
class Settings:
    """Complete runtime configuration."""
    api_token: str
    twitter: TwitterCredentials
    discord_webhook_url: str
    db_path: str = "payout_bot.db"
    subgraph_url: str = DEFAULT_SUBGRAPH_URL
    identity_api_url: str = DEFAULT_IDENTITY_API_URL
    ipfs_gateway: str = DEFAULT_IPFS_GATEWAY
    request_timeout: float = 10.0
    log_level: str = "INFO"
    log_format: str = "console"

    def __post_init__(self):
        """Validate settings values."""
        if not self.api_token:
            raise ValueError("api_token is required")
        if not self.discord_webhook_url:
            raise ValueError("discord_webhook_url is required")
        if not self.db_path:
            raise ValueError("db_path cannot be empty")
        if self.request_timeout <= 0:
            raise ValueError("request_timeout must be > 0")
        if self.log_level not in LOG_LEVELS:
            raise ValueError(f"log_level must be one of: {sorted(LOG_LEVELS)}")
        if self.log_format not in LOG_FORMATS:
            raise ValueError(f"log_format must be one of: {sorted(LOG_FORMATS)}")


def load_settings(
    path: Optional[str] = None,
    environ: Optional[Mapping[str, str]] = None
) -> Settings:
    """Load and validate settings.

    Values come from the YAML file at `path` when given, then from the
    environment, which overrides the file key by key.

    Args:
        path: Optional path to YAML configuration file
        environ: Environment mapping (defaults to os.environ)

    Returns:
        Validated Settings object

    Raises:
        FileNotFoundError: If config file doesn't exist
        yaml.YAMLError: If YAML is invalid
        ValueError: If configuration is invalid or incomplete
    """
    environ = os.environ if environ is None else environ

    raw = _read_config_file(path) if path else {}

    values: Dict[str, Any] = {
        key: raw[key] for key in ENV_VARS if key in raw
    }
    twitter_values: Dict[str, Any] = dict(raw.get("twitter") or {})

    for key, env_name in ENV_VARS.items():
        if environ.get(env_name):
            values[key] = environ[env_name]
    for key, env_name in TWITTER_ENV_VARS.items():
        if environ.get(env_name):
            twitter_values[key] = environ[env_name]

    twitter = TwitterCredentials(
        **{key: str(twitter_values.get(key) or "") for key in TWITTER_ENV_VARS}
    )

    if "request_timeout" in values:
        try:
            values["request_timeout"] = float(values["request_timeout"])
        except (TypeError, ValueError):
            raise ValueError("request_timeout must be a number")
    if "log_level" in values:
        values["log_level"] = str(values["log_level"]).upper()
    if "log_format" in values:
        values["log_format"] = str(values["log_format"]).lower()

    return Settings(
        api_token=str(values.pop("api_token", "") or ""),
        twitter=twitter,
        discord_webhook_url=str(values.pop("discord_webhook_url", "") or ""),
        **values
    )


def _read_config_file(path: str) -> Dict[str, Any]:
    """Read the YAML config file, rejecting unknown keys.

    Args:
        path: Path to YAML configuration file

    Returns:
        Raw configuration mapping

    Raises:
        FileNotFoundError: If config file doesn't exist
        yaml.YAMLError: If YAML is invalid
        ValueError: If the file has an unexpected structure
    """
    config_path = Path(path)
    if not config_path.exists():
        raise FileNotFoundError(f"Config file not found: {path}")

    with open(config_path, 'r', encoding='utf-8') as f:
        try:
            raw_config = yaml.safe_load(f)
        except yaml.YAMLError as e:
            raise yaml.YAMLError(f"Invalid YAML in config file {path}: {e}")

    if not raw_config:
        raise ValueError("Configuration file is empty")
    if not isinstance(raw_config, dict):
        raise ValueError("Configuration file must contain a mapping")

    allowed_top_keys = set(ENV_VARS) | {"twitter"}
    unknown_keys = set(raw_config.keys()) - allowed_top_keys
    if unknown_keys:
        raise ValueError(f"Unknown configuration keys: {unknown_keys}")

    twitter_data = raw_config.get("twitter") or {}
    if not isinstance(twitter_data, dict):
        raise ValueError("'twitter' must be a dictionary")

    unknown_twitter_keys = set(twitter_data.keys()) - set(TWITTER_ENV_VARS)
    if unknown_twitter_keys:
        raise ValueError(f"Unknown twitter keys: {unknown_twitter_keys}")

    return raw_config
