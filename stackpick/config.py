"""
Application configuration stored as JSON.
"""

import json
import logging
import os
from dataclasses import asdict, dataclass, fields
from pathlib import Path
from typing import Any, Dict, Optional

logger = logging.getLogger(__name__)

DEFAULT_CONFIG_PATH = "./cdk-config.json"
VALID_DEFAULT_ACTIONS = ("deploy", "delete", "info")
MAX_REFRESH_INTERVAL = 3600
MAX_LOOKUP_CONCURRENCY = 32

# JSON key -> dataclass field
_JSON_KEYS = {
    "autoRefresh": "auto_refresh",
    "refreshInterval": "refresh_interval",
    "defaultAction": "default_action",
    "confirmActions": "confirm_actions",
    "lastUsedVaultProfile": "last_used_vault_profile",
    "lookupConcurrency": "lookup_concurrency",
}


@dataclass
class AppConfig:
    """User preferences for the interactive manager."""
    auto_refresh: bool = False
    refresh_interval: int = 30
    default_action: str = "info"
    confirm_actions: bool = True
    last_used_vault_profile: Optional[str] = None
    lookup_concurrency: int = 4

    def to_json(self) -> Dict[str, Any]:
        values = asdict(self)
        data = {json_key: values[attr] for json_key, attr in _JSON_KEYS.items()}
        if data["lastUsedVaultProfile"] is None:
            del data["lastUsedVaultProfile"]
        return data


def get_config_path(path: Optional[str] = None) -> Path:
    """
    Resolve the configuration file path.

    Args:
        path: Explicit path; falls back to STACKPICK_CONFIG, then ./cdk-config.json

    Returns:
        Path: Configuration file path
    """
    return Path(path or os.environ.get("STACKPICK_CONFIG", DEFAULT_CONFIG_PATH))


def validate_config(data: Dict[str, Any]) -> Dict[str, str]:
    """
    Validate raw configuration values keyed by dataclass field name.

    Returns:
        Mapping of field name to problem description (empty when valid)
    """
    problems = {}

    for name in ("auto_refresh", "confirm_actions"):
        if name in data and not isinstance(data[name], bool):
            problems[name] = "must be true or false"

    interval = data.get("refresh_interval", 30)
    if isinstance(interval, bool) or not isinstance(interval, int) or not 0 < interval <= MAX_REFRESH_INTERVAL:
        problems["refresh_interval"] = f"must be an integer between 1 and {MAX_REFRESH_INTERVAL}"

    if data.get("default_action", "info") not in VALID_DEFAULT_ACTIONS:
        problems["default_action"] = f"must be one of {', '.join(VALID_DEFAULT_ACTIONS)}"

    profile = data.get("last_used_vault_profile")
    if profile is not None and not isinstance(profile, str):
        problems["last_used_vault_profile"] = "must be a string"

    concurrency = data.get("lookup_concurrency", 4)
    if isinstance(concurrency, bool) or not isinstance(concurrency, int) or not 0 < concurrency <= MAX_LOOKUP_CONCURRENCY:
        problems["lookup_concurrency"] = f"must be an integer between 1 and {MAX_LOOKUP_CONCURRENCY}"

    return problems


def load_config(path: Optional[str] = None) -> AppConfig:
    """
    Load configuration, merging the file over the defaults.

    A missing or unreadable file yields the defaults; invalid values are
    dropped with a warning.
    """
    config_path = get_config_path(path)

    if not config_path.exists():
        logger.debug(f"No configuration at {config_path}, using defaults")
        return AppConfig()

    try:
        with open(config_path, "r") as f:
            raw = json.load(f)
    except (OSError, json.JSONDecodeError) as e:
        logger.warning(f"Could not read configuration {config_path}: {e}. Using defaults")
        return AppConfig()

    if not isinstance(raw, dict):
        logger.warning(f"Configuration {config_path} is not a JSON object. Using defaults")
        return AppConfig()

    values = {attr: raw[json_key] for json_key, attr in _JSON_KEYS.items() if json_key in raw}

    for name, problem in validate_config(values).items():
        logger.warning(f"Ignoring invalid configuration value {name}: {problem}")
        values.pop(name, None)

    known = {f.name for f in fields(AppConfig)}
    config = AppConfig(**{k: v for k, v in values.items() if k in known})
    logger.debug(f"Loaded configuration from {config_path}")
    return config


def save_config(config: AppConfig, path: Optional[str] = None) -> Path:
    """
    Write configuration as pretty-printed JSON.

    Returns:
        Path: The file written
    """
    config_path = get_config_path(path)
    config_path.parent.mkdir(parents=True, exist_ok=True)

    with open(config_path, "w") as f:
        json.dump(config.to_json(), f, indent=2)

    logger.debug(f"Configuration saved to {config_path}")
    return config_path
