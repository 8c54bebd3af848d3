"""Configuration loader for wellsense-hardening."""
import copy
import logging
from pathlib import Path
from typing import Any, Dict, Optional, Tuple

import yaml

from .preferences import get_preference

logger = logging.getLogger(__name__)

DEFAULT_CONFIG: Dict[str, Any] = {
    "audit": {
        "root": ".",
    },
    "logging": {
        "level": None,
    },
}

VALID_LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


class ConfigError(Exception):
    """Configuration error exception."""
    pass


def default_config_path() -> Path:
    return Path.home() / ".config" / "wellsense-hardening" / "config.yml"


def resolve_config_path() -> Tuple[Optional[Path], str]:
    """
    Locate the config file.

    Priority order:
    1. User preference ``config_path`` (if the file still exists)
    2. Default location: ~/.config/wellsense-hardening/config.yml

    Returns:
        ``(path, source)`` where source is "preference" or "default", or
        ``(None, "none")`` when no config file exists
    """
    config_path_pref = get_preference("config_path")
    if config_path_pref:
        config_path = Path(config_path_pref)
        if config_path.is_file():
            logger.debug(f"Using config from preference: {config_path}")
            return config_path, "preference"
        logger.warning(f"Config path from preference doesn't exist: {config_path}")

    default_config = default_config_path()
    if default_config.is_file():
        logger.debug(f"Using default config location: {default_config}")
        return default_config, "default"

    return None, "none"


def _validate(config: Any, config_path: Path) -> Dict[str, Any]:
    if config is None:
        return {}

    if not isinstance(config, dict):
        raise ConfigError(f"Config file at {config_path} must contain a mapping")

    for section in ("audit", "logging"):
        if section in config and not isinstance(config[section], dict):
            raise ConfigError(
                f"'{section}' section in config at {config_path} must be a mapping\n"
                f"Example:\n"
                f"audit:\n"
                f"  root: /path/to/project"
            )

    level = config.get("logging", {}).get("level")
    if level is not None and str(level).upper() not in VALID_LOG_LEVELS:
        raise ConfigError(
            f"Unsupported logging level: {level}\n"
            f"Expected one of: {', '.join(VALID_LOG_LEVELS)}"
        )

    return config


def load_config(config_path: Optional[Path] = None) -> Dict[str, Any]:
    """
    Load configuration, merged over the built-in defaults.

    The path is resolved on every call, so a changed preference takes effect
    without restarting. A missing config file is not an error.

    Args:
        config_path: Explicit config file; skips preference lookup

    Returns:
        Dict with ``audit`` and ``logging`` sections

    Raises:
        ConfigError: If the file cannot be read or parsed, or has the wrong shape
    """
    if config_path is None:
        config_path, _source = resolve_config_path()

    merged = copy.deepcopy(DEFAULT_CONFIG)
    if config_path is None:
        logger.debug("No config file found, using defaults")
        return merged

    try:
        with open(config_path, "r") as f:
            raw = yaml.safe_load(f)
    except yaml.YAMLError as e:
        raise ConfigError(f"Failed to parse YAML config at {config_path}: {e}")
    except OSError as e:
        raise ConfigError(f"Failed to read config file at {config_path}: {e}")

    config = _validate(raw, Path(config_path))
    for section, values in config.items():
        if isinstance(values, dict) and section in merged:
            merged[section].update(values)
        else:
            merged[section] = values

    logger.debug(f"Configuration loaded from {config_path}")
    return merged


def get_audit_root(config: Dict[str, Any]) -> Path:
    """Directory the security auditor inspects, with ``~`` expanded."""
    return Path(str(config["audit"].get("root") or ".")).expanduser()


def get_log_level(config: Dict[str, Any]) -> Optional[str]:
    level = config["logging"].get("level")
    return str(level).upper() if level else None
