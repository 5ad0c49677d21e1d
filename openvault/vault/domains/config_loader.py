"""Configuration loader for OpenVault."""
import logging
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, Optional

import yaml

from ...errors import ConfigError

logger = logging.getLogger(__name__)

CONFIG_ENV_VAR = "OPENVAULT_CONFIG"
ENV_PATH_ENV_VAR = "OPENVAULT_ENV_PATH"


@dataclass(frozen=True)
class VaultConfig:
    """Effective vault settings from the user config file."""
    env_path: Optional[str] = None
    fail_on_missing: bool = True
    validate: bool = True
    registry_path: Optional[str] = None
    source: Optional[str] = None  # config file path, None when defaults


def default_config_path() -> Path:
    """Default config location, following the XDG Base Directory layout."""
    return Path.home() / ".config" / "openvault" / "config.yml"


def get_config_path() -> Path:
    """
    Get config file path.

    Priority order:
    1. OPENVAULT_CONFIG environment variable
    2. Default location: ~/.config/openvault/config.yml

    The returned path may not exist.
    """
    override = os.getenv(CONFIG_ENV_VAR)
    if override:
        logger.debug(f"Using config path from {CONFIG_ENV_VAR}: {override}")
        return Path(override).expanduser()
    return default_config_path()


def _expand(value: Optional[str]) -> Optional[str]:
    return str(Path(value).expanduser()) if value else None


def _section(config: Dict[str, Any], name: str, config_path: Path) -> Dict[str, Any]:
    section = config.get(name) or {}
    if not isinstance(section, dict):
        raise ConfigError(
            f"'{name}' section in config at {config_path} must be a mapping"
        )
    return section


def _bool_option(section: Dict[str, Any], name: str, where: str) -> bool:
    value = section.get(name, True)
    if not isinstance(value, bool):
        raise ConfigError(f"'{where}.{name}' must be true or false, got: {value!r}")
    return value


def _path_option(section: Dict[str, Any], name: str, where: str) -> Optional[str]:
    value = section.get(name)
    if value is not None and not isinstance(value, str):
        raise ConfigError(f"'{where}.{name}' must be a path string, got: {value!r}")
    return value


def load_config() -> VaultConfig:
    """
    Load vault configuration from YAML file.

    A missing config file is not an error: the vault works with defaults.
    OPENVAULT_ENV_PATH overrides ``vault.env_path`` from the file.

    Expected format::

        vault:
          env_path: ~/projects/.env
          fail_on_missing: true
          validate: true
        registry:
          path: /path/to/services.yml

    Returns:
        VaultConfig with the effective settings

    Raises:
        ConfigError: If the config file is unreadable, invalid YAML, or holds
            values of the wrong type
    """
    # Resolved each call so OPENVAULT_CONFIG changes take effect immediately
    config_path = get_config_path()
    env_override = _expand(os.getenv(ENV_PATH_ENV_VAR))

    if not config_path.exists():
        logger.debug(f"No config file at {config_path}, using defaults")
        return VaultConfig(env_path=env_override)

    try:
        with open(config_path, "r", encoding="utf-8") as f:
            config = yaml.safe_load(f)
    except yaml.YAMLError as e:
        raise ConfigError(f"Failed to parse YAML config at {config_path}: {e}")
    except OSError as e:
        raise ConfigError(f"Failed to read config file at {config_path}: {e}")

    if config is None:
        config = {}
    if not isinstance(config, dict):
        raise ConfigError(f"Config file at {config_path} must contain a mapping")

    vault = _section(config, "vault", config_path)
    registry = _section(config, "registry", config_path)

    env_path = env_override or _expand(_path_option(vault, "env_path", "vault"))
    loaded = VaultConfig(
        env_path=env_path,
        fail_on_missing=_bool_option(vault, "fail_on_missing", "vault"),
        validate=_bool_option(vault, "validate", "vault"),
        registry_path=_expand(_path_option(registry, "path", "registry")),
        source=str(config_path),
    )

    logger.info(f"Configuration loaded from {config_path}")
    logger.debug(f"Using env path: {loaded.env_path or '(auto-detect)'}")

    return loaded
