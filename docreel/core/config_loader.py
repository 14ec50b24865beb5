"""Configuration loader for component defaults.

Loads `config/defaults.yaml` and validates it into a DocReelConfig.
Missing sections fall back to model defaults.
"""

from functools import lru_cache
from pathlib import Path
from typing import Any

import yaml
from pydantic import ValidationError

from docreel.config import DocReelConfig
from docreel.core.exceptions import ConfigError, ConfigNotFoundError, ConfigValidationError
from docreel.core.logging import get_logger

logger = get_logger(__name__)

# Base config directory (project root/config)
_CONFIG_BASE_DIR = Path(__file__).parent.parent.parent / "config"


def _load_yaml_file(path: Path, name: str) -> dict[str, Any]:
    """Load a YAML file from disk.

    Args:
        path: Path to the YAML file.
        name: Human-readable name for error messages.

    Returns:
        Parsed YAML content as dictionary (empty file -> empty dict).

    Raises:
        ConfigNotFoundError: If the file doesn't exist.
        ConfigError: If parsing fails.
    """
    if not path.exists():
        logger.error("Config file not found", name=name, path=str(path))
        raise ConfigNotFoundError(str(path))

    try:
        with open(path, encoding="utf-8") as f:
            content = yaml.safe_load(f)
    except yaml.YAMLError as e:
        logger.error("YAML parsing failed", name=name, path=str(path), error=str(e))
        raise ConfigError(f"Invalid YAML in {path}: {e}", config_path=str(path)) from e
    except OSError as e:
        logger.error("Failed to read config file", name=name, path=str(path), error=str(e))
        raise ConfigError(f"Cannot read {path}: {e}", config_path=str(path)) from e

    if content is None:
        return {}
    if not isinstance(content, dict):
        raise ConfigError(f"Config file must contain a YAML object: {path}", config_path=str(path))

    logger.debug("Loaded config file", name=name, path=str(path))
    return content


def parse_config(raw_config: dict[str, Any], source: str = "<dict>") -> DocReelConfig:
    """Validate a raw config dict against the schema.

    Args:
        raw_config: Raw configuration dictionary
        source: Where the dict came from, for error messages

    Returns:
        Validated DocReelConfig

    Raises:
        ConfigValidationError: If validation fails
    """
    try:
        return DocReelConfig(**raw_config)
    except ValidationError as e:
        error_messages = []
        for error in e.errors():
            loc = ".".join(str(loc_part) for loc_part in error["loc"])
            error_messages.append(f"{loc}: {error['msg']}")

        logger.error("Config validation failed", source=source, errors=error_messages)
        raise ConfigValidationError(
            f"Invalid configuration in {source}:\n" + "\n".join(error_messages),
            config_path=source,
            errors=error_messages,
        ) from e


@lru_cache(maxsize=4)
def load_defaults(path: str | None = None) -> DocReelConfig:
    """Load component defaults from YAML.

    Args:
        path: Path to the YAML file (default: config/defaults.yaml)

    Returns:
        Validated DocReelConfig

    Raises:
        ConfigError: If the file doesn't exist or is invalid YAML.
        ConfigValidationError: If values are invalid.
    """
    defaults_path = Path(path) if path else _CONFIG_BASE_DIR / "defaults.yaml"
    raw = _load_yaml_file(defaults_path, "defaults")
    config = parse_config(raw, source=str(defaults_path))
    logger.info("Component defaults loaded", path=str(defaults_path))
    return config


def clear_config_cache() -> None:
    """Clear cached configurations.

    Call this if config files are modified at runtime and need to be reloaded.
    """
    load_defaults.cache_clear()
    logger.info("Config cache cleared")
