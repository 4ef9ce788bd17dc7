"""
Configuration management for Apex Status Board.

This module loads the YAML configuration file, applies environment overrides
and validates the result into a DashboardConfig.
"""

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, Optional

from ruamel.yaml import YAML
from ruamel.yaml.error import YAMLError

from .constants import (
    logger,
    DEFAULT_CACHE_DIR,
    DEFAULT_FETCH_TIMEOUT,
    DEFAULT_FONT_HEIGHT,
    DEFAULT_IMAGE_NAME,
    DEFAULT_OVERFLOW,
    DEFAULT_RESAMPLE,
    OVERFLOW_POLICIES,
    PROVIDER_BASE_URL,
    RESAMPLE_FILTERS,
    THUMBNAIL_SIZE,
)
from .errors import ConfigError

# Environment variables that take precedence over the config file
ENV_OVERRIDES = {
    'STATUSBOARD_AUTH_TOKEN': 'auth_token',
    'STATUSBOARD_FONT': 'font_path',
    'STATUSBOARD_OUTPUT': 'output_image_name',
    'STATUSBOARD_CACHE_DIR': 'cache_dir',
}


@dataclass(frozen=True)
class DashboardConfig:
    auth_token: str
    font_path: Path
    font_height: float = DEFAULT_FONT_HEIGHT
    output_image_name: Path = Path(DEFAULT_IMAGE_NAME)
    cache_dir: Path = Path(DEFAULT_CACHE_DIR)
    thumbnail_size: int = THUMBNAIL_SIZE
    resample: str = DEFAULT_RESAMPLE
    overflow: str = DEFAULT_OVERFLOW
    fetch_timeout: float = DEFAULT_FETCH_TIMEOUT
    provider_url: str = PROVIDER_BASE_URL


def read_yaml(path: Path) -> Dict[str, Any]:
    """Read a YAML mapping. Raises ConfigError if missing, malformed or not a mapping."""
    if not path.exists():
        raise ConfigError(f"Config file not found: {path}")

    yaml_parser = YAML(typ='safe')
    try:
        with path.open('r', encoding='utf-8') as f:
            data = yaml_parser.load(f)
    except (OSError, YAMLError) as e:
        raise ConfigError(f"Failed to read config {path}: {e}") from e

    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ConfigError(f"Config {path} must be a mapping, got {type(data).__name__}")
    return dict(data)


def apply_env_overrides(raw: Dict[str, Any], environ: Optional[Dict[str, str]] = None) -> Dict[str, Any]:
    """Return a copy of ``raw`` with any set STATUSBOARD_* variables applied."""
    environ = os.environ if environ is None else environ
    merged = dict(raw)
    for env_name, key in ENV_OVERRIDES.items():
        value = environ.get(env_name)
        if value:
            logger.debug(f"CONFIG_OVERRIDE: {key} from {env_name}")
            merged[key] = value
    return merged


def load_dashboard_config(
    path: Path,
    environ: Optional[Dict[str, str]] = None,
) -> DashboardConfig:
    """
    Load and validate the dashboard configuration.

    Relative font and output paths are resolved against the directory holding
    the config file. The cache directory stays relative to the working
    directory.
    """
    path = Path(path)
    raw = apply_env_overrides(read_yaml(path), environ)
    config = parse_dashboard_config(raw, base_dir=path.parent)
    logger.info(f"Config loaded: {path}")
    logger.info(f"  Font: {config.font_path} ({config.font_height:g}px)")
    logger.info(f"  Output: {config.output_image_name}")
    logger.info(f"  Cache: {config.cache_dir}")
    return config


def parse_dashboard_config(raw: Dict[str, Any], base_dir: Optional[Path] = None) -> DashboardConfig:
    """Validate a raw mapping into a DashboardConfig."""
    auth_token = _require_str(raw, 'auth_token')
    font_path = _resolve(Path(_require_str(raw, 'font_path')), base_dir)

    font_height = _number(raw, 'font_height', DEFAULT_FONT_HEIGHT)
    if font_height <= 0:
        raise ConfigError(f"font_height must be positive, got {font_height}")

    thumbnail_size = _number(raw, 'thumbnail_size', THUMBNAIL_SIZE)
    if thumbnail_size <= 0 or int(thumbnail_size) != thumbnail_size:
        raise ConfigError(f"thumbnail_size must be a positive integer, got {thumbnail_size}")

    fetch_timeout = _number(raw, 'fetch_timeout', DEFAULT_FETCH_TIMEOUT)
    if fetch_timeout <= 0:
        raise ConfigError(f"fetch_timeout must be positive, got {fetch_timeout}")

    resample = str(raw.get('resample') or DEFAULT_RESAMPLE).lower()
    if resample not in RESAMPLE_FILTERS:
        raise ConfigError(f"resample must be one of {', '.join(RESAMPLE_FILTERS)}, got '{resample}'")

    overflow = str(raw.get('overflow') or DEFAULT_OVERFLOW).lower()
    if overflow not in OVERFLOW_POLICIES:
        raise ConfigError(f"overflow must be one of {', '.join(OVERFLOW_POLICIES)}, got '{overflow}'")

    return DashboardConfig(
        auth_token=auth_token,
        font_path=font_path,
        font_height=float(font_height),
        output_image_name=_resolve(Path(str(raw.get('output_image_name') or DEFAULT_IMAGE_NAME)), base_dir),
        cache_dir=Path(str(raw.get('cache_dir') or DEFAULT_CACHE_DIR)).expanduser(),
        thumbnail_size=int(thumbnail_size),
        resample=resample,
        overflow=overflow,
        fetch_timeout=float(fetch_timeout),
        provider_url=str(raw.get('provider_url') or PROVIDER_BASE_URL).rstrip('/'),
    )


def redact_token(token: str) -> str:
    """Mask a credential for log output."""
    if len(token) <= 4:
        return '[REDACTED]'
    return f"{token[:2]}...[REDACTED]"


def _require_str(raw: Dict[str, Any], key: str) -> str:
    value = raw.get(key)
    if value is None or (isinstance(value, str) and not value.strip()):
        raise ConfigError(f"Missing required config value: {key}")
    if not isinstance(value, str):
        raise ConfigError(f"Config value {key} must be a string, got {type(value).__name__}")
    return value.strip()


def _number(raw: Dict[str, Any], key: str, default: float) -> float:
    value = raw.get(key)
    if value is None:
        return default
    if isinstance(value, bool):
        raise ConfigError(f"Config value {key} must be a number, got {value!r}")
    try:
        return float(value)
    except (TypeError, ValueError) as e:
        raise ConfigError(f"Config value {key} must be a number, got {value!r}") from e


def _resolve(path: Path, base_dir: Optional[Path]) -> Path:
    path = path.expanduser()
    if path.is_absolute() or base_dir is None:
        return path
    return base_dir / path
