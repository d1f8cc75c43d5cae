"""Configuration loader for buildstamp.

Reads YAML settings from buildstamp/settings.yaml (or the file named by
BUILDSTAMP_CONFIG) and provides a dict-like interface.
Falls back to sane defaults if file missing or malformed.
"""
from __future__ import annotations
import hashlib
import logging
import os
from pathlib import Path
from typing import Any, Dict

import yaml

logger = logging.getLogger(__name__)

DEFAULTS: Dict[str, Any] = {
    'fallback': 'unknown',
    'git_executable': 'git',
    'target_env': 'TARGET',
    'profile_env': 'PROFILE',
    'probe_timeout': None,
    'output_format': 'directives',
    'git_dir': '.git',
}

CONFIG_PATH = Path(__file__).parent / 'settings.yaml'
CONFIG_ENV = 'BUILDSTAMP_CONFIG'

_cache: Dict[str, Any] | None = None


def _compute_version(path: Path) -> str:
    try:
        data = path.read_bytes()
        return hashlib.sha1(data).hexdigest()[:12]
    except OSError:
        return "unknown"


def resolve_config_path(path: str | os.PathLike | None = None) -> Path:
    if path is not None:
        return Path(path)
    override = os.environ.get(CONFIG_ENV)
    return Path(override) if override else CONFIG_PATH


def _valid_setting(key: str, value: Any) -> bool:
    if key == 'probe_timeout':
        return value is None or (isinstance(value, (int, float)) and not isinstance(value, bool) and value > 0)
    if key == 'fallback':
        return isinstance(value, str)
    # names of executables, env vars, formats and paths
    return isinstance(value, str) and value != ''


def validate_config(settings: Dict[str, Any], source: Any = 'settings') -> Dict[str, Any]:
    """Return ``settings`` with known keys of the wrong type replaced by their defaults."""
    cleaned = dict(settings)
    for key, default in DEFAULTS.items():
        if key in cleaned and not _valid_setting(key, cleaned[key]):
            logger.warning(f"Ignoring {key}={cleaned[key]!r} in {source}, using {default!r}")
            cleaned[key] = default
    return cleaned


def load_config(path: str | os.PathLike | None = None) -> Dict[str, Any]:
    """Read settings from ``path`` merged over DEFAULTS, without caching."""
    config_path = resolve_config_path(path)
    cfg = DEFAULTS.copy()
    if not config_path.exists():
        cfg['config_version'] = 'defaults'
        return cfg
    try:
        with open(config_path, 'r', encoding='utf-8') as f:
            loaded = yaml.safe_load(f) or {}
    except (OSError, yaml.YAMLError) as e:
        logger.warning(f"Failed to load {config_path}, using defaults: {e}")
        loaded = {}
    if isinstance(loaded, dict):
        cfg.update(validate_config(loaded, source=config_path))
    else:
        logger.warning(f"Ignoring {config_path}: expected a mapping, got {type(loaded).__name__}")
    cfg['config_version'] = _compute_version(config_path)
    return cfg


def get_config(refresh: bool = False, path: str | os.PathLike | None = None) -> Dict[str, Any]:
    global _cache
    if path is not None:
        return load_config(path)
    if _cache is not None and not refresh:
        return _cache
    _cache = load_config()
    return _cache


__all__ = ['DEFAULTS', 'get_config', 'load_config', 'resolve_config_path', 'validate_config']
