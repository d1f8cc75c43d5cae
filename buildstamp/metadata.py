"""Build metadata collection.

Gathers the provenance of a build (commit hash in long and short form, a UTC
timestamp, the compilation target and the build profile) into a single
BuildMetadata record. Every lookup is best effort: a failed lookup yields the
configured fallback literal instead of an error.
"""
from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, Dict, Mapping, Optional

from .config import DEFAULTS, get_config, validate_config
from .versioning import get_commit_hash

logger = logging.getLogger(__name__)

TIMESTAMP_FORMAT = '%Y-%m-%d %H:%M:%S UTC'


@dataclass(frozen=True)
class BuildMetadata:
    commit_hash: str
    commit_hash_short: str
    build_timestamp: str
    target_triple: str
    build_profile: str

    def as_constants(self) -> Dict[str, str]:
        """Map each field to the constant name the built program reads."""
        return {
            'GIT_HASH': self.commit_hash,
            'GIT_HASH_SHORT': self.commit_hash_short,
            'BUILD_DATE': self.build_timestamp,
            'BUILD_TARGET': self.target_triple,
            'BUILD_PROFILE': self.build_profile,
        }


def format_timestamp(moment: datetime) -> str:
    if moment.tzinfo is None:
        moment = moment.replace(tzinfo=timezone.utc)
    return moment.astimezone(timezone.utc).strftime(TIMESTAMP_FORMAT)


def _env_or(environ: Mapping[str, str], name: str, fallback: str) -> str:
    value = environ.get(name)
    if value is None:
        logger.debug(f"{name} is not set, using {fallback!r}")
        return fallback
    return value


def collect(environ: Optional[Mapping[str, str]] = None,
            cwd: str | os.PathLike | None = None,
            now: Optional[datetime] = None,
            settings: Optional[Dict[str, Any]] = None) -> BuildMetadata:
    """Collect build metadata for the repository at ``cwd``.

    Parameters
    ----------
    environ : Optional[Mapping[str, str]]
        Environment to read the target and profile from. Defaults to
        ``os.environ``.
    cwd : path-like, optional
        Directory git is run in. Defaults to the process working directory.
    now : Optional[datetime]
        Capture time. Defaults to the current UTC time.
    settings : Optional[Dict[str, Any]]
        Settings dict as returned by ``get_config``. Missing or
        mistyped keys fall back to DEFAULTS.

    Returns
    -------
    BuildMetadata
        Always fully populated; never raises for an unavailable lookup.
    """
    cfg = get_config() if settings is None else validate_config({**DEFAULTS, **settings})
    environ = os.environ if environ is None else environ
    fallback = cfg['fallback']
    git = cfg['git_executable']
    timeout = cfg.get('probe_timeout')

    commit_hash = get_commit_hash(short=False, fallback=fallback, git=git, cwd=cwd, timeout=timeout)
    commit_hash_short = get_commit_hash(short=True, fallback=fallback, git=git, cwd=cwd, timeout=timeout)
    build_timestamp = format_timestamp(now if now is not None else datetime.now(timezone.utc))
    target_triple = _env_or(environ, cfg['target_env'], fallback)
    build_profile = _env_or(environ, cfg['profile_env'], fallback)

    return BuildMetadata(
        commit_hash=commit_hash,
        commit_hash_short=commit_hash_short,
        build_timestamp=build_timestamp,
        target_triple=target_triple,
        build_profile=build_profile,
    )


__all__ = ['BuildMetadata', 'TIMESTAMP_FORMAT', 'collect', 'format_timestamp']
