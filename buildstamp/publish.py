"""Publishing of collected build metadata.

publish() copies a BuildMetadata record into an explicit BuildEnvironment
(named constants plus rebuild triggers). The render_* functions turn that
environment into whatever the surrounding build tool consumes:

  directives: cargo-style build script lines (rustc-env / rerun-if-changed)
  module:     an importable Python module of string constants
  dotenv:     NAME=VALUE lines
  json:       {"constants": {...}, "rerun_if_changed": [...]}
"""
from __future__ import annotations

import json
import logging
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Callable, Dict, Iterable, List, Optional

from .metadata import BuildMetadata

logger = logging.getLogger(__name__)


@dataclass
class BuildEnvironment:
    """Constants and rebuild triggers handed to the build tool."""

    constants: Dict[str, str] = field(default_factory=dict)
    rerun_if_changed: List[str] = field(default_factory=list)

    def set_constant(self, name: str, value: str) -> None:
        self.constants[name] = value

    def rerun_if_changed_path(self, path: str | os.PathLike) -> None:
        path = os.fspath(path)
        if path not in self.rerun_if_changed:
            self.rerun_if_changed.append(path)


def git_triggers(git_dir: str | os.PathLike = '.git') -> List[str]:
    """Paths whose modification means HEAD may point somewhere new."""
    return [os.path.join(git_dir, 'HEAD'), os.path.join(git_dir, 'refs')]


def publish(metadata: BuildMetadata, env: Optional[BuildEnvironment] = None,
            git_dir: str | os.PathLike = '.git') -> BuildEnvironment:
    env = env if env is not None else BuildEnvironment()
    for name, value in metadata.as_constants().items():
        env.set_constant(name, value)
    for path in git_triggers(git_dir):
        env.rerun_if_changed_path(path)
    return env


def _single_line(value: str) -> str:
    return ' '.join(value.splitlines())


def render_directives(env: BuildEnvironment, prefix: str = 'cargo') -> str:
    # one directive per line, so embedded line breaks would start a new directive
    lines = [f"{prefix}:rustc-env={name}={_single_line(value)}" for name, value in env.constants.items()]
    lines += [f"{prefix}:rerun-if-changed={_single_line(path)}" for path in env.rerun_if_changed]
    return '\n'.join(lines) + '\n'


def render_module(env: BuildEnvironment) -> str:
    lines = ['# Auto-generated at build time. Do not edit.']
    lines += [f"{name} = {value!r}" for name, value in env.constants.items()]
    lines.append('')
    lines.append(f"__all__ = {list(env.constants)!r}")
    return '\n'.join(lines) + '\n'


def render_dotenv(env: BuildEnvironment) -> str:
    return ''.join(f"{name}={json.dumps(value, ensure_ascii=False)}\n" for name, value in env.constants.items())


def render_json(env: BuildEnvironment) -> str:
    payload = {'constants': env.constants, 'rerun_if_changed': env.rerun_if_changed}
    return json.dumps(payload, indent=2) + '\n'


RENDERERS: Dict[str, Callable[[BuildEnvironment], str]] = {
    'directives': render_directives,
    'module': render_module,
    'dotenv': render_dotenv,
    'json': render_json,
}


def _latest_mtime(path: Path) -> Optional[float]:
    if not path.exists():
        return None
    latest = path.stat().st_mtime
    if path.is_dir():
        for root, _dirs, files in os.walk(path):
            for name in files:
                try:
                    latest = max(latest, os.stat(os.path.join(root, name)).st_mtime)
                except FileNotFoundError:
                    continue
    return latest


def _without_build_date(text: str) -> List[str]:
    return [line for line in text.splitlines() if 'BUILD_DATE' not in line]


def is_stale(output: str | os.PathLike, triggers: Iterable[str | os.PathLike],
             rendered: Optional[str] = None) -> bool:
    """True if ``output`` is missing or out of date.

    ``output`` is out of date when any existing trigger is newer than it, or
    when ``rendered`` is given and differs from its content anywhere except
    the BUILD_DATE line.
    """
    output = Path(output)
    if not output.exists():
        return True
    if rendered is not None:
        try:
            current = output.read_text(encoding='utf-8')
        except (OSError, UnicodeDecodeError) as e:
            logger.debug(f"Cannot read {output}: {e}")
            return True
        if _without_build_date(current) != _without_build_date(rendered):
            logger.debug(f"{output} content differs from the collected metadata")
            return True
    built_at = output.stat().st_mtime
    for trigger in triggers:
        changed_at = _latest_mtime(Path(trigger))
        if changed_at is not None and changed_at > built_at:
            logger.debug(f"{trigger} changed since {output} was written")
            return True
    return False


__all__ = [
    'BuildEnvironment',
    'RENDERERS',
    'git_triggers',
    'is_stale',
    'publish',
    'render_directives',
    'render_dotenv',
    'render_json',
    'render_module',
]
