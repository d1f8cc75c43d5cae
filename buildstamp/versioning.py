"""Versioning utilities: best-effort probes for git revision identifiers."""
from __future__ import annotations
import logging
import os
import subprocess
from typing import Optional, Sequence

logger = logging.getLogger(__name__)


class ProbeError(RuntimeError):
    """An external command could not produce a value."""

    def __init__(self, command: Sequence[str], message: str,
                 returncode: Optional[int] = None, stderr: str = ''):
        self.command = list(command)
        self.returncode = returncode
        self.stderr = stderr
        super().__init__(f"{' '.join(self.command)}: {message}")


def probe(command: str, args: Sequence[str] = (), cwd: str | os.PathLike | None = None,
          timeout: float | None = None) -> str:
    """Run ``command`` with ``args`` and return its trimmed standard output.

    Output is decoded as UTF-8 with undecodable bytes replaced. Raises
    ProbeError if the command is missing, cannot run, times out or exits
    non-zero.
    """
    argv = [command, *args]
    try:
        result = subprocess.run(argv, cwd=cwd, capture_output=True, timeout=timeout)
    except subprocess.TimeoutExpired as e:
        raise ProbeError(argv, f"timed out after {e.timeout}s") from e
    except OSError as e:
        raise ProbeError(argv, str(e)) from e
    if result.returncode != 0:
        stderr = result.stderr.decode('utf-8', errors='replace').strip()
        raise ProbeError(argv, f"exited with status {result.returncode}",
                         returncode=result.returncode, stderr=stderr)
    return result.stdout.decode('utf-8', errors='replace').strip()


def probe_or(command: str, args: Sequence[str] = (), fallback: str = 'unknown',
             cwd: str | os.PathLike | None = None, timeout: float | None = None) -> str:
    try:
        return probe(command, args, cwd=cwd, timeout=timeout)
    except ProbeError as e:
        logger.debug(f"Probe failed, using {fallback!r}: {e}")
        return fallback


def get_commit_hash(short: bool = False, fallback: str = 'unknown', git: str = 'git',
                    cwd: str | os.PathLike | None = None, timeout: float | None = None) -> str:
    args = ['rev-parse', '--short', 'HEAD'] if short else ['rev-parse', 'HEAD']
    return probe_or(git, args, fallback=fallback, cwd=cwd, timeout=timeout)


__all__ = ['ProbeError', 'probe', 'probe_or', 'get_commit_hash']
