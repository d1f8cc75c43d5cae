#!/usr/bin/env python3
"""Command-line entry point: collect build metadata and publish it.

Examples:
  buildstamp                                   # cargo-style directives on stdout
  buildstamp --format module --output pkg/_build_info.py --if-changed
  buildstamp --format json
"""
from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path
from typing import List, Optional

from .config import get_config
from .metadata import collect
from .publish import RENDERERS, is_stale, publish

logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog='buildstamp',
        description='Collect commit, timestamp, target and profile for a build',
    )
    parser.add_argument('--format', choices=sorted(RENDERERS), default=None,
                        help='Output format (default from settings)')
    parser.add_argument('--output', type=Path, default=None,
                        help='File to write (default: stdout)')
    parser.add_argument('--git-dir', default=None,
                        help='Repository git directory used for rebuild triggers')
    parser.add_argument('--if-changed', action='store_true',
                        help='Only rewrite --output when its constants or a rebuild trigger changed')
    parser.add_argument('--config', default=None, help='Alternative settings YAML')
    parser.add_argument('-v', '--verbose', action='store_true', help='Debug logging')
    return parser


def main(argv: Optional[List[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    if args.if_changed and args.output is None:
        parser.error('--if-changed requires --output')
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
        stream=sys.stderr,
    )
    cfg = get_config(path=args.config)
    output_format = args.format or cfg['output_format']
    if output_format not in RENDERERS:
        logger.warning(f"Unknown output_format {output_format!r} in settings, using directives")
        output_format = 'directives'
    git_dir = args.git_dir or cfg['git_dir']

    metadata = collect(settings=cfg)
    env = publish(metadata, git_dir=git_dir)

    rendered = RENDERERS[output_format](env)
    if args.if_changed and not is_stale(args.output, env.rerun_if_changed, rendered=rendered):
        logger.info(f"{args.output} is up to date")
        return 0

    if args.output is None:
        sys.stdout.write(rendered)
    else:
        args.output.parent.mkdir(parents=True, exist_ok=True)
        args.output.write_text(rendered, encoding='utf-8')
        logger.info(f"Wrote {output_format} build metadata to {args.output}")
    return 0


if __name__ == '__main__':
    sys.exit(main())
