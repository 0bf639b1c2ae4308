#!/usr/bin/env python3
"""Determine the CI runners needed to test formula changes.

Usage:
    determine-test-runners wget,curl
    determine-test-runners wget,curl old-formula --dependents
    determine-test-runners wget --catalog formulae.yml --output runners.txt --print
"""
import argparse
import logging
import os
import sys
from typing import List, Optional

import yaml

from .catalog import load_catalog
from .config import load_config
from .dependents.query import BrewUsesQuery
from .errors import ConfigurationError, DependentQueryError
from .formula.registry import FormulaRegistry
from .formula.source import BrewInfoSource
from .matrix.builder import determine_test_runners
from .output import runners_json, write_github_output

logger = logging.getLogger(__name__)


def split_formulae(value: Optional[str]) -> List[str]:
    """Split a comma-separated formula list, dropping empty items."""
    if not value:
        return []
    return [name.strip() for name in value.split(",") if name.strip()]


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="determine-test-runners",
        description="Determine the runners used to test formulae or their dependents.",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Environment:
  HOMEBREW_LINUX_RUNNER    Linux runner label (required)
  HOMEBREW_LINUX_CLEANUP   "true" if the Linux runner needs cleanup (required)
  GITHUB_RUN_ID            Run id used in ephemeral runner labels (required)
  GITHUB_RUN_ATTEMPT       Run attempt used in ephemeral runner labels (required)
  GITHUB_OUTPUT            File the runner matrix is appended to
  RUNNER_MATRIX_CONFIG     YAML config file
  LOG_LEVEL                Logging level (default: INFO)
"""
    )
    parser.add_argument('testing_formulae', help='Comma-separated formulae being tested')
    parser.add_argument('deleted_formulae', nargs='?', default=None,
                        help='Comma-separated formulae deleted by the change')
    parser.add_argument('--dependents', action='store_true',
                        help='Determine runners for testing dependents')
    parser.add_argument('--catalog', help='YAML formula catalog to use instead of brew')
    parser.add_argument('--config', help='YAML config file')
    parser.add_argument('--output', help='Output file (default: $GITHUB_OUTPUT)')
    parser.add_argument('--brew', default=os.environ.get('HOMEBREW_BREW_FILE', 'brew'),
                        help='brew executable used for formula and dependent lookups')
    parser.add_argument('--print', dest='print_json', action='store_true',
                        help='Also print the runner matrix JSON to stdout')
    parser.add_argument('-v', '--verbose', action='store_true', help='Debug logging')
    return parser


def build_registry(catalog: Optional[str], brew_file: str) -> FormulaRegistry:
    if catalog:
        return load_catalog(catalog).registry()
    return FormulaRegistry(BrewInfoSource(brew_file), BrewUsesQuery(brew_file))


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)

    logging.basicConfig(
        stream=sys.stderr,
        level=logging.DEBUG if args.verbose else os.environ.get("LOG_LEVEL", "INFO"),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    try:
        config = load_config(args.config).require_complete()
        output = args.output or config.github.output
        if not output:
            raise ConfigurationError("GITHUB_OUTPUT is not defined")

        registry = build_registry(args.catalog, args.brew)
        runners = determine_test_runners(
            split_formulae(args.testing_formulae),
            registry,
            config,
            deleted_formulae=split_formulae(args.deleted_formulae),
            dependents=args.dependents,
        )
        write_github_output(output, runners)
    except (ValueError, LookupError, OSError, DependentQueryError, yaml.YAMLError) as e:
        logger.error(str(e))
        return 1

    if args.print_json:
        print(runners_json(runners))
    return 0


if __name__ == '__main__':
    sys.exit(main())
