"""Main CLI entry point for flowresolver."""

import argparse
import sys
from typing import Optional

from .commands import list_references, resolve_template


def add_logging_arguments(parser: argparse.ArgumentParser) -> None:
    """Logging flags shared by every subcommand."""
    parser.add_argument(
        '--debug',
        action='store_true',
        help='Enable debug logging'
    )
    parser.add_argument(
        '--quiet',
        action='store_true',
        help='Suppress non-error output'
    )
    parser.add_argument(
        '--verbose',
        action='store_true',
        help='Enable verbose output'
    )
    parser.add_argument(
        '--log-level',
        choices=['debug', 'info', 'warn', 'error'],
        default='info',
        help='Set log level'
    )


def create_parser() -> argparse.ArgumentParser:
    """Create the argument parser for the flowresolve CLI."""
    parser = argparse.ArgumentParser(
        prog='flowresolve',
        description='Resolve {{variable}} references in flow request templates'
    )

    subparsers = parser.add_subparsers(dest='command', help='Commands')

    # Resolve command
    resolve_parser = subparsers.add_parser('resolve', help='Resolve a template against a data object')
    resolve_parser.add_argument(
        'data',
        type=str,
        help='Path to the data object (YAML or JSON)'
    )
    resolve_parser.add_argument(
        'template',
        type=str,
        help='Path to the template text file'
    )
    resolve_parser.add_argument(
        '--special',
        action='append',
        metavar='TAG',
        help='Special top-level name deferred as ${...} (can be specified multiple times)'
    )
    resolve_parser.add_argument(
        '--config',
        type=str,
        help='Path to YAML resolver config'
    )
    resolve_parser.add_argument(
        '--strict',
        action='store_true',
        help='Fail on unpaired delimiters instead of leaving them unresolved'
    )
    resolve_parser.add_argument(
        '--output',
        type=str,
        metavar='FILE',
        help='Write the result JSON to FILE instead of stdout'
    )
    add_logging_arguments(resolve_parser)

    # Refs command
    refs_parser = subparsers.add_parser('refs', help='List references used by a template')
    refs_parser.add_argument(
        'template',
        type=str,
        help='Path to the template text file'
    )
    add_logging_arguments(refs_parser)

    return parser


def main(args: Optional[list] = None) -> int:
    """Main entry point for the CLI."""
    parser = create_parser()
    parsed_args = parser.parse_args(args)

    if not parsed_args.command:
        parser.print_help()
        return 1

    if parsed_args.command == 'resolve':
        return resolve_template(parsed_args)
    elif parsed_args.command == 'refs':
        return list_references(parsed_args)
    else:
        parser.print_help()
        return 1


if __name__ == '__main__':
    sys.exit(main())
