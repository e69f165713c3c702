"""Logging setup shared by CLI commands."""

import logging
from argparse import Namespace


def configure_logging(args: Namespace) -> None:
    """Configure the root logger from --log-level/--debug/--quiet/--verbose."""
    level_name = 'warning' if args.log_level == 'warn' else args.log_level
    log_level = getattr(logging, level_name.upper())
    if args.debug:
        log_level = logging.DEBUG
    elif args.quiet:
        log_level = logging.ERROR
    elif args.verbose:
        log_level = logging.DEBUG

    logging.basicConfig(
        level=log_level,
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
    )
