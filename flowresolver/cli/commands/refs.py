"""Refs command implementation."""

import logging
from argparse import Namespace
from pathlib import Path

from flowresolver.exceptions import FlowValidationError
from flowresolver.loader import FlowLoader
from flowresolver.variables import extract_references

from ._logging import configure_logging


logger = logging.getLogger(__name__)


def list_references(args: Namespace) -> int:
    """Print the references of a template, one per line, in order."""
    configure_logging(args)

    loader = FlowLoader(Path.cwd())
    try:
        template = loader.load_template(args.template)
    except FlowValidationError as e:
        for issue in e.issues:
            logger.error(f"Validation error: {issue}")
        return e.exit_code

    for name in extract_references(template):
        print(name)
    return 0
