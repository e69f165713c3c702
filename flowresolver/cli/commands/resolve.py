"""Resolve command implementation."""

import json
import logging
from argparse import Namespace
from pathlib import Path

from flowresolver.config import ResolverConfig
from flowresolver.exceptions import FlowValidationError
from flowresolver.loader import FlowLoader
from flowresolver.variables import Status, resolve_variables

from ._logging import configure_logging


logger = logging.getLogger(__name__)

EXIT_CODES = {
    Status.OK: 0,
    Status.NOT_FOUND: 3,
    Status.CIRCULAR_REFERENCE: 4,
    Status.MALFORMED: 5,
}


def resolve_template(args: Namespace) -> int:
    """
    Resolve a template file against a data object file.

    Prints {"status", "data", "used"} as JSON and returns an exit code
    derived from the status.
    """
    configure_logging(args)

    workspace = Path.cwd()
    loader = FlowLoader(workspace)

    try:
        config = ResolverConfig.load(args.config) if args.config else ResolverConfig()
        config = config.merge(special_tags=args.special, strict=args.strict)

        logger.info(f"Loading data object: {args.data}")
        data = loader.load_data(args.data)
        logger.info(f"Loading template: {args.template}")
        template = loader.load_template(args.template)
    except FlowValidationError as e:
        for issue in e.issues:
            logger.error(f"Validation error: {issue}")
        return e.exit_code

    special = config.special_variables()
    result = resolve_variables(data, template, special, strict=config.strict)

    if result.status is Status.NOT_FOUND:
        logger.error(f"Variable not found: {'.'.join(result.data)}")
    elif result.status is Status.CIRCULAR_REFERENCE:
        logger.error("Circular reference detected")
    elif result.status is Status.MALFORMED:
        logger.error("Template has unpaired delimiters")
    else:
        logger.info(f"Resolved template, deferred variables: {result.used}")

    output = json.dumps(result.to_dict(), indent=2)
    if args.output:
        try:
            Path(args.output).write_text(output + '\n', encoding='utf-8')
        except OSError as e:
            logger.error(f"Failed to write output: {e}")
            return 1
    else:
        print(output)

    return EXIT_CODES[result.status]
