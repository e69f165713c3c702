"""Errors raised while reading flowresolver input files."""

from dataclasses import dataclass
from typing import List


@dataclass
class LoadIssue:
    """One problem found in a data, template or config file."""
    message: str
    source: str = ""

    def __str__(self) -> str:
        if self.source:
            return f"{self.source}: {self.message}"
        return self.message


class FlowValidationError(Exception):
    """Input files could not be used.

    Carries every issue found so the CLI can report them all before
    exiting with ``exit_code``.
    """

    exit_code = 2

    def __init__(self, issues: List[LoadIssue]):
        self.issues = list(issues)
        super().__init__("\n".join(str(issue) for issue in self.issues))
