"""Loading of flow data objects and templates from disk."""

import json
import logging
from pathlib import Path
from typing import Any, Dict, List, Union
import yaml

from flowresolver.exceptions import FlowValidationError, LoadIssue


logger = logging.getLogger(__name__)


class PreservingLoader(yaml.SafeLoader):
    """YAML loader that keeps 'on'/'off'/'yes'/'no' as strings instead of booleans."""
    pass


# Flow fields such as 'on' or 'no' are keys and values, not booleans.
# Drop the implicit bool resolvers except for true/false.
PreservingLoader.yaml_implicit_resolvers = {
    first: [
        (tag, regexp) for tag, regexp in resolvers
        if tag != 'tag:yaml.org,2002:bool' or first in ('t', 'T', 'f', 'F')
    ]
    for first, resolvers in PreservingLoader.yaml_implicit_resolvers.items()
}


class FlowLoader:
    """Loads flow data objects (YAML or JSON) and template text."""

    JSON_SUFFIXES = {'.json'}

    def __init__(self, workspace: Path):
        """Initialize loader with workspace root used for relative paths."""
        self.workspace = workspace.resolve()
        self.issues: List[LoadIssue] = []

    def _path(self, path: Union[str, Path]) -> Path:
        path = Path(path)
        if not path.is_absolute():
            path = self.workspace / path
        return path

    def load_data(self, path: Union[str, Path]) -> Dict[str, Any]:
        """
        Load a data object file.

        Args:
            path: File path, absolute or relative to the workspace

        Returns:
            The top-level mapping

        Raises:
            FlowValidationError: If the file is missing, unparsable or not a mapping
        """
        self.issues = []
        data_path = self._path(path)

        if not data_path.exists():
            self._add_issue("File not found", str(data_path))
            self._raise_issues()

        logger.debug(f"Loading data object: {data_path}")
        try:
            with open(data_path, 'r', encoding='utf-8') as f:
                if data_path.suffix.lower() in self.JSON_SUFFIXES:
                    data = json.load(f)
                else:
                    data = yaml.load(f, Loader=PreservingLoader)
        except (OSError, ValueError, yaml.YAMLError) as e:
            self._add_issue(f"Failed to parse data object: {e}", str(data_path))
            self._raise_issues()

        if not isinstance(data, dict):
            self._add_issue(
                f"Data object must be a mapping, got {type(data).__name__}",
                str(data_path)
            )
            self._raise_issues()

        return data

    def load_template(self, path: Union[str, Path]) -> str:
        """Read template text verbatim."""
        self.issues = []
        template_path = self._path(path)

        if not template_path.exists():
            self._add_issue("File not found", str(template_path))
            self._raise_issues()

        logger.debug(f"Loading template: {template_path}")
        try:
            return template_path.read_text(encoding='utf-8')
        except (OSError, UnicodeDecodeError) as e:
            self._add_issue(f"Failed to read template: {e}", str(template_path))
            self._raise_issues()

    def _add_issue(self, message: str, source: str = "") -> None:
        self.issues.append(LoadIssue(message, source))

    def _raise_issues(self) -> None:
        if self.issues:
            raise FlowValidationError(self.issues)
