"""Resolver settings read from a YAML file."""

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional, Union
import yaml

from flowresolver.exceptions import FlowValidationError, LoadIssue
from flowresolver.variables import SpecialVariables


logger = logging.getLogger(__name__)


@dataclass
class ResolverConfig:
    """Resolver settings.

    Example file:

        special_tags:
          - payload
        strict: false
    """
    special_tags: List[str] = field(default_factory=list)
    strict: bool = False

    KNOWN_FIELDS = ('special_tags', 'strict')

    @classmethod
    def from_dict(cls, raw: Optional[Dict[str, Any]], source: str = "") -> 'ResolverConfig':
        """Build a config from parsed YAML, collecting every error."""
        if raw is None:
            return cls()

        issues: List[LoadIssue] = []
        if not isinstance(raw, dict):
            issues.append(LoadIssue(
                f"Config must be a mapping, got {type(raw).__name__}", source))
            raise FlowValidationError(issues)

        for key in raw:
            if key not in cls.KNOWN_FIELDS:
                issues.append(LoadIssue(f"Unknown field '{key}'", source))

        tags = raw.get('special_tags', [])
        if not isinstance(tags, list):
            issues.append(LoadIssue("'special_tags' must be a list", source))
            tags = []
        else:
            for i, tag in enumerate(tags):
                if not isinstance(tag, str) or not tag:
                    issues.append(LoadIssue(
                        f"'special_tags[{i}]' must be a non-empty string", source))

        strict = raw.get('strict', False)
        if not isinstance(strict, bool):
            issues.append(LoadIssue("'strict' must be a boolean", source))

        if issues:
            raise FlowValidationError(issues)

        return cls(special_tags=list(tags), strict=strict)

    @classmethod
    def load(cls, path: Union[str, Path]) -> 'ResolverConfig':
        """Load a config file.

        Raises:
            FlowValidationError: If the file is missing, unparsable or invalid
        """
        config_path = Path(path)
        if not config_path.exists():
            raise FlowValidationError([LoadIssue("Config file not found", str(config_path))])

        try:
            with open(config_path, 'r', encoding='utf-8') as f:
                raw = yaml.safe_load(f)
        except yaml.YAMLError as e:
            raise FlowValidationError([
                LoadIssue(f"Failed to parse config: {e}", str(config_path))
            ])

        config = cls.from_dict(raw, str(config_path))
        logger.debug(f"Loaded config from {config_path}: {config}")
        return config

    def merge(self, special_tags: Optional[List[str]] = None, strict: bool = False) -> 'ResolverConfig':
        """Return a copy extended by command-line values."""
        tags = list(self.special_tags)
        for tag in special_tags or []:
            if tag not in tags:
                tags.append(tag)
        return ResolverConfig(special_tags=tags, strict=self.strict or strict)

    def special_variables(self) -> SpecialVariables:
        """Fresh descriptor for one top-level resolution."""
        return SpecialVariables(tags=list(self.special_tags))
