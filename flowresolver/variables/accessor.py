"""
Dotted-path access into a flow's data object.

Paths whose first segment is a special tag are not looked up: they are
turned into deferred ${...} expressions for the downstream evaluator.
"""

from collections.abc import Mapping, Sequence
from dataclasses import dataclass, field
from typing import Any, List, Optional, Sequence as SequenceType

from .result import ResolutionResult, Status


@dataclass
class SpecialVariables:
    """
    Reserved top-level names and the deferred expressions they produced.

    ``used`` is appended to by the public access/resolve entry points only,
    once per call.
    """
    tags: List[str] = field(default_factory=list)
    used: List[str] = field(default_factory=list)

    def matches(self, name: str) -> bool:
        return name in self.tags


_MISSING = object()


def _child(current: Any, segment: str) -> Any:
    """Index one level down, or return _MISSING."""
    if isinstance(current, Mapping):
        return current[segment] if segment in current else _MISSING
    if isinstance(current, Sequence) and not isinstance(current, (str, bytes)):
        if segment.isascii() and segment.isdigit() and int(segment) < len(current):
            return current[int(segment)]
    return _MISSING


def lookup_path(
    data: Any,
    path: SequenceType[str],
    special: Optional[SpecialVariables] = None
) -> ResolutionResult:
    """
    Resolve a path without touching ``special.used``.

    The deferred expression, if any, is carried in the result's ``used``.
    """
    path = list(path)

    if special is not None and path and special.matches(path[0]):
        deferred = '.'.join(path[1:])
        return ResolutionResult(Status.OK, '${' + deferred + '}', [deferred])

    current = data
    for segment in path:
        current = _child(current, segment)
        if current is _MISSING:
            return ResolutionResult(Status.NOT_FOUND, path)

    return ResolutionResult(Status.OK, current)


def access(
    data: Any,
    path: SequenceType[str],
    special: Optional[SpecialVariables] = None
) -> ResolutionResult:
    """
    Walk ``path`` through ``data``.

    Args:
        data: Hierarchical data object (mappings, sequences, scalars)
        path: Path segments, e.g. ['a', 'b']
        special: Optional special-variable descriptor

    Returns:
        OK with the stored value (or a ${...} placeholder for special
        paths), or NOT_FOUND carrying the full original path
    """
    result = lookup_path(data, path, special)
    if special is not None:
        special.used.extend(result.used)
    return result
