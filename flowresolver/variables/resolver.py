"""
Template resolution for {{dotted.path}} references.

Resolves references against a flow's data object. A value fetched for a
reference may itself contain references; those are resolved in the same
pass, with circular chains reported instead of followed. References rooted
at a special tag become deferred ${...} expressions.
"""

import json
import logging
import re
from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any, FrozenSet, List, Optional, Tuple

from .accessor import SpecialVariables, lookup_path
from .result import ResolutionResult, Status
from .tokenizer import CLOSE_DELIMITER, OPEN_DELIMITER, tokenize


logger = logging.getLogger(__name__)

# ':  {{' -> ':  "{{' unless the reference is already quoted
OPENING_QUOTE_PATTERN = re.compile(r'(:[ \n]*)\{\{')
# '}}  ,' -> '}}"  ,' and '}}}' -> '}}"}' unless already quoted
CLOSING_QUOTE_PATTERN = re.compile(r'\}\}([ \n]*)(?=[,}])')


def normalize_quotes(text: str) -> str:
    """
    Quote references used as bare JSON values.

    A reference following a colon gets an opening quote; a reference
    followed by ',' or '}' gets a closing quote. Running it twice is a no-op.
    """
    text = OPENING_QUOTE_PATTERN.sub(r'\1"{{', text)
    return CLOSING_QUOTE_PATTERN.sub(r'}}"\1', text)


def stringify(value: Any) -> str:
    """Render a resolved value for splicing into template text."""
    if isinstance(value, str):
        return value
    if isinstance(value, bool):
        return 'true' if value else 'false'
    if value is None or isinstance(value, (Mapping, list, tuple)):
        return json.dumps(value, default=str)
    # Numbers, dates and other scalars
    return str(value)


def _find_reference(text: str) -> Optional[Tuple[int, int]]:
    """Return (open, close) indices of the first reference, or None.

    Only the first open and first close delimiters are considered; a close
    that comes before any open ends resolution.
    """
    open_index = text.find(OPEN_DELIMITER)
    close_index = text.find(CLOSE_DELIMITER)
    if open_index < 0 or close_index < 0 or open_index >= close_index:
        return None
    return open_index, close_index


@dataclass
class _Frame:
    """Text being resolved for one link of a reference chain.

    ``span`` marks the reference whose fetched value is being resolved in
    the frame above this one.
    """
    text: str
    tracking: FrozenSet[str]
    used: List[str] = field(default_factory=list)
    span: Optional[Tuple[int, int]] = None

    def splice(self, value: Any) -> None:
        open_index, close_index = self.span
        self.text = (
            self.text[:open_index]
            + stringify(value)
            + self.text[close_index + len(CLOSE_DELIMITER):]
        )
        self.span = None


def _unwind(stack: List[_Frame], result: ResolutionResult) -> ResolutionResult:
    """Abort every open frame, keeping the deferred expressions met so far."""
    used = [name for frame in stack for name in frame.used]
    return ResolutionResult(result.status, result.data, used + result.used)


def _finish(frame: _Frame, strict: bool) -> ResolutionResult:
    if OPEN_DELIMITER in frame.text:
        # A stray close delimiter ahead of the next open one stops the scan
        if strict:
            return ResolutionResult(Status.MALFORMED, frame.text, frame.used)
        logger.warning(f"Stopped at unpaired delimiters, rest left unresolved: {frame.text!r}")
    return ResolutionResult(Status.OK, frame.text, frame.used)


def _resolve(
    data: Any,
    text: Any,
    special: Optional[SpecialVariables],
    tracking: FrozenSet[str],
    strict: bool
) -> ResolutionResult:
    if not isinstance(text, str):
        return ResolutionResult(Status.OK, text)

    # One frame per link of the chain being expanded; the top frame is scanned
    stack = [_Frame(normalize_quotes(text), tracking)]

    while True:
        frame = stack[-1]
        span = _find_reference(frame.text)

        if span is None:
            stack.pop()
            finished = _finish(frame, strict)
            if not stack or not finished.ok:
                return _unwind(stack, finished)
            parent = stack[-1]
            parent.used.extend(finished.used)
            parent.splice(finished.data)
            continue

        open_index, close_index = span
        name = frame.text[open_index + len(OPEN_DELIMITER):close_index]

        if name in frame.tracking:
            logger.debug(f"Circular reference: {name} (chain: {sorted(frame.tracking)})")
            return _unwind(stack, ResolutionResult(Status.CIRCULAR_REFERENCE))

        fetched = lookup_path(data, tokenize(name, '.'), special)
        if not fetched.ok:
            logger.debug(f"Reference not found: {name}")
            return _unwind(stack, fetched)

        logger.debug(f"Expanding {{{{{name}}}}}")
        frame.used.extend(fetched.used)
        frame.span = span
        if isinstance(fetched.data, str):
            stack.append(_Frame(normalize_quotes(fetched.data), frame.tracking | {name}))
        else:
            frame.splice(fetched.data)


def _expand(
    data: Any,
    name: str,
    special: Optional[SpecialVariables],
    tracking: FrozenSet[str],
    strict: bool
) -> ResolutionResult:
    if name in tracking:
        logger.debug(f"Circular reference: {name} (chain: {sorted(tracking)})")
        return ResolutionResult(Status.CIRCULAR_REFERENCE)

    fetched = lookup_path(data, tokenize(name, '.'), special)
    if not fetched.ok:
        logger.debug(f"Reference not found: {name}")
        return fetched

    resolved = _resolve(data, fetched.data, special, tracking | {name}, strict)
    resolved.used[:0] = fetched.used
    return resolved


def expand_variable(
    data: Any,
    name: str,
    special: Optional[SpecialVariables] = None,
    tracking: FrozenSet[str] = frozenset(),
    strict: bool = False
) -> ResolutionResult:
    """
    Resolve a single reference name, e.g. 'flow.name'.

    Args:
        data: Data object backing the substitution
        name: Dotted reference name, without delimiters
        special: Optional special-variable descriptor
        tracking: Names already being expanded on this chain
        strict: Report unpaired delimiters in fetched values

    Returns:
        OK with the fully resolved value, NOT_FOUND with the missing path,
        or CIRCULAR_REFERENCE
    """
    result = _expand(data, name, special, frozenset(tracking), strict)
    if special is not None:
        special.used.extend(result.used)
    return result


def resolve_variables(
    data: Any,
    text: Any,
    special: Optional[SpecialVariables] = None,
    tracking: FrozenSet[str] = frozenset(),
    strict: bool = False
) -> ResolutionResult:
    """
    Substitute every {{reference}} in ``text`` from ``data``.

    Example:
        >>> special = SpecialVariables(tags=['payload'])
        >>> result = resolve_variables({}, 'Attributes {{payload.a}} and {{payload.b}}', special)
        >>> result.data
        'Attributes ${a} and ${b}'
        >>> special.used
        ['a', 'b']

    Args:
        data: Data object backing the substitution
        text: Template text; non-string values are returned unchanged
        special: Optional special-variable descriptor; its ``used`` list
            receives the deferred expressions of this call
        tracking: Names already being expanded (internal)
        strict: Return MALFORMED instead of OK when unpaired delimiters
            stop the substitution

    Returns:
        ResolutionResult; on error, the status and payload of the first
        failing reference
    """
    result = _resolve(data, text, special, frozenset(tracking), strict)
    if special is not None:
        special.used.extend(result.used)
    return result
