"""Resolution outcome types."""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List


class Status(str, Enum):
    """Status tag of a resolution result."""
    OK = "ok"
    NOT_FOUND = "not-found"
    CIRCULAR_REFERENCE = "circular-reference"
    # Only produced when resolving in strict mode
    MALFORMED = "malformed"


@dataclass
class ResolutionResult:
    """Outcome of resolving a template, a reference or a path.

    ``data`` holds the resolved value for OK, the missing path for
    NOT_FOUND, the partially substituted text for MALFORMED and None for
    CIRCULAR_REFERENCE. ``used`` holds the deferred expressions met along
    the way, in encounter order.
    """
    status: Status = Status.OK
    data: Any = None
    used: List[str] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return self.status is Status.OK

    def to_dict(self) -> Dict[str, Any]:
        """Convert to a JSON-friendly dict."""
        return {
            'status': self.status.value,
            'data': self.data,
            'used': list(self.used),
        }
