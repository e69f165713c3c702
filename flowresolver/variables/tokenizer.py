"""
Delimiter splitting and reference scanning for {{...}} templates.
"""

from dataclasses import dataclass
from typing import Iterator, List

OPEN_DELIMITER = '{{'
CLOSE_DELIMITER = '}}'


def tokenize(text: str, delimiter: str) -> List[str]:
    """
    Split text on every occurrence of a literal delimiter.

    Args:
        text: Text to split
        delimiter: Literal (non-empty) substring to split on

    Returns:
        n+1 fragments for n occurrences; empty fragments are kept
    """
    fragments = []
    remainder = text

    index = remainder.find(delimiter)
    while index >= 0:
        fragments.append(remainder[:index])
        remainder = remainder[index + len(delimiter):]
        index = remainder.find(delimiter)

    fragments.append(remainder)
    return fragments


@dataclass(frozen=True)
class Token:
    """A literal run of text or a {{reference}} found by scan()."""
    kind: str  # 'literal' or 'reference'
    value: str
    start: int


LITERAL = 'literal'
REFERENCE = 'reference'


def scan(text: str) -> Iterator[Token]:
    """
    Scan a template left to right into literal and reference tokens.

    Each open delimiter is paired with the next close delimiter. Text that
    cannot be paired (a stray close, or an open with no close after it) is
    yielded as a literal.
    """
    position = 0
    literal_start = 0

    while position < len(text):
        open_index = text.find(OPEN_DELIMITER, position)
        if open_index < 0:
            break
        close_index = text.find(CLOSE_DELIMITER, open_index + len(OPEN_DELIMITER))
        if close_index < 0:
            break

        if open_index > literal_start:
            yield Token(LITERAL, text[literal_start:open_index], literal_start)
        name = text[open_index + len(OPEN_DELIMITER):close_index]
        yield Token(REFERENCE, name, open_index)

        position = close_index + len(CLOSE_DELIMITER)
        literal_start = position

    if literal_start < len(text):
        yield Token(LITERAL, text[literal_start:], literal_start)


def extract_references(text: str) -> List[str]:
    """Return reference names in order of appearance, duplicates included."""
    return [token.value for token in scan(text) if token.kind == REFERENCE]

