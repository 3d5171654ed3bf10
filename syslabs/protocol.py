"""Wire format shared by the search client and server.

A request is the CSV path, an operation (``OR``, ``AND`` or ``n/a``) and the
search terms, each followed by a unit separator, with an end-of-transmission
character at the end. The server answers with each matching line followed
by a unit separator, then an end-of-transmission character.
"""

from __future__ import annotations

from collections.abc import Iterable, Iterator, Sequence
from typing import TypeVar

US = "\x1f"
EOT = "\x03"
INVALID_FILE = "INVALID FILE"
CHUNK_SIZE = 32

OR_TOKEN = "+"
AND_TOKEN = "x"

OP_OR = "OR"
OP_AND = "AND"
OP_NONE = "n/a"

_Data = TypeVar("_Data", str, bytes)


class MixedOperationError(ValueError):
    """Raised when a query mixes ``+`` and ``x``."""

    def __init__(self) -> None:
        super().__init__("Mixed boolean operations not presently supported")


def explode(text: _Data, delimiter: _Data) -> list[_Data]:
    """Split ``text`` on ``delimiter``, dropping empty fields."""
    return [field for field in text.split(delimiter) if field]


def build_request(path: str, terms: Iterable[str]) -> str:
    """Build a request from a path and terms joined by ``+`` or ``x``.

    Every second token is taken as a search term; the tokens between them are
    the operators.
    """
    tokens = list(terms)
    has_or = OR_TOKEN in tokens
    has_and = AND_TOKEN in tokens
    if has_or and has_and:
        raise MixedOperationError()
    if has_or:
        operation = OP_OR
    elif has_and:
        operation = OP_AND
    else:
        operation = OP_NONE
    fields = [path, operation, *tokens[::2]]
    return "".join(field + US for field in fields) + EOT


def parse_request(message: str) -> tuple[str, str, list[str]]:
    """Split a request into ``(path, operation, terms)``."""
    body = message.split(EOT, 1)[0]
    fields = explode(body, US)
    if len(fields) < 2:
        raise ValueError("malformed request: path and operation required")
    path, operation, *terms = fields
    return path, operation, terms


def line_matches(line: str, operation: str, terms: Sequence[str]) -> bool:
    """Whether ``line`` satisfies the search; unknown operations match nothing."""
    if operation == OP_NONE:
        return bool(terms) and terms[0] in line
    if operation == OP_OR:
        return any(term in line for term in terms)
    if operation == OP_AND:
        return bool(terms) and all(term in line for term in terms)
    return False


def iter_chunks(data: _Data, size: int = CHUNK_SIZE) -> Iterator[_Data]:
    """Yield consecutive slices of ``data`` at most ``size`` long."""
    if size <= 0:
        raise ValueError("chunk size must be positive")
    for start in range(0, len(data), size):
        yield data[start:start + size]