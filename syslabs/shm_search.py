"""Multi-threaded search over the lines of a CSV file held in a memory store."""

from __future__ import annotations

import math
import sys
from collections.abc import Sequence
from concurrent.futures import ThreadPoolExecutor

from syslabs.protocol import (
    AND_TOKEN,
    INVALID_FILE,
    OP_AND,
    OP_NONE,
    OP_OR,
    OR_TOKEN,
    explode,
    line_matches,
)
from syslabs.protocol import MixedOperationError as _ProtocolMixedOperationError
from syslabs.socket_client import InvalidFileError

__all__ = [
    "MixedOperationError",
    "shared_memory_store_size",
    "parse_search_terms",
    "split_lines",
    "search_lines",
    "main",
]

PAGE_SIZE = 4096
BUFFER_SIZE = 1024
_SIZE_FIELD = 8
DEFAULT_WORKERS = 4


class MixedOperationError(_ProtocolMixedOperationError):
    """Raised when ``+`` and ``x`` are both used in one search."""


def shared_memory_store_size(buffer_size: int, page_size: int = PAGE_SIZE) -> int:
    """Bytes, in whole pages, needed for a store holding ``buffer_size`` bytes."""
    if page_size <= 0:
        raise ValueError("page size must be positive")
    if buffer_size < 0:
        raise ValueError("buffer size must not be negative")
    return page_size * (1 + (buffer_size + _SIZE_FIELD) // page_size)


STORE_SIZE = shared_memory_store_size(BUFFER_SIZE)
STORE_CAPACITY = STORE_SIZE - _SIZE_FIELD


def parse_search_terms(args: Sequence[str]) -> tuple[str, list[str]]:
    """Turn ``TERM [OP TERM ...]`` into ``(operation, terms)``.

    ``+`` selects ``OR``, ``x`` selects ``AND``; with neither the operation is
    ``n/a``. Mixing the two raises :class:`MixedOperationError`.
    """
    tokens = list(args)
    if OR_TOKEN in tokens and AND_TOKEN in tokens:
        raise MixedOperationError()
    operation = OP_NONE
    for token in tokens[1:]:
        if token == OR_TOKEN:
            operation = OP_OR
            break
        if token == AND_TOKEN:
            operation = OP_AND
            break
    return operation, [term for term in tokens[::2] if term]


def split_lines(data: str) -> list[str]:
    """Split file contents into lines, dropping empty ones."""
    return explode(data, "\n")


def _search_chunk(chunk: Sequence[str], operation: str, terms: Sequence[str]) -> list[str]:
    matches = []
    for line in chunk:
        if line == INVALID_FILE:
            raise InvalidFileError(INVALID_FILE)
        if line_matches(line, operation, terms):
            matches.append(line)
    return matches


def search_lines(
    lines: Sequence[str],
    search_terms: tuple[str, Sequence[str]],
    workers: int = DEFAULT_WORKERS,
) -> list[str]:
    """Return the matching lines, searching equal shares of them in parallel.

    ``search_terms`` is an ``(operation, terms)`` pair as made by
    :func:`parse_search_terms`. A line reading ``INVALID FILE`` raises
    :class:`InvalidFileError`.
    """
    if workers <= 0:
        raise ValueError("workers must be positive")
    operation, terms = search_terms
    lines = list(lines)
    if not lines:
        return []
    step = math.ceil(len(lines) / workers)
    chunks = [lines[start:start + step] for start in range(0, len(lines), step)]
    with ThreadPoolExecutor(max_workers=workers) as pool:
        results = pool.map(lambda chunk: _search_chunk(chunk, operation, terms), chunks)
        return [line for matches in results for line in matches]


def _load_store(path: str) -> str:
    with open(path, "rb") as csv_file:
        data = csv_file.read(STORE_CAPACITY)
    data = data.split(b"\0", 1)[0]
    return data.decode("utf-8", "replace")


def main(argv: Sequence[str] | None = None) -> int:
    """Run ``FILE TERM [OP TERM ...]`` and print the numbered matching lines."""
    args = list(sys.argv[1:] if argv is None else argv)
    if len(args) < 2:
        print("usage: csv-client FILE TERM [+|x TERM]...", file=sys.stderr)
        return 1
    path, *terms = args
    try:
        search_terms = parse_search_terms(terms)
    except MixedOperationError as exc:
        print(exc, file=sys.stderr)
        return 1
    try:
        lines = split_lines(_load_store(path))
        matches = search_lines(lines, search_terms)
    except (OSError, InvalidFileError):
        print(INVALID_FILE, file=sys.stderr)
        return 1
    for number, line in enumerate(matches, start=1):
        print(f"{number}\t{line}")
    return 0


if __name__ == "__main__":
    sys.exit(main())