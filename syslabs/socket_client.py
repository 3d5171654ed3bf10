"""Client that sends a search request over a Unix domain socket."""

from __future__ import annotations

import os
import socket
import sys
from collections.abc import Sequence
from typing import TextIO

from syslabs.protocol import (
    CHUNK_SIZE,
    EOT,
    INVALID_FILE,
    US,
    MixedOperationError,
    build_request,
    iter_chunks,
)

_SUN_PATH_MAX = 108
_US = US.encode()
_EOT = EOT.encode()
_INVALID = INVALID_FILE.encode()


class InvalidFileError(Exception):
    """The server could not open the requested file."""


def socket_address(path: str | os.PathLike, abstract: bool = True) -> bytes:
    """Unix socket address for ``path``; abstract names start with a NUL byte."""
    raw = os.fsencode(path)[: _SUN_PATH_MAX - 1]
    return b"\0" + raw if abstract else raw


class DomainSocketClient:
    """Connects to a search server and prints the lines it returns."""

    def __init__(self, socket_path: str | os.PathLike, abstract: bool = True):
        self.socket_path = os.fspath(socket_path)
        self.abstract = abstract
        self.address = socket_address(self.socket_path, abstract)

    def run(self, message: str | bytes, out: TextIO | None = None) -> list[str]:
        """Send ``message`` and return the matching lines, numbering them on ``out``."""
        out = sys.stdout if out is None else out
        data = message.encode() if isinstance(message, str) else bytes(message)
        with socket.socket(socket.AF_UNIX, socket.SOCK_STREAM) as sock:
            sock.connect(self.address)
            print("SERVER CONNECTION ACCEPTED", file=sys.stderr)
            for chunk in iter_chunks(data):
                sock.sendall(chunk)
                if _EOT in chunk:
                    break
            print("DONE WRITING", file=out)
            return self._receive(sock, out)

    @staticmethod
    def _receive(sock: socket.socket, out: TextIO) -> list[str]:
        lines: list[str] = []
        buffer = b""
        total = 0
        done = False
        while not done:
            chunk = sock.recv(CHUNK_SIZE)
            total += len(chunk)
            if not chunk:
                break
            buffer += chunk
            while True:
                record, sep, rest = buffer.partition(_US)
                if _EOT in record:
                    print("Done reading...", file=out)
                    done = True
                    break
                if not sep:
                    break
                buffer = rest
                lines.append(record.decode("utf-8", "replace"))
                print(f"{len(lines)}\t{lines[-1]}", file=out)
            if not done and buffer == _INVALID:
                raise InvalidFileError(INVALID_FILE)
        print(f"BYTES RECEIVED: {total}", file=sys.stderr)
        return lines


def main(argv: Sequence[str] | None = None) -> int:
    """Run ``SOCKET FILE TERM [OP TERM ...]`` and print the matching lines."""
    args = list(sys.argv[1:] if argv is None else argv)
    if len(args) < 2:
        print("usage: text-client SOCKET FILE [TERM [+|x TERM]...]", file=sys.stderr)
        return 1
    socket_path, file_path, *terms = args
    try:
        message = build_request(file_path, terms)
    except MixedOperationError as exc:
        print(exc, file=sys.stderr)
        return 1
    try:
        DomainSocketClient(socket_path).run(message)
    except InvalidFileError:
        print(INVALID_FILE, file=sys.stderr)
        return 1
    except OSError as exc:
        print(exc.strerror or exc, file=sys.stderr)
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())