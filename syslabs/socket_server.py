"""Server that answers search requests over a Unix domain socket."""

from __future__ import annotations

import contextlib
import os
import socket
import sys
import time
from collections.abc import Sequence

from syslabs.protocol import (
    CHUNK_SIZE,
    EOT,
    INVALID_FILE,
    US,
    iter_chunks,
    line_matches,
    parse_request,
)
from syslabs.socket_client import socket_address

_US = US.encode()
_EOT = EOT.encode()


class DomainSocketServer:
    """Serves lines of a CSV file that match a client's search terms."""

    def __init__(
        self,
        socket_path: str | os.PathLike,
        abstract: bool = True,
        write_delay: float = 0.02,
    ):
        self.socket_path = os.fspath(socket_path)
        self.abstract = abstract
        self.write_delay = write_delay
        self.address = socket_address(self.socket_path, abstract)
        self._sock: socket.socket | None = None
        self._closed = False

    def bind(self) -> None:
        """Create the listening socket, replacing a stale socket file."""
        if not self.abstract:
            with contextlib.suppress(FileNotFoundError):
                os.unlink(self.socket_path)
        sock = socket.socket(socket.AF_UNIX, socket.SOCK_STREAM)
        backlog = max((os.cpu_count() or 1) - 1, 0)
        try:
            sock.bind(self.address)
            sock.listen(backlog)
        except BaseException:
            sock.close()
            raise
        self._sock = sock
        self._closed = False
        print(f"SERVER STARTED\n\tMAX CLIENTS: {backlog}", file=sys.stderr)

    def serve_client(self, conn: socket.socket) -> int:
        """Answer one request on ``conn``; return the number of bytes sent."""
        path, operation, terms = parse_request(self._receive_request(conn))
        print(f"PATH: {path}", file=sys.stderr)
        print(f"OPERATION: {operation}", file=sys.stderr)
        print("SEEKING: " + ", ".join(terms))

        try:
            csv_file = open(path, "rb")
        except OSError:
            conn.sendall(INVALID_FILE.encode())
            return len(INVALID_FILE)

        total = 0
        with csv_file:
            for raw in csv_file:
                line = raw[:-1] if raw.endswith(b"\n") else raw
                text = line.decode("utf-8", "surrogateescape")
                if line_matches(text, operation, terms):
                    total += self._send(conn, line + _US)
        conn.sendall(_EOT)
        total += len(_EOT)
        print(f"BYTES SENT: {total}")
        return total

    def serve_forever(self) -> None:
        """Accept clients one at a time until the server is closed."""
        if self._sock is None:
            self.bind()
        sock = self._sock
        while True:
            try:
                conn, _ = sock.accept()
            except OSError as exc:
                if self._closed:
                    return
                print(exc.strerror or exc, file=sys.stderr)
                continue
            with conn:
                print("CLIENT CONNECTED", file=sys.stderr)
                try:
                    self.serve_client(conn)
                except (ValueError, ConnectionError) as exc:
                    print(f"client error: {exc}", file=sys.stderr)

    def close(self) -> None:
        """Stop listening and remove the socket file."""
        self._closed = True
        if self._sock is not None:
            with contextlib.suppress(OSError):
                self._sock.shutdown(socket.SHUT_RDWR)
            self._sock.close()
            self._sock = None
            if not self.abstract:
                with contextlib.suppress(FileNotFoundError):
                    os.unlink(self.socket_path)

    def __enter__(self) -> DomainSocketServer:
        return self

    def __exit__(self, *args) -> None:
        self.close()

    def _send(self, conn: socket.socket, data: bytes) -> int:
        sent = 0
        for chunk in iter_chunks(data):
            conn.sendall(chunk)
            sent += len(chunk)
            if self.write_delay:
                time.sleep(self.write_delay)
        return sent

    @staticmethod
    def _receive_request(conn: socket.socket) -> str:
        buffer = b""
        while _EOT not in buffer:
            chunk = conn.recv(CHUNK_SIZE)
            if not chunk:
                break
            buffer += chunk
        return buffer.decode("utf-8", "surrogateescape")


def main(argv: Sequence[str] | None = None) -> int:
    """Serve searches on the socket named by the first argument."""
    args = list(sys.argv[1:] if argv is None else argv)
    if not args:
        print("usage: text-server SOCKET", file=sys.stderr)
        return 1
    server = DomainSocketServer(args[0])
    try:
        server.serve_forever()
    except KeyboardInterrupt:
        return 0
    except OSError as exc:
        print(exc.strerror or exc, file=sys.stderr)
        return 1
    finally:
        server.close()
    return 0


if __name__ == "__main__":
    sys.exit(main())