# syslabs

A handful of small systems tools, usable from the command line or as a
library:

- `syslabs.calculator`: evaluates an arithmetic expression given as
  separate command-line words, with `x` for multiplication and `/` for
  division.
- `syslabs.mmap_fstream`: `MmapFileStream`, a character-at-a-time file
  stream backed by a memory-mapped page (files may be at most 4096 bytes).
- `syslabs.protocol`: the request format shared by the search client and
  server, and the line-matching rules.
- `syslabs.socket_server` / `syslabs.socket_client`: a server that searches
  a CSV file for matching lines and a client that asks for them, talking
  over a Unix domain socket (abstract names by default, Linux only).
- `syslabs.shm_search`: reads a file, splits its lines across worker
  threads and reports the lines matching the search terms.

## Installation

```
pip install .
```

Requires Python 3.10 or later. There are no third-party dependencies.

## Calculator

Each number and operator is its own argument; quote `/` only if your
shell needs it.

```
$ syslabs-calculate 2 + 3 x 4
14
$ syslabs-calculate 10 / 4 - 1
1.5
```

From Python:

```python
from syslabs.calculator import apply_operator, evaluate

evaluate(["2", "+", "3", "x", "4"])   # 14.0
apply_operator("-", 2.0, 10.0)        # 8.0  (value2 - value1)
```

How expressions are read:

- A word that starts with a non-zero number is an operand. Any other word
  is an operator, judged by its first character; words starting with
  something other than `+`, `-`, `x` or `/` are ignored. A literal `0` is
  therefore not taken as an operand.
- A pending `x` or `/` is applied as soon as a `+` or `-` arrives. The
  operators left at the end are applied from the right, so
  `10 - 2 - 3` gives `11`.
- Division by zero gives `inf`, `-inf` or `nan`.
- A malformed expression raises `ValueError` from `evaluate`; the command
  prints `error: ...` and exits with status 1.

## Memory-mapped file stream

```python
from syslabs.mmap_fstream import MmapFileStream, OpenMode

with MmapFileStream("notes.txt") as stream:
    for ch in "abcd":
        stream.put(ch)

with MmapFileStream("notes.txt", OpenMode.IN) as stream:
    print(stream.size())          # 4
    text = ""
    while ch := stream.get():
        text += ch
    print(text)                   # abcd

with MmapFileStream("notes.txt", OpenMode.IN | OpenMode.OUT | OpenMode.ATE) as stream:
    stream.put("e")               # appended; size() is now 5
```

- The default mode is `OpenMode.IN | OpenMode.OUT`; `OpenMode.ATE` starts
  the cursor at the end of the file. A missing file is created.
- `get()` returns the next character, or `""` at the end of the file.
- `put(c)` writes one character at the cursor and returns the stream, so
  calls can be chained; writing past the end grows the file.
- `open()` does nothing if a file is already open; `close()` saves the
  changes and trims the file to `size()` bytes.
- Reading a stream not opened with `IN`, or writing one not opened with
  `OUT`, raises `io.UnsupportedOperation`. Using a closed stream, opening a
  file over 4096 bytes for writing, or growing past 4096 bytes raises
  `ValueError`.

## Searching a CSV file over a socket

Start the server with a socket name:

```
$ syslabs-text-server csv_socket
```

Then, from another terminal, ask for lines of a file that contain the
search terms. Join terms with `+` for "any of" or `x` for "all of"; the two
cannot be mixed in one request.

```
$ syslabs-text-client csv_socket data.csv apple + pear
$ syslabs-text-client csv_socket data.csv apple x red
```

The client prints `DONE WRITING` once the request is sent, then each
matching line with its number, then `Done reading...`. A file the server
cannot open is reported as `INVALID FILE` and the client exits with
status 1. The server handles one client at a time until interrupted.

From Python, `DomainSocketServer(path, abstract=True, write_delay=0.02)`
offers `bind()`, `serve_client(conn)`, `serve_forever()` and `close()`, and
can be used as a context manager. `DomainSocketClient(path).run(message)`
returns the matching lines and raises `InvalidFileError` when the server
could not open the file. `socket_address(path, abstract=True)` gives the
socket address used by both.

The request format lives in `syslabs.protocol`:

```python
from syslabs.protocol import build_request, parse_request, line_matches

request = build_request("data.csv", ["apple", "+", "pear"])
parse_request(request)      # ("data.csv", "OR", ["apple", "pear"])
line_matches("pear,green", "OR", ["apple", "pear"])   # True
```

`build_request` raises `MixedOperationError` when `+` and `x` are mixed.
Also available: `explode(text, delimiter)` and `iter_chunks(data, size=32)`.

## Threaded search

```
$ syslabs-csv-search data.csv apple + pear
```

The file's lines are divided among worker threads and the matching ones
are printed, numbered from 1. A file that cannot be read is reported as
`INVALID FILE`.

From Python:

```python
from syslabs.shm_search import parse_search_terms, search_lines, split_lines

terms = parse_search_terms(["apple", "x", "red"])    # ("AND", ["apple", "red"])
search_lines(split_lines("apple,red\npear,green\n"), terms, workers=4)
# ["apple,red"]
```

`shared_memory_store_size(buffer_size, page_size=4096)` gives the size, in
whole pages, of a store holding `buffer_size` bytes plus its size field.

## What this package does not do

- `syslabs-csv-search` reads the file itself. There is no separate server
  process and no shared memory between processes; only the first 4088
  bytes of the file (up to any NUL byte) are searched.
- The socket server serves clients one after another, not concurrently.

## Tests

```
pip install .[test]
pytest
```