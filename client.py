"""
Benchmark client: time how long the server takes to send back one file.

Usage:
  python client.py <stem>
Requests /tmp/testfiles/<stem>.c, reads the reply line by line and prints the
elapsed wall-clock time.
"""

from __future__ import annotations

import socket
import sys
import time
from typing import Callable, Optional

from request import TESTFILES_DIR, encode_request, request_path

HOST = "localhost"
PORT = 8080


def fetch(stem: str, host: str = HOST, port: int = PORT, root: str = TESTFILES_DIR,
          on_line: Optional[Callable[[bytes], None]] = None) -> float:
    """Request test file *stem* and return the elapsed seconds.

    Each response line is passed to *on_line* if given and dropped otherwise.
    """
    start = time.monotonic()

    sock = socket.create_connection((host, port))
    try:
        sock.sendall(encode_request(request_path(stem, root)))
        with sock.makefile("rb") as reader:
            for line in reader:
                if on_line is not None:
                    on_line(line)
    finally:
        sock.close()

    return time.monotonic() - start


def format_result(elapsed: float, stem: str) -> str:
    return f"elapsed: {elapsed} ({stem})"


def main(argv=None):
    argv = sys.argv[1:] if argv is None else argv
    if len(argv) != 1:
        print(f"Usage: {sys.argv[0]} <stem>")
        return 1

    stem = argv[0]
    elapsed = fetch(stem)
    print(format_result(elapsed, stem))
    return 0


if __name__ == "__main__":
    sys.exit(main())
