"""
Request line shared by the file server and the benchmark client.

A request is a single file path terminated by a newline. The server answers
with the raw file contents and closes the connection.
"""

from __future__ import annotations

import socket

# === Constants ===

BUFSIZE = 4096  # bytes, max request incl. newline; also the file chunk size
TESTFILES_DIR = "/tmp/testfiles"
ENCODING = "utf-8"


class RequestError(ValueError):
    """Raised when a peer sends something that is not a request line."""


def request_path(stem: str, root: str = TESTFILES_DIR) -> str:
    """Return the path of test file *stem* under *root*."""
    return f"{root.rstrip('/')}/{stem}.c"


def encode_request(path: str) -> bytes:
    return (path + "\n").encode(ENCODING)


def read_request(sock: socket.socket) -> str:
    """Read one request line from *sock* and return the path it names."""
    buf = bytearray()
    while len(buf) < BUFSIZE - 1:
        chunk = sock.recv(BUFSIZE - 1 - len(buf))
        if not chunk:
            break
        buf += chunk
        if buf.endswith(b"\n"):
            break

    if not buf:
        raise RequestError("empty request")
    if buf.endswith(b"\n"):
        del buf[-1]
    elif len(buf) >= BUFSIZE - 1:
        raise RequestError("request too long")

    try:
        path = buf.decode(ENCODING)
    except UnicodeDecodeError as exc:
        raise RequestError(f"undecodable request: {exc}") from exc
    if not path:
        raise RequestError("empty request")
    return path
