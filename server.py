"""
Threaded file server.

A client sends a file path terminated by a newline; the server resolves the
path, sends the file's contents back and closes the connection. Accepted
connections are queued for a bounded pool of worker threads.

Usage:
  python server.py [port]
"""

from __future__ import annotations

import logging
import os
import socket
import sys
import threading
from pathlib import Path
from typing import Set, Tuple

from pool import THREAD_POOL_SIZE, WorkerPool
from request import BUFSIZE, RequestError, read_request

log = logging.getLogger(__name__)

SERVERPORT = 8080
SERVER_BACKLOG = 100  # pending connections queued by the kernel
STOP_TIMEOUT = 5.0  # seconds close() waits for each worker


class FileServer:
    """Provides bind()/listen()/serve_forever() and hands each client to the pool."""

    # ------------------------------------------------------------------  core setup
    def __init__(self, pool_size: int = THREAD_POOL_SIZE, backlog: int = SERVER_BACKLOG,
                 root: str | os.PathLike | None = None):
        self._pool = WorkerPool(self.handle_connection, pool_size)
        self._sock = socket.socket(socket.AF_INET, socket.SOCK_STREAM)
        self._sock.setsockopt(socket.SOL_SOCKET, socket.SO_REUSEADDR, 1)
        self._backlog = backlog
        self._root = Path(root).resolve() if root is not None else None
        self._closed = threading.Event()
        self._clients: Set[socket.socket] = set()  # accepted, not yet closed
        self._clients_lock = threading.Lock()
        self.address: Tuple[str, int] | None = None

    def __enter__(self) -> "FileServer":
        return self

    def __exit__(self, *exc):
        self.close()

    # ------------------------------------------------------------------  listener
    def bind(self, host: str, port: int):
        self._sock.bind((host, port))
        self.address = self._sock.getsockname()[:2]

    def listen(self):
        self._sock.listen(self._backlog)
        self._pool.start()
        log.info("Listening on %s:%d", *self.address)

    def serve_forever(self):
        while not self._closed.is_set():
            log.debug("Waiting for connections")
            try:
                client, addr = self._sock.accept()
            except OSError:
                if self._closed.is_set():
                    break
                raise
            with self._clients_lock:
                if self._closed.is_set():
                    client.close()
                    break
                self._clients.add(client)
            log.info("Connected %s:%d", *addr)
            self._pool.submit(client)

    def close(self):
        if self._closed.is_set():
            return
        with self._clients_lock:
            self._closed.set()
        # shutdown() wakes a thread blocked in accept() on Linux; close() alone may not
        try:
            self._sock.shutdown(socket.SHUT_RDWR)
        except OSError:
            pass
        self._sock.close()
        # wake workers blocked reading from idle clients
        with self._clients_lock:
            pending = list(self._clients)
        for client in pending:
            try:
                client.shutdown(socket.SHUT_RDWR)
            except OSError:
                pass
        self._pool.stop(STOP_TIMEOUT)

    # ------------------------------------------------------------------  per connection
    def handle_connection(self, client: socket.socket):
        try:
            self._serve_client(client)
        finally:
            with self._clients_lock:
                self._clients.discard(client)

    def _serve_client(self, client: socket.socket):
        with client:
            try:
                path = read_request(client)
            except RequestError as exc:
                log.warning("Bad request: %s", exc)
                return
            except OSError as exc:
                log.error("recv error: %s", exc)
                return

            log.info("REQUEST: %s", path)
            actual = self._resolve(path)
            if actual is None:
                log.warning("bad path: %s", path)
                return

            try:
                fp = open(actual, "rb")
            except OSError as exc:
                log.warning("open error: %s (%s)", path, exc)
                return

            with fp:
                try:
                    self._send_file(client, fp)
                except OSError as exc:
                    log.error("send error on %s: %s", path, exc)
                    return
        log.info("Closing connection")

    def _resolve(self, path: str) -> Path | None:
        try:
            actual = Path(path).resolve(strict=True)
        except (OSError, RuntimeError, ValueError):  # missing file, symlink loop, NUL byte
            return None
        if self._root is not None and self._root != actual and self._root not in actual.parents:
            return None
        return actual

    @staticmethod
    def _send_file(client: socket.socket, fp):
        while True:
            chunk = fp.read(BUFSIZE)
            if not chunk:
                break
            log.debug("sending %d bytes", len(chunk))
            client.sendall(chunk)


def main(argv=None):
    argv = sys.argv[1:] if argv is None else argv
    port = SERVERPORT
    if argv:
        port = int(argv[0]) if argv[0].isdigit() else -1
    if len(argv) > 1 or not 0 <= port <= 65535:
        print("Usage:\n  python server.py [port]")
        return 1

    server = FileServer()
    server.bind("0.0.0.0", port)
    server.listen()
    try:
        server.serve_forever()
    except KeyboardInterrupt:
        log.info("Shutting down")
    finally:
        server.close()
    return 0


# ---------------------------------------------------------------------------  entry-point
if __name__ == "__main__":
    logging.basicConfig(level=logging.INFO,
                        format="%(asctime)s [%(levelname)s] %(message)s",
                        datefmt="%H:%M:%S")
    sys.exit(main())
