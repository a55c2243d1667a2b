"""Shared fixtures: a live file server on a free loopback port."""

import threading

import pytest

from server import FileServer


@pytest.fixture
def testfiles(tmp_path):
    root = tmp_path / "testfiles"
    root.mkdir()
    (root / "1.c").write_text("int main(void) {\n    return 0;\n}\n")
    (root / "big.c").write_bytes(b"/* filler */\n" * 2000)
    (root / "noeol.c").write_text("no trailing newline")
    (root / "empty.c").write_bytes(b"")
    return root


@pytest.fixture
def file_server():
    server = FileServer(pool_size=4)
    server.bind("127.0.0.1", 0)
    server.listen()
    thread = threading.Thread(target=server.serve_forever, daemon=True)
    thread.start()
    yield server
    server.close()
    thread.join(5)
