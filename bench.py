"""
Fire many benchmark clients at the file server at once.

Usage:
  python bench.py [-H host] [-p port] [-r repeat] [--root dir] stem [stem ...]
"""

from __future__ import annotations

import argparse
import logging
import sys
import threading
import time
from typing import List, Sequence, Tuple

import client
from request import TESTFILES_DIR

log = logging.getLogger(__name__)


def run(stems: Sequence[str], host: str = client.HOST, port: int = client.PORT,
        root: str = TESTFILES_DIR, repeat: int = 1,
        failures: List[Tuple[str, BaseException]] | None = None) -> List[Tuple[str, float]]:
    """Fetch every stem *repeat* times concurrently, one thread per fetch.

    Returns ``(stem, elapsed)`` pairs in completion order. Fetches that raise
    are appended to *failures* when given.
    """
    results: List[Tuple[str, float]] = []
    lock = threading.Lock()

    def worker(stem: str):
        try:
            elapsed = client.fetch(stem, host, port, root)
        except Exception as exc:
            log.debug("fetch %s failed: %s", stem, exc)
            if failures is not None:
                with lock:
                    failures.append((stem, exc))
            return
        with lock:
            results.append((stem, elapsed))

    threads = [threading.Thread(target=worker, args=(stem,))
               for _ in range(repeat) for stem in stems]
    for t in threads:
        t.start()
    for t in threads:
        t.join()
    return results


def main(argv=None):
    ap = argparse.ArgumentParser(description="Run many file-fetch clients concurrently.")
    ap.add_argument("stems", nargs="+", help="test file stems, e.g. 1 2 3")
    ap.add_argument("-H", "--host", default=client.HOST)
    ap.add_argument("-p", "--port", type=int, default=client.PORT)
    ap.add_argument("-r", "--repeat", type=int, default=1, help="fetches per stem")
    ap.add_argument("--root", default=TESTFILES_DIR, help="directory holding the test files")
    args = ap.parse_args(argv)

    failures: List[Tuple[str, BaseException]] = []
    t0 = time.monotonic()
    results = run(args.stems, args.host, args.port, args.root, args.repeat, failures)
    total = time.monotonic() - t0

    for stem, elapsed in results:
        print(client.format_result(elapsed, stem))
    for stem, exc in failures:
        print(f"failed: {exc} ({stem})", file=sys.stderr)

    mean = sum(e for _, e in results) / len(results) if results else 0.0
    print(f"total: {total:.5f}s for {len(results)} fetches, mean {mean:.5f}s")
    return 1 if failures else 0


if __name__ == "__main__":
    logging.basicConfig(level=logging.WARNING,
                        format="%(asctime)s [%(levelname)s] %(message)s",
                        datefmt="%H:%M:%S")
    sys.exit(main())
