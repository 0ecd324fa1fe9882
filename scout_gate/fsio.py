from __future__ import annotations

import json
import os
import tempfile
from concurrent.futures import ThreadPoolExecutor
from concurrent.futures import TimeoutError as FutureTimeout
from pathlib import Path
from typing import Any, Callable, TypeVar

T = TypeVar("T")


class IOTimeout(OSError):
    pass


def run_with_timeout(fn: Callable[..., T], timeout: float, *args: Any) -> T:
    """Run ``fn`` in a worker thread and give up after ``timeout`` seconds.

    The worker is not killed on timeout; the caller just stops waiting.
    """
    pool = ThreadPoolExecutor(max_workers=1, thread_name_prefix="scoutgate-io")
    try:
        future = pool.submit(fn, *args)
        try:
            return future.result(timeout=timeout)
        except FutureTimeout:
            raise IOTimeout(f"I/O did not finish within {timeout}s") from None
    finally:
        pool.shutdown(wait=False)


def stage_text(path: str | Path, text: str) -> Path:
    """Write ``text`` next to ``path`` under a temporary name and return it."""
    target = Path(path)
    target.parent.mkdir(parents=True, exist_ok=True)
    fd, tmp = tempfile.mkstemp(prefix=f".{target.name}.", suffix=".tmp", dir=target.parent)
    try:
        with os.fdopen(fd, "w", encoding="utf-8") as f:
            f.write(text)
            f.flush()
            os.fsync(f.fileno())
    except BaseException:
        Path(tmp).unlink(missing_ok=True)
        raise
    return Path(tmp)


def stage_bytes(path: str | Path, data: bytes) -> Path:
    target = Path(path)
    target.parent.mkdir(parents=True, exist_ok=True)
    fd, tmp = tempfile.mkstemp(prefix=f".{target.name}.", suffix=".tmp", dir=target.parent)
    try:
        with os.fdopen(fd, "wb") as f:
            f.write(data)
            f.flush()
            os.fsync(f.fileno())
    except BaseException:
        Path(tmp).unlink(missing_ok=True)
        raise
    return Path(tmp)


def atomic_write_text(path: str | Path, text: str) -> Path:
    tmp = stage_text(path, text)
    os.replace(tmp, path)
    return Path(path)


def atomic_write_json(path: str | Path, data: Any) -> Path:
    return atomic_write_text(path, json.dumps(data, indent=2, sort_keys=True) + "\n")
