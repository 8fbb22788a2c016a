"""
Advisory file locking for multi-process safety.

Problem: independent processes writing the same cache file can interleave
and corrupt it, and there is no coordinator to ask for permission.

Solution: an OS exclusive lock (flock/msvcrt) held on an open handle. Either
the file itself is locked (LockMethod.SELF) or a sidecar `<file>.lock` is
(LockMethod.EXTERNAL). Sidecar files are never removed: their existence
says nothing about whether a lock is currently held.

Usage:
    with FileLock(cache_path, LockMethod.EXTERNAL):
        cache_path.write_bytes(payload)

    lock = FileLock.open(cache_path, "ab", max_attempts=5, retry_delay=0.2)
    if lock is not None:
        try:
            lock.handle.write(payload)
        finally:
            lock.unlock()

Always release explicitly or through a `with` block. Release on garbage
collection is a last resort and its timing is not guaranteed.
"""

from __future__ import annotations

import logging
import os
from contextlib import contextmanager
from enum import Enum
from pathlib import Path
from typing import IO, Iterator

from . import oslock
from .config import MIN_ATTEMPTS, MIN_RETRY_DELAY, LockConfig, load_config
from .errors import LockNotAcquiredError
from .paths import resolve_lock_path
from .retry import poll

logger = logging.getLogger(__name__)


class LockMethod(str, Enum):
    SELF = "self"  # lock the file itself
    EXTERNAL = "external"  # lock "<file>.lock"


class FileLock:
    """Owns at most one open handle and the exclusive lock on it.

    One instance is meant to be driven by one thread at a time. Two
    instances on the same path, even in the same process, contend through
    the OS like two processes would on POSIX.
    """

    def __init__(self, path: str | os.PathLike, method: LockMethod | str = LockMethod.EXTERNAL,
                 mode: str = "wb", temp_dir: str | os.PathLike | None = None):
        self._handle: IO[bytes] | None = None
        self._locked = False
        self._max_attempts = 3
        self._retry_delay = 0.1

        self._method = LockMethod(method)
        self._path = resolve_lock_path(path, self._method is LockMethod.EXTERNAL, temp_dir)
        # External locks pick their mode per attempt
        self._mode_intent: str | None = mode if self._method is LockMethod.SELF else None
        self._mode: str | None = self._mode_intent

    def __del__(self):
        # Partially constructed instances have nothing to release
        if getattr(self, "_handle", None) is not None:
            self.unlock()

    def __enter__(self) -> "FileLock":
        if not self.obtain_lock():
            raise LockNotAcquiredError(self._path, self._max_attempts)
        return self

    def __exit__(self, *exc) -> None:
        self.unlock()

    def __repr__(self) -> str:
        state = "locked" if self._locked else "unlocked"
        return f"<FileLock {self._method.value} {str(self._path)!r} {state}>"

    @classmethod
    def open(cls, path: str | os.PathLike, mode: str, max_attempts: int | None = None,
             retry_delay: float | None = None) -> "FileLock | None":
        """
        Open and lock `path` itself in `mode`.

        max_attempts: 0/None for a single non-blocking attempt,
                      1 for a single blocking attempt,
                      N > 1 for N non-blocking attempts `retry_delay` apart.

        Returns the held lock, or None if it could not be acquired.
        """
        lock = cls(path, LockMethod.SELF, mode)
        attempts = max(0, int(max_attempts or 0))
        if attempts > 1:
            lock.max_attempts = attempts
            delay = max(0.0, float(retry_delay or 0))
            if delay > 0:
                lock.retry_delay = delay
            lock.obtain_lock()
        else:
            lock.try_lock(blocking=attempts == 1)

        if lock.locked:
            return lock

        lock.unlock()
        return None

    @property
    def handle(self) -> IO[bytes] | None:
        return self._handle

    @property
    def method(self) -> LockMethod:
        return self._method

    @property
    def path(self) -> Path:
        """The file that is opened and locked."""
        return self._path

    @property
    def mode(self) -> str | None:
        """Mode of the last open, or the configured mode for self locks."""
        return self._mode

    @property
    def locked(self) -> bool:
        return self._locked

    @property
    def max_attempts(self) -> int:
        return self._max_attempts

    @max_attempts.setter
    def max_attempts(self, number: int) -> None:
        self._max_attempts = max(MIN_ATTEMPTS, int(number))

    @property
    def retry_delay(self) -> float:
        return self._retry_delay

    @retry_delay.setter
    def retry_delay(self, seconds: float) -> None:
        self._retry_delay = max(MIN_RETRY_DELAY, float(seconds))

    def configure(self, config: LockConfig) -> "FileLock":
        """Apply a retry policy from config."""
        self.max_attempts = config.max_attempts
        self.retry_delay = config.retry_delay
        return self

    def obtain_lock(self) -> bool:
        """Up to max_attempts non-blocking attempts, retry_delay apart."""
        return poll(lambda: self.try_lock(False), self._max_attempts, self._retry_delay)

    def try_lock(self, blocking: bool = False) -> bool:
        """Single lock attempt. A blocking attempt waits without timeout."""
        if self._locked:
            return True

        if self._open_handle():
            try:
                self._locked = oslock.lock_exclusive(self._handle, blocking)
            except BaseException:
                # interrupted while waiting, e.g. KeyboardInterrupt
                self.unlock()
                raise

        if not self._locked:
            self.unlock()

        return self._locked

    def unlock(self) -> "FileLock":
        """Release the lock and close the handle. Never raises."""
        handle = self._handle
        if handle is not None:
            for step in (handle.flush, lambda: oslock.unlock(handle), handle.close):
                try:
                    step()
                except (OSError, ValueError) as e:
                    logger.debug("Ignoring error while releasing %s: %s", self._path, e)

        self._locked = False
        self._handle = None
        return self

    def effective_mode(self) -> str:
        """Mode the next open will use.

        Self locks keep the mode they were created with. External locks read
        an existing sidecar and create a missing one.
        """
        if self._mode_intent:
            return self._mode_intent
        return "rb" if self._path.is_file() else "wb"

    def _open_handle(self) -> bool:
        mode = self.effective_mode()
        handle = self._try_open(mode)
        if handle is None and self._method is LockMethod.EXTERNAL and mode == "wb":
            # Another process won the race to create the sidecar
            mode = "rb"
            handle = self._try_open(mode)
        if handle is None:
            return False
        self._mode = mode
        self._handle = handle
        return True

    def _try_open(self, mode: str) -> IO[bytes] | None:
        try:
            return open(self._path, mode)
        except OSError as e:
            logger.debug("Could not open %s with mode %r: %s", self._path, mode, e)
            return None


@contextmanager
def file_lock(path: str | os.PathLike, method: LockMethod | str = LockMethod.EXTERNAL, *,
              blocking: bool = True, config: LockConfig | None = None) -> Iterator[FileLock]:
    """
    Hold a lock for the duration of a `with` block.

    Usage:
        with file_lock(entity_path):
            entity_path.write_text(new_content)

    blocking=True waits for the lock; otherwise the retry policy from
    `config` (or load_config()) is used. Raises LockNotAcquiredError.
    """
    if blocking:
        lock = FileLock(path, method, temp_dir=config.temp_dir if config else None)
        acquired = lock.try_lock(blocking=True)
    else:
        config = config or load_config()
        lock = FileLock(path, method, temp_dir=config.temp_dir).configure(config)
        acquired = lock.obtain_lock()

    if not acquired:
        raise LockNotAcquiredError(lock.path, None if blocking else lock.max_attempts)
    try:
        yield lock
    finally:
        lock.unlock()


def safe_append(path: str | os.PathLike, content: str):
    """Append to a file with locking."""
    with file_lock(path):
        with open(path, "a") as f:
            f.write(content)


def safe_write(path: str | os.PathLike, content: str):
    """Write to a file atomically (write to temp, rename) under a lock."""
    path = Path(path)
    tmp_path = path.with_name(path.name + ".tmp")
    with file_lock(path):
        tmp_path.write_text(content)
        os.replace(tmp_path, path)
