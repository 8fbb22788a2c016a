"""OS exclusive-lock primitive.

POSIX uses fcntl.flock (whole-file advisory lock). Windows uses
msvcrt.locking on the first byte of the file.
"""

from __future__ import annotations

import errno
import logging
import sys
from typing import IO

if sys.platform == "win32":
    import msvcrt
else:
    import fcntl

logger = logging.getLogger(__name__)

__all__ = ["lock_exclusive", "unlock"]


def lock_exclusive(handle: IO, blocking: bool = False) -> bool:
    """Try to take an exclusive lock on an open file.

    Returns False on contention (non-blocking) or when the OS call fails.
    """
    try:
        if sys.platform == "win32":
            _lock_windows(handle, blocking)
        else:
            flags = fcntl.LOCK_EX if blocking else fcntl.LOCK_EX | fcntl.LOCK_NB
            fcntl.flock(handle.fileno(), flags)
    except BlockingIOError:
        logger.debug("Lock on %s is held elsewhere", getattr(handle, "name", handle))
        return False
    except OSError as e:
        logger.debug("Lock call failed on %s: %s", getattr(handle, "name", handle), e)
        return False
    return True


def unlock(handle: IO) -> None:
    """Release a lock taken with lock_exclusive. Raises OSError on failure."""
    if sys.platform == "win32":
        handle.seek(0)
        msvcrt.locking(handle.fileno(), msvcrt.LK_UNLCK, 1)
    else:
        fcntl.flock(handle.fileno(), fcntl.LOCK_UN)


def _lock_windows(handle: IO, blocking: bool) -> None:
    handle.seek(0)
    if not blocking:
        msvcrt.locking(handle.fileno(), msvcrt.LK_NBLCK, 1)
        return
    # LK_LOCK gives up after ~10 seconds with EDEADLOCK; keep waiting.
    while True:
        try:
            msvcrt.locking(handle.fileno(), msvcrt.LK_LOCK, 1)
            return
        except OSError as e:
            if e.errno != errno.EDEADLOCK:
                raise
